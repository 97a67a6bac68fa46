"""
状态机工厂
"""

from typing import Dict

from .types import RoundPhase, PhaseHandler
from .idle_handler import IdleHandler
from .round_start_handler import RoundStartHandler
from .reveal_handler import RevealHandler
from .result_handler import ResultHandler
from .round_state_machine import RoundStateMachine

__all__ = ['StateMachineFactory']


class StateMachineFactory:
    """构建配置好的回合状态机"""

    @staticmethod
    def _default_phases() -> Dict[RoundPhase, PhaseHandler]:
        return {
            RoundPhase.IDLE: IdleHandler(),
            RoundPhase.ROUND_START: RoundStartHandler(),
            RoundPhase.REVEAL: RevealHandler(),
            RoundPhase.RESULT: ResultHandler(),
        }

    @staticmethod
    def create_default_state_machine() -> RoundStateMachine:
        return RoundStateMachine(StateMachineFactory._default_phases())

    @staticmethod
    def create_custom_state_machine(custom_handlers: Dict[RoundPhase, PhaseHandler]) -> RoundStateMachine:
        """
        默认处理器，其中部分阶段被替换

        Args:
            custom_handlers: 覆盖默认值的处理器
        """
        phases = StateMachineFactory._default_phases()
        phases.update(custom_handlers)
        return RoundStateMachine(phases)
