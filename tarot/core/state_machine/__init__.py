"""
回合状态机模块

回合阶段、阶段处理器以及在阶段之间切换的状态机。
"""
from .types import (
    SLOT_COUNT,
    RoundPhase,
    SpeedMode,
    IntentType,
    PhaseEvent,
    Round,
    RoundContext,
    PhaseHandler,
)
from .base_phase_handler import BasePhaseHandler, VALID_TRANSITIONS
from .idle_handler import IdleHandler
from .round_start_handler import RoundStartHandler
from .reveal_handler import RevealHandler
from .result_handler import ResultHandler
from .round_state_machine import RoundStateMachine
from .state_machine_factory import StateMachineFactory


__all__ = [
    # Core Types
    'SLOT_COUNT',
    'RoundPhase',
    'SpeedMode',
    'IntentType',
    'PhaseEvent',
    'Round',
    'RoundContext',

    # Base handlers
    'PhaseHandler',
    'BasePhaseHandler',
    'VALID_TRANSITIONS',

    # Concrete Handlers
    'IdleHandler',
    'RoundStartHandler',
    'RevealHandler',
    'ResultHandler',

    # Main classes
    'RoundStateMachine',
    'StateMachineFactory',
]
