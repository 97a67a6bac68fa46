"""
应用层

将核心组装为可游玩的引擎。应用层可以使用核心层，
但核心层从不从这里导入。

Services:
    RoundEngine: 意图、调度器、结算
    AutoPlayController: 连续回合
    RoundQueryService: 只读查询
    ConfigService: 配置档

Types:
    CommandResult / QueryResult: 返回给调用方的结果
    RoundResult / EngineSnapshot / PayTableRow: 数据传输对象
"""

from .types import (
    ResultStatus,
    CommandResult,
    QueryResult,
)
from .config_service import ConfigType, EngineConfig, LoggingConfig, ConfigService, get_config_service
from .dto import RoundResult, EngineSnapshot, PayTableRow
from .presentation import (
    EntranceRequest,
    FlipRequest,
    ResultDisplayRequest,
    PresentationGateway,
    ImmediatePresentation,
)
from .autoplay import AutoPlaySession, AutoPlayDecision, AutoPlayController
from .round_engine import RoundEngine, IDLE_STATUS
from .query_service import RoundQueryService, build_pay_table

__version__ = "1.0.0"

__all__ = [
    "ResultStatus",
    "CommandResult",
    "QueryResult",

    "ConfigType",
    "EngineConfig",
    "LoggingConfig",
    "ConfigService",
    "get_config_service",

    "RoundResult",
    "EngineSnapshot",
    "PayTableRow",

    "EntranceRequest",
    "FlipRequest",
    "ResultDisplayRequest",
    "PresentationGateway",
    "ImmediatePresentation",

    "AutoPlaySession",
    "AutoPlayDecision",
    "AutoPlayController",
    "RoundEngine",
    "IDLE_STATUS",
    "RoundQueryService",
    "build_pay_table",
]
