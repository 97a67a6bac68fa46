"""
配置服务

引擎与日志配置的统一入口。每种配置类型有若干命名配置档；
调用方按配置档名称获取，返回 QueryResult。
"""

import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from enum import Enum
from typing import Dict, Any, Optional, List

from ..core.economy.money import to_money
from ..core.persistence.stores import DEFAULT_STORAGE_KEY
from ..core.state_machine.types import SpeedMode
from .types import QueryResult


class ConfigType(Enum):
    """配置类型"""
    ENGINE = "engine"
    LOGGING = "logging"


@dataclass
class EngineConfig:
    """回合引擎常量"""
    min_bet: Decimal = Decimal("1")
    max_bet: Decimal = Decimal("10")
    default_bet: Decimal = Decimal("1")
    default_balance: Decimal = Decimal("100")
    auto_play_rounds_target: int = 10
    normal_flip_seconds: float = 0.15
    fast_flip_seconds: float = 0.08
    normal_entrance_seconds: float = 0.15
    fast_entrance_seconds: float = 0.08
    result_display_seconds: float = 1.5
    storage_key: str = DEFAULT_STORAGE_KEY
    table_path: Optional[str] = None

    def __post_init__(self):
        """规范化金额字段并检查下注额上下限"""
        self.min_bet = to_money(self.min_bet)
        self.max_bet = to_money(self.max_bet)
        self.default_bet = to_money(self.default_bet)
        self.default_balance = to_money(self.default_balance)

        if self.min_bet <= 0:
            raise ValueError(f"min_bet must be positive, got {self.min_bet}")
        if self.max_bet < self.min_bet:
            raise ValueError(f"max_bet ({self.max_bet}) must not be below min_bet ({self.min_bet})")
        if not self.min_bet <= self.default_bet <= self.max_bet:
            raise ValueError(f"default_bet ({self.default_bet}) must lie within [{self.min_bet}, {self.max_bet}]")
        if self.default_balance < 0:
            raise ValueError(f"default_balance cannot be negative, got {self.default_balance}")
        if self.auto_play_rounds_target < 1:
            raise ValueError(f"auto_play_rounds_target must be at least 1, got {self.auto_play_rounds_target}")
        for name in ('normal_flip_seconds', 'fast_flip_seconds', 'normal_entrance_seconds',
                     'fast_entrance_seconds', 'result_display_seconds'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

    def flip_seconds(self, speed: SpeedMode) -> float:
        return self.fast_flip_seconds if speed is SpeedMode.FAST else self.normal_flip_seconds

    def entrance_seconds(self, speed: SpeedMode) -> float:
        return self.fast_entrance_seconds if speed is SpeedMode.FAST else self.normal_entrance_seconds


@dataclass
class LoggingConfig:
    """日志配置"""
    log_level: str = 'WARNING'
    log_format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    enable_file_logging: bool = False
    log_file_path: str = "tarot.log"

    def apply(self) -> None:
        """按此配置档配置根日志记录器"""
        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if self.enable_file_logging:
            handlers.append(logging.FileHandler(self.log_file_path, encoding='utf-8'))
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.INFO),
            format=self.log_format,
            handlers=handlers,
            force=True,
        )


class ConfigService:
    """配置服务"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._configs: Dict[ConfigType, Dict[str, Any]] = {}
        self._load_default_configs()

    def _load_default_configs(self):
        self._configs[ConfigType.ENGINE] = {
            'default': EngineConfig(),
            'high_roller': EngineConfig(
                min_bet=Decimal("10"),
                max_bet=Decimal("100"),
                default_bet=Decimal("10"),
                default_balance=Decimal("1000"),
                storage_key="tarot_state_high_roller",
            ),
        }

        self._configs[ConfigType.LOGGING] = {
            'default': LoggingConfig(),
            'verbose': LoggingConfig(log_level='INFO'),
            'debug': LoggingConfig(log_level='DEBUG', enable_file_logging=True),
        }

        self.logger.debug("default configuration loaded")

    def _get_profile(self, config_type: ConfigType, profile: str, fallback: Any) -> Any:
        config_profiles = self._configs.get(config_type, {})
        if profile not in config_profiles:
            self.logger.warning(f"{config_type.value} profile '{profile}' not found, using default")
            profile = "default"
        return config_profiles.get(profile, fallback)

    def get_engine_config(self, profile: str = "default") -> QueryResult[EngineConfig]:
        """
        获取某个配置档的引擎配置

        Args:
            profile: 配置档名称（default、high_roller）

        Returns:
            携带 EngineConfig 的 QueryResult
        """
        try:
            return QueryResult.success_result(self._get_profile(ConfigType.ENGINE, profile, EngineConfig()))
        except Exception as e:
            return QueryResult.failure_result(
                f"failed to get engine config: {e}",
                error_code="GET_ENGINE_CONFIG_FAILED"
            )

    def get_logging_config(self, profile: str = "default") -> QueryResult[LoggingConfig]:
        """
        获取某个配置档的日志配置

        Args:
            profile: 配置档名称（default、verbose、debug）
        """
        try:
            return QueryResult.success_result(self._get_profile(ConfigType.LOGGING, profile, LoggingConfig()))
        except Exception as e:
            return QueryResult.failure_result(
                f"failed to get logging config: {e}",
                error_code="GET_LOGGING_CONFIG_FAILED"
            )

    def get_merged_config(self, config_type: ConfigType, profile: str = "default") -> QueryResult[Dict[str, Any]]:
        """以普通字典返回配置档"""
        if config_type == ConfigType.ENGINE:
            result = self.get_engine_config(profile)
        elif config_type == ConfigType.LOGGING:
            result = self.get_logging_config(profile)
        else:
            return QueryResult.failure_result(
                f"unsupported config type: {config_type}",
                error_code="UNSUPPORTED_CONFIG_TYPE"
            )
        if not result.success:
            return QueryResult.failure_result(result.message, result.error_code)
        return QueryResult.success_result(asdict(result.data))

    def update_config(self, config_type: ConfigType, profile: str, updates: Dict[str, Any]) -> QueryResult[bool]:
        """
        修改配置档的字段

        更新后的配置档会整体重新校验；校验失败时保持不变。

        Args:
            config_type: 配置类型
            profile: 配置档名称
            updates: 要修改的字段值
        """
        if config_type not in self._configs:
            return QueryResult.failure_result(
                f"config type {config_type} does not exist",
                error_code="CONFIG_TYPE_NOT_FOUND"
            )

        config_profiles = self._configs[config_type]
        if profile not in config_profiles:
            return QueryResult.failure_result(
                f"profile {profile} does not exist",
                error_code="CONFIG_PROFILE_NOT_FOUND"
            )

        current_config = config_profiles[profile]
        values = asdict(current_config)
        for key, value in updates.items():
            if key in values:
                values[key] = value
            else:
                self.logger.warning(f"unknown config field {key} for {config_type.value}.{profile}")

        try:
            config_profiles[profile] = type(current_config)(**values)
        except (ValueError, TypeError) as e:
            return QueryResult.failure_result(
                f"invalid update for {config_type.value}.{profile}: {e}",
                error_code="INVALID_CONFIG_UPDATE"
            )

        self.logger.info(f"config {config_type.value}.{profile} updated")
        return QueryResult.success_result(True)

    def list_available_profiles(self, config_type: ConfigType) -> QueryResult[List[str]]:
        if config_type not in self._configs:
            return QueryResult.failure_result(
                f"config type {config_type} does not exist",
                error_code="CONFIG_TYPE_NOT_FOUND"
            )
        return QueryResult.success_result(list(self._configs[config_type].keys()))


_config_service_instance: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """进程级 ConfigService"""
    global _config_service_instance
    if _config_service_instance is None:
        _config_service_instance = ConfigService()
    return _config_service_instance
