"""数据传输对象.

引擎交给表现层与查询调用方的记录。
使用 Pydantic dataclass 确保数据验证和序列化的一致性。
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic.dataclasses import dataclass as pydantic_dataclass

from ..core.economy.money import format_money
from ..core.multipliers.types import Rarity


@pydantic_dataclass(frozen=True)
class RoundResult:
    """单个回合的结算记录.

    ``multipliers`` 按翻牌顺序排列，包含死牌。
    """
    round_id: str = Field(..., min_length=1, description="回合ID")
    bet: Decimal = Field(..., gt=0, description="本回合押注")
    multipliers: List[Decimal] = Field(..., min_length=3, max_length=3, description="按翻牌顺序排列的已翻开数值")
    product: Decimal = Field(..., ge=0, description="正倍率之积，没有则为0")
    payout: Decimal = Field(..., ge=0, description="乘积 x 下注额")
    balance_after: Decimal = Field(..., ge=0, description="派彩后的余额")
    auto_play: bool = Field(False, description="是否由自动游戏进行")
    timestamp: datetime = Field(default_factory=datetime.now, description="结算时间")

    @field_validator('multipliers')
    @classmethod
    def validate_multipliers(cls, v: List[Decimal]) -> List[Decimal]:
        if any(m < 0 for m in v):
            raise ValueError("multipliers cannot be negative")
        return v

    @property
    def is_win(self) -> bool:
        return self.payout > 0

    @property
    def net_change(self) -> Decimal:
        return self.payout - self.bet

    def win_text(self) -> str:
        """获胜回合的简短横幅，例如 ``Win x10 (+20.00)``"""
        return f"Win x{self.product.normalize():f} (+{format_money(self.payout)})"

    def describe(self) -> str:
        """结果面板的多行摘要"""
        values = " × ".join(f"{m.normalize():f}" for m in self.multipliers)
        return "\n".join([
            f"Bet: {format_money(self.bet)}",
            f"Multipliers: {values}",
            f"Product: {self.product.normalize():f}",
            f"Payout: {format_money(self.payout)}",
        ])


@pydantic_dataclass(frozen=True)
class EngineSnapshot:
    """前端绘制牌桌所需的全部信息"""
    phase: str = Field(..., description="当前回合阶段")
    bet: Decimal = Field(..., gt=0, description="当前下注额")
    balance: Decimal = Field(..., ge=0, description="当前余额")
    min_bet: Decimal = Field(..., gt=0, description="最小下注额")
    max_bet: Decimal = Field(..., gt=0, description="最大下注额")
    speed: str = Field(..., description="normal 或 fast")
    auto_play_active: bool = Field(False, description="自动游戏运行中")
    auto_play_rounds_remaining: int = Field(0, ge=0, description="尚未开始的自动回合数")
    auto_play_stop_requested: bool = Field(False, description="正在运行的自动游戏已请求停止")
    bet_controls_enabled: bool = Field(False, description="当前可以调整下注额")
    can_start_round: bool = Field(False, description="当前下注额可负担")
    round_id: Optional[str] = Field(None, description="进行中的回合")
    revealed_slots: List[int] = Field(default_factory=list, description="已翻开的位置，按翻牌顺序")
    revealed_values: List[Decimal] = Field(default_factory=list, description="已翻开的数值，按翻牌顺序")
    status_message: str = Field("", description="状态栏文本")
    rounds_completed: int = Field(0, ge=0, description="本次会话已结算的回合数")
    last_result: Optional[RoundResult] = Field(None, description="最近一次结算")


@pydantic_dataclass(frozen=True)
class PayTableRow:
    """赔付表的一行"""
    value: Decimal = Field(..., ge=0, description="倍率")
    chance: float = Field(..., ge=0, description="相对权重")
    probability: float = Field(..., ge=0, le=1, description="单张卡牌的概率")
    rarity: Rarity = Field(..., description="dead、common 或 rare")

    @property
    def label(self) -> str:
        return f"x{self.value.normalize():f}"

    @property
    def percent(self) -> str:
        return f"{self.probability * 100:.2f}%"
