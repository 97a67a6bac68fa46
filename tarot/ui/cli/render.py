"""CLI渲染模块.

将快照、结果与赔付表渲染为终端文本。所有方法都是纯函数，
仅依赖传入的对象。
"""

from typing import List, Optional, Sequence

from tarot.application.dto import EngineSnapshot, PayTableRow, RoundResult
from tarot.core.economy.money import format_money
from tarot.core.multipliers.analysis import TableAnalysis, describe_outcomes
from tarot.core.state_machine.types import SLOT_COUNT

_RARITY_MARK = {
    'dead': ' ',
    'common': '*',
    'rare': '#',
}


class CLIRenderer:
    """终端渲染器"""

    @staticmethod
    def render_header(profile: str) -> str:
        return "\n".join([
            "=== Tarot Three-Card ===",
            f"Profile: {profile}",
            "Commands: + / - (bet), p (play), 1 2 3 (reveal), a (auto-play), s (speed), q (quit)",
        ])

    @staticmethod
    def render_status_bar(snapshot: EngineSnapshot) -> str:
        """一行显示下注额、余额与模式"""
        parts = [
            f"Bet: {format_money(snapshot.bet)}",
            f"Balance: {format_money(snapshot.balance)}",
            f"Speed: {snapshot.speed.capitalize()}",
        ]
        if snapshot.auto_play_active:
            parts.append(f"Auto: {snapshot.auto_play_rounds_remaining} left")
        return " | ".join(parts)

    @staticmethod
    def render_cards(revealed_slots: Sequence[int], revealed_values: Sequence) -> str:
        """三张卡牌，背面朝上或显示其倍率"""
        faces: List[str] = []
        by_slot = dict(zip(revealed_slots, revealed_values))
        for slot in range(SLOT_COUNT):
            if slot in by_slot:
                faces.append(f"[x{by_slot[slot].normalize():f}]")
            else:
                faces.append(f"[ {slot + 1} ]")
        return "  ".join(faces)

    @staticmethod
    def render_flip(slot: int, value, rarity: str) -> str:
        mark = _RARITY_MARK.get(rarity, ' ')
        return f"Card {slot + 1}: x{value.normalize():f} {mark}".rstrip()

    @staticmethod
    def render_result(result: RoundResult) -> str:
        lines = ["--- Result ---", result.describe()]
        lines.append(f"Balance: {format_money(result.balance_after)}")
        return "\n".join(lines)

    @staticmethod
    def render_win(product, payout) -> str:
        return f"*** Win x{product.normalize():f} (+{format_money(payout)}) ***"

    @staticmethod
    def render_pay_table(rows: Sequence[PayTableRow]) -> str:
        lines = [f"{'Value':>8}  {'Weight':>8}  {'Chance':>8}  Rarity"]
        for row in rows:
            lines.append(f"{row.label:>8}  {row.chance:>8g}  {row.percent:>8}  {row.rarity.value}")
        return "\n".join(lines)

    @staticmethod
    def render_analysis(analysis: TableAnalysis, top: int = 5) -> str:
        lines = [
            f"Expected return: {analysis.expected_return * 100:.2f}%",
            f"House edge: {analysis.house_edge * 100:.2f}%",
            f"Hit frequency: {analysis.hit_frequency * 100:.2f}%",
            f"Profit frequency: {analysis.profit_frequency * 100:.2f}%",
            f"All dead: {analysis.all_dead_probability * 100:.4f}%",
            f"Max multiplier: x{analysis.max_multiplier.normalize():f} "
            f"({analysis.max_multiplier_probability * 100:.6f}%)",
            "Most likely round multipliers:",
        ]
        lines.extend(f"  {line}" for line in describe_outcomes(analysis, limit=top))
        return "\n".join(lines)

    @staticmethod
    def render_simulation_summary(rounds: int, total_bet, total_payout, balance,
                                  theoretical_return: Optional[float]) -> str:
        lines = [
            f"Rounds played: {rounds}",
            f"Total staked: {format_money(total_bet)}",
            f"Total paid: {format_money(total_payout)}",
            f"Net: {format_money(total_payout - total_bet)}",
        ]
        if total_bet:
            lines.append(f"Observed return: {float(total_payout / total_bet) * 100:.2f}%")
        if theoretical_return is not None:
            lines.append(f"Theoretical return: {theoretical_return * 100:.2f}%")
        lines.append(f"Final balance: {format_money(balance)}")
        return "\n".join(lines)
