"""
自动游戏测试

通过回合引擎驱动，覆盖会话长度、停止请求、可负担性、速度处理
以及顺序翻牌。
"""

from decimal import Decimal

import pytest

from tarot.application import (
    AutoPlayController,
    AutoPlayDecision,
    AutoPlaySession,
    EngineConfig,
    ResultStatus,
)
from tarot.core.events import EventType
from tarot.core.state_machine import RoundPhase, SpeedMode

from tests.common.helpers import event_types, make_engine, status_messages


def finish_auto_round(deferred):
    """完成当前自动回合的入场动画、三次翻牌与结果显示"""
    deferred.complete_entrance()
    for _ in range(3):
        deferred.complete_flip()
    deferred.complete_result()


class TestAutoPlaySession:
    """测试会话记录"""

    def test_exactly_target_rounds(self, immediate):
        engine = make_engine([1], presentation=immediate)
        result = engine.on_toggle_auto_play_intent()
        assert result.success
        assert len(engine.round_history) == 10
        assert all(r.auto_play for r in engine.round_history)
        assert engine.economy.balance == Decimal(100)
        assert engine.phase is RoundPhase.IDLE
        assert not engine.auto_play.is_active
        session = engine.auto_play.last_session
        assert session.rounds_played == 10
        assert session.rounds_remaining == 0
        assert session.finish_reason == "round target reached"

    def test_configured_target(self, immediate):
        engine = make_engine([2], presentation=immediate, config=EngineConfig(auto_play_rounds_target=3))
        engine.on_toggle_auto_play_intent()
        assert len(engine.round_history) == 3
        assert engine.economy.balance == Decimal(100 - 3 + 3 * 8)

    def test_cards_revealed_in_slot_order(self, immediate):
        engine = make_engine([0, 2, 5], presentation=immediate)
        engine.on_toggle_auto_play_intent()
        assert [request.slot for request in immediate.flips] == [0, 1, 2] * 10

    def test_finished_event(self, immediate):
        engine = make_engine([1], presentation=immediate)
        engine.on_toggle_auto_play_intent()
        [started] = engine.event_bus.get_event_history(event_type=EventType.AUTO_PLAY_STARTED)
        assert started.data == {'rounds_target': 10, 'speed_before': "normal"}
        [finished] = engine.event_bus.get_event_history(event_type=EventType.AUTO_PLAY_FINISHED)
        assert finished.data == {'reason': "round target reached", 'rounds_played': 10}
        assert engine.status_message == "Auto-play finished"

    def test_status_counts_down(self, immediate):
        engine = make_engine([1], presentation=immediate)
        engine.on_toggle_auto_play_intent()
        messages = status_messages(engine)
        assert "Auto-play: 10 rounds (Fast)" in messages
        assert "Auto-play: 9 rounds left" in messages
        assert "Auto-play: 0 rounds left" in messages

    def test_can_run_again(self, immediate):
        engine = make_engine([1], presentation=immediate, config=EngineConfig(auto_play_rounds_target=2))
        engine.on_toggle_auto_play_intent()
        engine.on_toggle_auto_play_intent()
        assert len(engine.round_history) == 4
        assert engine.context.rounds_completed == 4

    def test_session_validation(self):
        with pytest.raises(ValueError):
            AutoPlaySession(rounds_target=0, rounds_remaining=0, speed_before_auto_play=SpeedMode.NORMAL)
        with pytest.raises(ValueError):
            AutoPlaySession(rounds_target=2, rounds_remaining=3, speed_before_auto_play=SpeedMode.NORMAL)

    def test_controller_validation(self, engine):
        with pytest.raises(ValueError):
            AutoPlayController(engine, rounds_target=0)

    def test_round_complete_without_session(self, engine):
        assert engine.auto_play.on_round_complete() is AutoPlayDecision.INACTIVE


class TestAutoPlaySpeed:
    """测试自动游戏期间与结束后的速度"""

    def test_fast_during_session(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        assert engine.speed is SpeedMode.FAST
        assert deferred.entrances[0][0].speed is SpeedMode.FAST

    def test_speed_restored(self, immediate):
        engine = make_engine([1], presentation=immediate)
        engine.on_toggle_auto_play_intent()
        assert engine.speed is SpeedMode.NORMAL
        speeds = [e.data['speed'] for e in engine.event_bus.get_event_history(event_type=EventType.SPEED_CHANGED)]
        assert speeds == ["fast", "normal"]

    def test_fast_speed_kept_when_it_was_chosen(self, immediate):
        engine = make_engine([1], presentation=immediate)
        engine.on_toggle_speed_intent()
        engine.on_toggle_auto_play_intent()
        assert engine.speed is SpeedMode.FAST
        assert len(engine.event_bus.get_event_history(event_type=EventType.SPEED_CHANGED)) == 1

    def test_speed_toggle_ignored(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        result = engine.on_toggle_speed_intent()
        assert result.status is ResultStatus.VALIDATION_ERROR
        assert engine.speed is SpeedMode.FAST


class TestStopRequest:
    """测试停止正在运行的会话"""

    def test_stop_after_current_round(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        finish_auto_round(deferred)
        assert engine.phase is RoundPhase.ROUND_START

        result = engine.on_toggle_auto_play_intent()
        assert result.success
        assert engine.auto_play.stop_requested
        assert engine.status_message == "Auto-play: will stop after this round"
        assert engine.phase is RoundPhase.ROUND_START

        finish_auto_round(deferred)
        assert engine.phase is RoundPhase.IDLE
        assert not engine.auto_play.is_active
        assert engine.auto_play.last_session.rounds_played == 2
        assert engine.auto_play.last_session.finish_reason == "stop requested"
        assert len(deferred.entrances) == 2
        assert EventType.AUTO_PLAY_STOP_REQUESTED in event_types(engine)

    def test_stop_requested_twice(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        engine.on_toggle_auto_play_intent()
        result = engine.on_toggle_auto_play_intent()
        assert result.success
        assert result.message == "stop already requested"
        assert len(engine.event_bus.get_event_history(event_type=EventType.AUTO_PLAY_STOP_REQUESTED)) == 1

    def test_stop_during_result_display(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        deferred.complete_entrance()
        for _ in range(3):
            deferred.complete_flip()
        assert engine.phase is RoundPhase.RESULT
        engine.on_toggle_auto_play_intent()
        deferred.complete_result()
        assert engine.phase is RoundPhase.IDLE
        assert engine.auto_play.last_session.rounds_played == 1

    def test_bet_controls_return_after_stop(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        engine.on_toggle_auto_play_intent()
        finish_auto_round(deferred)
        assert engine.bet_controls_enabled
        assert engine.on_adjust_bet_intent(1).success


class TestAffordability:
    """测试余额检查"""

    def test_refused_when_unaffordable(self, deferred):
        engine = make_engine([1], bet="5", balance="4", presentation=deferred)
        result = engine.on_toggle_auto_play_intent()
        assert result.status is ResultStatus.BUSINESS_RULE_VIOLATION
        assert result.error_code == "INSUFFICIENT_BALANCE"
        assert engine.status_message == "Insufficient balance for auto-play"
        assert not engine.auto_play.is_active
        assert not engine.context.auto_play_active
        assert deferred.entrances == []

    def test_stops_when_balance_runs_out(self, immediate):
        engine = make_engine([0], bet="1", balance="3", presentation=immediate)
        engine.on_toggle_auto_play_intent()
        assert len(engine.round_history) == 3
        assert engine.economy.balance == Decimal(0)
        assert engine.auto_play.last_session.finish_reason == "insufficient balance"
        assert engine.phase is RoundPhase.IDLE
        assert engine.speed is SpeedMode.NORMAL


class TestIntentsDuringAutoPlay:
    """测试会话运行期间的手动意图"""

    @pytest.fixture
    def running(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_toggle_auto_play_intent()
        deferred.complete_entrance()
        return engine

    def test_reveal_rejected(self, running, deferred):
        assert running.phase is RoundPhase.REVEAL
        assert running.on_reveal_intent(2).error_code == "INTENT_REJECTED"
        assert deferred.flip_slots == [0]

    def test_bet_change_rejected(self, running):
        assert running.on_adjust_bet_intent(1).error_code == "INTENT_REJECTED"
        assert running.economy.bet == Decimal(1)

    def test_start_rejected(self, running):
        assert running.on_start_round_intent().error_code == "INTENT_REJECTED"

    def test_snapshot(self, running):
        snapshot = running.snapshot()
        assert snapshot.auto_play_active
        assert snapshot.auto_play_rounds_remaining == 9
        assert not snapshot.bet_controls_enabled
        assert snapshot.speed == "fast"
        assert snapshot.status_message == "Auto-play: revealing cards"

    def test_cannot_start_mid_manual_round(self, deferred):
        engine = make_engine([1], presentation=deferred)
        engine.on_start_round_intent()
        result = engine.on_toggle_auto_play_intent()
        assert result.error_code == "INTENT_REJECTED"
        assert not engine.auto_play.is_active
