"""
终端前端测试
"""

import json
import logging
from decimal import Decimal

import pytest
from click.testing import CliRunner

from tarot.application.presentation import EntranceRequest, FlipRequest
from tarot.core.persistence import DEFAULT_STORAGE_KEY
from tarot.core.state_machine import SpeedMode
from tarot.ui.cli import CLIInputHandler, CLIPresentation, CLIRenderer, ParsedCommand, cli


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


class TestInputHandler:
    """测试命令解析"""

    @pytest.mark.parametrize("line,expected", [
        ("+", ParsedCommand("bet_up")),
        ("down", ParsedCommand("bet_down")),
        ("P", ParsedCommand("play")),
        ("a", ParsedCommand("auto")),
        ("speed", ParsedCommand("speed")),
        ("exit", ParsedCommand("quit")),
        ("1", ParsedCommand("reveal", slot=0)),
        ("r 3", ParsedCommand("reveal", slot=2)),
        ("  2  ", ParsedCommand("reveal", slot=1)),
    ])
    def test_parse(self, line, expected):
        assert CLIInputHandler.parse(line) == expected

    @pytest.mark.parametrize("line", ["", "4", "0", "r", "hello", "r x"])
    def test_not_a_command(self, line):
        assert CLIInputHandler.parse(line) is None


class TestRenderer:
    """测试文本渲染"""

    def test_cards(self):
        text = CLIRenderer.render_cards([2], [Decimal(10)])
        assert text == "[ 1 ]  [ 2 ]  [x10]"

    def test_flip(self):
        assert CLIRenderer.render_flip(0, Decimal("0.5"), "common") == "Card 1: x0.5 *"
        assert CLIRenderer.render_flip(1, Decimal(0), "dead") == "Card 2: x0"

    def test_win(self):
        assert CLIRenderer.render_win(Decimal(10), Decimal(20)) == "*** Win x10 (+20.00) ***"

    def test_summary_without_rounds(self):
        text = CLIRenderer.render_simulation_summary(0, Decimal(0), Decimal(0), Decimal(4), None)
        assert "Observed return" not in text
        assert "Final balance: 4.00" in text


class TestCLIPresentation:
    """测试CLIPresentation"""

    def test_animate_sleeps_for_requested_durations(self):
        pauses = []
        completions = []
        presentation = CLIPresentation(animate=True, sleep=pauses.append)
        presentation.request_entrance_animation(
            EntranceRequest(1, "round_1", SpeedMode.FAST, 0.08), lambda: completions.append("entrance"))
        presentation.request_flip_animation(
            FlipRequest(2, "round_1", 0, Decimal(2), "common", SpeedMode.FAST, 0.08),
            lambda: completions.append("flip"))
        assert pauses == [0.08, 0.08]
        assert completions == ["entrance", "flip"]

    def test_no_sleep_without_animate(self):
        pauses = []
        presentation = CLIPresentation(sleep=pauses.append)
        presentation.request_entrance_animation(EntranceRequest(1, "round_1", SpeedMode.NORMAL, 0.15), lambda: None)
        assert pauses == []


class TestPaytableCommand:
    """测试 tarot paytable"""

    def test_default_table(self, runner):
        result = runner.invoke(cli, ["paytable"])
        assert result.exit_code == 0, result.output
        assert "x10" in result.output
        assert "x0.3" in result.output
        assert "Expected return:" in result.output

    def test_custom_table(self, runner, tmp_path):
        path = tmp_path / "table.json"
        path.write_text(json.dumps([{"value": 2, "chance": 1}]), encoding="utf-8")
        result = runner.invoke(cli, ["paytable", "--table", str(path)])
        assert result.exit_code == 0, result.output
        assert "Expected return: 800.00%" in result.output

    def test_unusable_table(self, runner, tmp_path):
        path = tmp_path / "table.json"
        path.write_text("[]", encoding="utf-8")
        result = runner.invoke(cli, ["paytable", "--table", str(path)])
        assert result.exit_code == 1
        assert "unusable multiplier table" in result.output


class TestSimulateCommand:
    """测试 tarot simulate"""

    def test_summary(self, runner):
        result = runner.invoke(cli, ["simulate", "-n", "50", "--seed", "7"])
        assert result.exit_code == 0, result.output
        assert "Rounds played: 50" in result.output
        assert "Total staked: 50.00" in result.output
        assert "Theoretical return:" in result.output

    def test_seed_is_reproducible(self, runner):
        first = runner.invoke(cli, ["simulate", "-n", "30", "--seed", "3"])
        second = runner.invoke(cli, ["simulate", "-n", "30", "--seed", "3"])
        assert first.output == second.output

    def test_stops_when_unaffordable(self, runner):
        result = runner.invoke(cli, ["simulate", "--bet", "5", "--balance", "4"])
        assert result.exit_code == 0, result.output
        assert "Stopped early: Insufficient balance" in result.output
        assert "Rounds played: 0" in result.output

    def test_bet_outside_profile_bounds(self, runner):
        result = runner.invoke(cli, ["simulate", "--bet", "50"])
        assert result.exit_code == 2

    def test_invalid_amount(self, runner):
        result = runner.invoke(cli, ["simulate", "--balance", "lots"])
        assert result.exit_code == 2
        assert "not a valid amount" in result.output


class TestPlayCommand:
    """测试 tarot play"""

    def test_manual_round(self, runner):
        result = runner.invoke(cli, ["play", "--no-save", "--seed", "1"], input="p\n1\n2\n3\nq\n")
        assert result.exit_code == 0, result.output
        assert "Shuffling cards..." in result.output
        assert "Card 1:" in result.output
        assert "--- Result ---" in result.output
        assert "Goodbye!" in result.output

    def test_end_of_input(self, runner):
        result = runner.invoke(cli, ["play", "--no-save"], input="")
        assert result.exit_code == 0, result.output
        assert "Goodbye!" in result.output

    def test_unknown_and_ignored_commands(self, runner):
        result = runner.invoke(cli, ["play", "--no-save"], input="xyz\n1\n-\nq\n")
        assert "Unknown command 'xyz'" in result.output
        assert "(ignored:" in result.output

    def test_auto_play(self, runner):
        result = runner.invoke(cli, ["play", "--no-save", "--seed", "2"], input="a\nq\n")
        assert result.exit_code == 0, result.output
        assert result.output.count("--- Result ---") == 10
        assert "» Auto-play finished" in result.output

    def test_state_file_round_trip(self, runner, tmp_path):
        state_file = tmp_path / "state.json"
        first = runner.invoke(cli, ["play", "--state-file", str(state_file)], input="+\n+\nq\n")
        assert first.exit_code == 0, first.output
        stored = json.loads(state_file.read_text(encoding="utf-8"))
        assert stored[DEFAULT_STORAGE_KEY] == {'bet': "3", 'balance': "100"}

        second = runner.invoke(cli, ["play", "--state-file", str(state_file)], input="q\n")
        assert "Bet: 3.00 | Balance: 100.00" in second.output

    def test_high_roller_profile_uses_own_key(self, runner, tmp_path):
        state_file = tmp_path / "state.json"
        result = runner.invoke(cli, ["play", "--profile", "high_roller", "--state-file", str(state_file)],
                               input="+\nq\n")
        assert result.exit_code == 0, result.output
        stored = json.loads(state_file.read_text(encoding="utf-8"))
        assert stored["tarot_state_high_roller"]['bet'] == "11"

    def test_help_explains_auto_play_runs_to_the_end(self, runner):
        result = runner.invoke(cli, ["play", "--help"])
        assert result.exit_code == 0, result.output
        text = " ".join(result.output.split())
        assert "plays the whole auto-play session before the next prompt" in text
        assert "cannot be stopped early" in text
