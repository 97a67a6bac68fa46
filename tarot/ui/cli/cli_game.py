"""塔罗三卡终端前端.

提供 ``tarot`` 命令组：

    tarot play        终端交互式游戏
    tarot simulate    无界面运行回合并输出汇总
    tarot paytable    赔付表与理论返还率
"""

import dataclasses
import logging
import random
import time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Optional

import click

from tarot.application.config_service import ConfigType, EngineConfig, get_config_service
from tarot.application.dto import RoundResult
from tarot.application.presentation import (
    Completion,
    EntranceRequest,
    FlipRequest,
    ImmediatePresentation,
    ResultDisplayRequest,
)
from tarot.application.query_service import build_pay_table
from tarot.application.round_engine import RoundEngine
from tarot.application.types import CommandResult, ResultStatus
from tarot.core.economy.economy import Economy
from tarot.core.events import DomainEvent, EventBus, EventType, create_function_handler
from tarot.core.exceptions import ConfigurationError
from tarot.core.multipliers.analysis import analyze_table
from tarot.core.multipliers.loader import load_default_table, load_table_from_file
from tarot.core.multipliers.types import MultiplierTable
from tarot.core.persistence.stores import InMemoryStore, JsonFileStore
from tarot.core.state_machine.types import RoundPhase

from .input_handler import CLIInputHandler, ParsedCommand
from .render import CLIRenderer

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = Path.home() / ".tarot" / "state.json"


class MoneyParamType(click.ParamType):
    """命令行上的 Decimal 金额"""
    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid amount", param, ctx)
        if not amount.is_finite() or amount < 0:
            self.fail(f"{value!r} must be a non-negative amount", param, ctx)
        return amount


MONEY = MoneyParamType()


class CLIPresentation:
    """输出到终端的表现层网关.

    每个请求在返回前完成。启用 ``animate`` 时先按请求的时长暂停，
    让输出保持游戏的节奏。
    """

    def __init__(self, animate: bool = False, sleep: Callable[[float], None] = time.sleep):
        self._animate = animate
        self._sleep = sleep

    def _wait(self, seconds: float) -> None:
        if self._animate and seconds > 0:
            self._sleep(seconds)

    def request_entrance_animation(self, request: EntranceRequest, on_complete: Completion) -> None:
        click.echo("Shuffling cards...")
        self._wait(request.duration)
        on_complete()

    def request_flip_animation(self, request: FlipRequest, on_complete: Completion) -> None:
        self._wait(request.duration)
        click.echo(CLIRenderer.render_flip(request.slot, request.value, request.rarity))
        on_complete()

    def request_result_display(self, request: ResultDisplayRequest, on_complete: Completion) -> None:
        click.echo(CLIRenderer.render_result(request.result))
        self._wait(request.duration)
        on_complete()

    def request_win_highlight(self, product: Decimal, payout: Decimal) -> None:
        click.secho(CLIRenderer.render_win(product, payout), fg="yellow", bold=True)


class TarotCLI:
    """围绕单个 RoundEngine 的终端交互式游戏"""

    def __init__(self, engine: RoundEngine, profile: str = "default"):
        self.engine = engine
        self.profile = profile
        engine.event_bus.subscribe(
            EventType.STATUS_MESSAGE,
            create_function_handler(self._on_status, [EventType.STATUS_MESSAGE]),
        )

    @staticmethod
    def _on_status(event: DomainEvent) -> None:
        click.echo(f"» {event.data['message']}")

    def run(self) -> None:
        click.echo(CLIRenderer.render_header(self.profile))
        click.echo(CLIRenderer.render_status_bar(self.engine.snapshot()))

        while True:
            try:
                command = CLIInputHandler.read_command()
            except click.Abort:
                click.echo("")
                break
            if command.name == 'quit':
                break

            self.execute(command)
            snapshot = self.engine.snapshot()
            if self.engine.phase is RoundPhase.REVEAL:
                click.echo(CLIRenderer.render_cards(snapshot.revealed_slots, snapshot.revealed_values))
            click.echo(CLIRenderer.render_status_bar(snapshot))

        click.echo("Goodbye!")

    def execute(self, command: ParsedCommand) -> CommandResult:
        """将一条命令转发给引擎"""
        engine = self.engine
        if command.name == 'bet_up':
            result = engine.on_adjust_bet_intent(1)
        elif command.name == 'bet_down':
            result = engine.on_adjust_bet_intent(-1)
        elif command.name == 'play':
            result = engine.on_start_round_intent()
        elif command.name == 'reveal':
            result = engine.on_reveal_intent(command.slot)
        elif command.name == 'auto':
            result = engine.on_toggle_auto_play_intent()
        elif command.name == 'speed':
            result = engine.on_toggle_speed_intent()
        else:
            raise click.UsageError(f"unsupported command {command.name}")

        if result.status is ResultStatus.VALIDATION_ERROR:
            click.echo(f"(ignored: {result.message})")
        return result


def _engine_config(profile: str, table_path: Optional[str]) -> EngineConfig:
    query = get_config_service().get_engine_config(profile)
    if not query.success:
        raise click.ClickException(query.message)
    config = query.data
    if table_path:
        config = dataclasses.replace(config, table_path=table_path)
    return config


def _load_table(config: EngineConfig) -> MultiplierTable:
    try:
        return load_table_from_file(config.table_path) if config.table_path else load_default_table()
    except ConfigurationError as e:
        raise click.ClickException(f"unusable multiplier table: {e}")


def _profile_option(func):
    profiles = get_config_service().list_available_profiles(ConfigType.ENGINE).data
    return click.option('--profile', type=click.Choice(profiles), default='default', show_default=True,
                        help='Engine configuration profile.')(func)


def _table_option(func):
    return click.option('--table', 'table_path', type=click.Path(exists=True, dir_okay=False),
                        default=None, help='JSON multiplier table to use instead of the default.')(func)


@click.group()
@click.option('--log-profile', type=click.Choice(['default', 'verbose', 'debug']), default='default',
              show_default=True, help='Logging configuration profile.')
def cli(log_profile: str) -> None:
    """Tarot three-card wagering game."""
    get_config_service().get_logging_config(log_profile).data.apply()


@cli.command()
@_profile_option
@_table_option
@click.option('--state-file', type=click.Path(dir_okay=False, path_type=Path), default=None,
              help=f'Where bet and balance are kept [default: {DEFAULT_STATE_FILE}].')
@click.option('--no-save', is_flag=True, help='Do not read or write the state file.')
@click.option('--seed', type=int, default=None, help='Seed for reproducible rounds.')
@click.option('--animate', is_flag=True, help='Pause for animation durations.')
def play(profile: str, table_path: Optional[str], state_file: Optional[Path], no_save: bool,
         seed: Optional[int], animate: bool) -> None:
    """Play in the terminal.

    Animations finish as soon as they are requested, so `a` plays the whole
    auto-play session before the next prompt and it cannot be stopped early.
    """
    config = _engine_config(profile, table_path)
    if no_save:
        persistence = InMemoryStore()
    else:
        persistence = JsonFileStore(state_file or DEFAULT_STATE_FILE, key=config.storage_key)

    logger.info(f"[CLI] starting game, profile={profile}, persistence={type(persistence).__name__}")
    engine = RoundEngine.create(
        config,
        persistence=persistence,
        presentation=CLIPresentation(animate=animate),
        table=_load_table(config),
        rng=random.Random(seed) if seed is not None else None,
        event_bus=EventBus(),
    )
    TarotCLI(engine, profile).run()


@cli.command()
@_profile_option
@_table_option
@click.option('--rounds', '-n', type=click.IntRange(min=1), default=1000, show_default=True,
              help='Rounds to play.')
@click.option('--bet', type=MONEY, default=None, help='Bet per round [default: profile bet].')
@click.option('--balance', type=MONEY, default=None, help='Starting balance [default: profile balance].')
@click.option('--seed', type=int, default=None, help='Seed for reproducible rounds.')
def simulate(profile: str, table_path: Optional[str], rounds: int, bet: Optional[Decimal],
             balance: Optional[Decimal], seed: Optional[int]) -> None:
    """Play rounds without a front end and print a summary."""
    config = _engine_config(profile, table_path)
    table = _load_table(config)
    try:
        economy = Economy(
            bet if bet is not None else config.default_bet,
            balance if balance is not None else config.default_balance,
            config.min_bet,
            config.max_bet,
            InMemoryStore(),
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    engine = RoundEngine(
        table,
        economy,
        presentation=ImmediatePresentation(keep_history=False),
        config=config,
        rng=random.Random(seed) if seed is not None else None,
        event_bus=EventBus(max_history_size=100),
    )

    played = 0
    total_bet = Decimal(0)
    total_payout = Decimal(0)
    for _ in range(rounds):
        if not engine.on_start_round_intent().success:
            click.echo(f"Stopped early: {engine.status_message}")
            break
        for slot in range(3):
            engine.on_reveal_intent(slot)
        result: RoundResult = engine.last_result
        played += 1
        total_bet += result.bet
        total_payout += result.payout

    click.echo(CLIRenderer.render_simulation_summary(
        played, total_bet, total_payout, engine.economy.balance,
        analyze_table(table).expected_return,
    ))


@cli.command()
@_profile_option
@_table_option
@click.option('--top', type=click.IntRange(min=1), default=5, show_default=True,
              help='How many round outcomes to list.')
def paytable(profile: str, table_path: Optional[str], top: int) -> None:
    """Print the multiplier table and its theoretical return."""
    config = _engine_config(profile, table_path)
    table = _load_table(config)
    click.echo(CLIRenderer.render_pay_table(build_pay_table(table)))
    click.echo("")
    click.echo(CLIRenderer.render_analysis(analyze_table(table), top=top))


if __name__ == '__main__':
    cli()
