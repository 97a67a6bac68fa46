"""CLI输入处理模块.

每次提示读取一条命令，并映射为引擎意图。
"""

from dataclasses import dataclass
from typing import Optional

import click


@dataclass(frozen=True)
class ParsedCommand:
    """识别出的终端命令"""
    name: str
    slot: Optional[int] = None


_ALIASES = {
    '+': 'bet_up',
    'up': 'bet_up',
    '-': 'bet_down',
    'down': 'bet_down',
    'p': 'play',
    'play': 'play',
    'a': 'auto',
    'auto': 'auto',
    's': 'speed',
    'speed': 'speed',
    'q': 'quit',
    'quit': 'quit',
    'exit': 'quit',
}


class CLIInputHandler:
    """终端输入解析器"""

    @staticmethod
    def parse(line: str) -> Optional[ParsedCommand]:
        """
        解析一行输入

        Returns:
            ParsedCommand，不是命令时为 None。``1``-``3``
            （或 ``r 1``）翻开对应的卡牌。
        """
        text = line.strip().lower()
        if not text:
            return None
        if text in _ALIASES:
            return ParsedCommand(_ALIASES[text])

        if text.startswith('r'):
            text = text[1:].strip()
        if text.isdigit() and 1 <= int(text) <= 3:
            return ParsedCommand('reveal', slot=int(text) - 1)
        return None

    @staticmethod
    def read_command(prompt: str = ">") -> ParsedCommand:
        """
        反复提示直到输入有效命令

        Raises:
            click.Abort: 输入结束
        """
        while True:
            line = click.prompt(prompt, default="", show_default=False, prompt_suffix=" ")
            command = CLIInputHandler.parse(line)
            if command is not None:
                return command
            if line.strip():
                click.echo(f"Unknown command '{line.strip()}'")
