"""塔罗三卡终端界面.

- cli_game: click 命令组与交互式游戏
- render: 文本渲染
- input_handler: 命令解析
"""

from .cli_game import cli, TarotCLI, CLIPresentation
from .render import CLIRenderer
from .input_handler import CLIInputHandler, ParsedCommand

__all__ = [
    'cli',
    'TarotCLI',
    'CLIPresentation',
    'CLIRenderer',
    'CLIInputHandler',
    'ParsedCommand',
]
