from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from env import ConfigError, get_logging_env

# Console used by RichHandler (stderr keeps stdout free for CLI output)
LOG_CONSOLE = Console(
    stderr=True,
    soft_wrap=True,
)


class ConsoleGateFilter(logging.Filter):
    """
    Drop console output when quiet mode is enabled.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            return not get_logging_env().quiet
        except ConfigError:
            return True


def build_console_handler(level: int = logging.INFO) -> logging.Handler:
    handler = RichHandler(
        console=LOG_CONSOLE,
        level=level,
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
    )

    # RichHandler renders the level column itself.
    handler.setFormatter(logging.Formatter("%(message)s"))

    handler.addFilter(ConsoleGateFilter())
    return handler
