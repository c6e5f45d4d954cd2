from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

INTERNAL_LOGGER_NAME = "logkeep.internal"

# Resolves sys.stderr at write time
INTERNAL_CONSOLE = Console(stderr=True, soft_wrap=True)


def _is_internal_handler(h: logging.Handler) -> bool:
    return isinstance(h, RichHandler) and h.console is INTERNAL_CONSOLE


def internal_logger(debug: bool | None = None) -> logging.Logger:
    """
    Diagnostic channel of the logging subsystem itself.

    - Never propagates to the root logger, so retention problems stay out
      of the application's own log stream.
    - Without a handler, WARNING and above reach stderr via logging.lastResort.
    - debug=True attaches a stderr handler and lowers the level to DEBUG;
      debug=False detaches it again. None leaves the current setup alone.
    """
    log = logging.getLogger(INTERNAL_LOGGER_NAME)
    log.propagate = False

    if debug is None:
        return log

    ours = [h for h in log.handlers if _is_internal_handler(h)]
    if debug:
        if not ours:
            handler = RichHandler(
                console=INTERNAL_CONSOLE,
                show_time=False,
                show_path=False,
                markup=False,
            )
            handler.setFormatter(logging.Formatter("logkeep: %(message)s"))
            log.addHandler(handler)
        log.setLevel(logging.DEBUG)
    else:
        for h in ours:
            log.removeHandler(h)
        log.setLevel(logging.WARNING)
    return log
