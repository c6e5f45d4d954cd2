from __future__ import annotations

import logging
from pathlib import Path

from env import LoggingEnvironment
from .diagnostics import internal_logger
from .handler import RetainingTimedRotatingFileHandler

FILE_FORMAT = "%(asctime)s | [%(levelname)s] | %(name)s | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def build_file_handler(
    logfile: Path, env: LoggingEnvironment
) -> RetainingTimedRotatingFileHandler:
    logfile.parent.mkdir(parents=True, exist_ok=True)

    handler = RetainingTimedRotatingFileHandler(
        logfile,
        when=env.roll_when,
        interval=env.roll_interval,
        max_backup_index=env.max_backup_index,
        encoding="utf-8",
        utc=env.roll_utc,
        match=env.match,
        diagnostics=internal_logger(),
    )
    handler.setLevel(logging.NOTSET)

    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
    return handler


def repoint_file_handler(
    handler: RetainingTimedRotatingFileHandler, new_logfile: Path
) -> None:
    handler.repoint(new_logfile)
