from __future__ import annotations

import logging

from env import get_logging_env
from .console import build_console_handler
from .diagnostics import internal_logger
from .enumerator import LogFileRef, enumerate_log_files
from .file import build_file_handler, repoint_file_handler
from .handler import RetainingTimedRotatingFileHandler
from .retention import (
    DeletionFailure,
    RetentionConfig,
    RetentionEnforcer,
    RetentionReport,
    Rotator,
    prune,
)
from . import state as _state

__all__ = [
    "DeletionFailure",
    "LogFileRef",
    "RetainingTimedRotatingFileHandler",
    "RetentionConfig",
    "RetentionEnforcer",
    "RetentionReport",
    "Rotator",
    "enumerate_log_files",
    "get_logger",
    "init_logging",
    "internal_logger",
    "prune",
]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _level_to_int(level: str | int) -> int:
    if isinstance(level, int):
        return level
    lvl = logging.getLevelName(str(level).upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def init_logging(
    prune_on_start: bool | None = None,
) -> RetainingTimedRotatingFileHandler:
    """
    Initialize logging for the entire process.

    - Handlers are attached ONLY to the root logger.
    - Named loggers inherit via propagation.
    - Safe to call multiple times; file handler is repointed, not stacked.
    - prune_on_start overrides LOGKEEP_PRUNE_ON_START when given.
    """
    env = get_logging_env()
    internal_logger(env.internal_debug)

    root = logging.getLogger()
    logfile = env.log_path

    # Base level from env, but verbose forces DEBUG everywhere.
    root_level = logging.DEBUG if env.verbose else _level_to_int(env.log_level)

    handler = _state.FILE_HANDLER
    if _state.INITIALIZED and handler is not None and _state.LOG_FILE_PATH == logfile:
        root.setLevel(root_level)
        handler.max_backup_index = env.max_backup_index
        handler.match = env.match
        return handler

    root.handlers.clear()
    root.setLevel(root_level)

    if handler is not None:
        repoint_file_handler(handler, logfile)
        handler.max_backup_index = env.max_backup_index
        handler.match = env.match
    else:
        handler = build_file_handler(logfile, env)
    root.addHandler(handler)

    if prune_on_start is None:
        prune_on_start = env.prune_on_start
    if prune_on_start:
        handler.prune()

    # Console handler (Rich) only when not quiet
    if not env.quiet:
        console_level = logging.DEBUG if env.verbose else root_level
        root.addHandler(build_console_handler(console_level))

    _state.INITIALIZED = True
    _state.LOG_FILE_PATH = logfile
    _state.FILE_HANDLER = handler
    return handler
