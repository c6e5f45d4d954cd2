from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from env.paths import PROJECT_ROOT, resolve_log_file

# ------------------------------------------------------------
# Defaults
# ------------------------------------------------------------

DEFAULT_LOG_FILE = "logkeep.log"
DEFAULT_MAX_BACKUP_INDEX = 1
DEFAULT_ROLL_WHEN = "midnight"
MATCH_MODES = ("prefix", "strict")

# ------------------------------------------------------------
# Errors / helpers
# ------------------------------------------------------------


class ConfigError(RuntimeError):
    pass


def _load_dotenv(path: Path) -> None:
    """Load a .env file without overriding the existing os.environ."""
    if not path.exists():
        return
    load_dotenv(path, override=False)


def _as_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _as_int(v: str, default: int) -> int:
    try:
        return int(v)
    except Exception:
        return default


# ------------------------------------------------------------
# Logging environment (SAFE ANYWHERE)
# ------------------------------------------------------------


@dataclass(frozen=True)
class LoggingEnvironment:
    log_level: str
    log_file: str
    max_backup_index: int
    roll_when: str
    roll_interval: int
    roll_utc: bool
    match: str
    prune_on_start: bool
    verbose: bool
    quiet: bool
    internal_debug: bool

    @property
    def log_path(self) -> Path:
        return resolve_log_file(self.log_file)


def get_logging_env() -> LoggingEnvironment:
    log_level = os.environ.get("LOG_LEVEL", "INFO")
    log_file = os.environ.get("LOGKEEP_LOG_FILE") or DEFAULT_LOG_FILE

    max_backup_index = _as_int(
        os.environ.get("LOGKEEP_MAX_BACKUP_INDEX", str(DEFAULT_MAX_BACKUP_INDEX)),
        DEFAULT_MAX_BACKUP_INDEX,
    )
    if max_backup_index < 0:
        raise ConfigError(
            f"LOGKEEP_MAX_BACKUP_INDEX must be >= 0, got {max_backup_index}"
        )

    match = os.environ.get("LOGKEEP_MATCH", "prefix").strip().lower()
    if match not in MATCH_MODES:
        raise ConfigError(
            f"LOGKEEP_MATCH must be one of {', '.join(MATCH_MODES)}, got {match!r}"
        )

    return LoggingEnvironment(
        log_level=log_level,
        log_file=log_file,
        max_backup_index=max_backup_index,
        roll_when=os.environ.get("LOGKEEP_ROLL_WHEN", DEFAULT_ROLL_WHEN),
        roll_interval=max(1, _as_int(os.environ.get("LOGKEEP_ROLL_INTERVAL", "1"), 1)),
        roll_utc=_as_bool(os.environ.get("LOGKEEP_ROLL_UTC", "0")),
        match=match,
        prune_on_start=_as_bool(os.environ.get("LOGKEEP_PRUNE_ON_START", "1")),
        verbose=_as_bool(os.environ.get("LOGKEEP_VERBOSE", "0")),
        quiet=_as_bool(os.environ.get("LOGKEEP_QUIET", "0")),
        internal_debug=_as_bool(os.environ.get("LOGKEEP_INTERNAL_DEBUG", "0")),
    )


# ------------------------------------------------------------
# Full runtime environment
# ------------------------------------------------------------


class Environment:
    def __init__(self):
        # Logging snapshot (immutable)
        self._logging = get_logging_env()

        self.command = os.environ.get("LOGKEEP_COMMAND", "bootstrap")
        self.run_id = os.environ.get("LOGKEEP_RUN_ID", "")

    def as_dict(self) -> dict:
        return {
            "Logging": {
                "log_level": self.log_level,
                "log_file": str(self.log_path),
                "verbose": self.verbose,
                "quiet": self.quiet,
                "internal_debug": self._logging.internal_debug,
            },
            "Rollover": {
                "when": self._logging.roll_when,
                "interval": self._logging.roll_interval,
                "utc": self._logging.roll_utc,
            },
            "Retention": {
                "max_backup_index": self.max_backup_index,
                "match": self.match,
                "prune_on_start": self._logging.prune_on_start,
            },
            "Run": {
                "command": self.command,
                "run_id": self.run_id,
                "project_root": str(PROJECT_ROOT),
            },
        }

    # ---- logging passthrough ----
    @property
    def logging(self) -> LoggingEnvironment:
        return self._logging

    @property
    def log_level(self) -> str:
        return self._logging.log_level

    @property
    def log_path(self) -> Path:
        return self._logging.log_path

    @property
    def max_backup_index(self) -> int:
        return self._logging.max_backup_index

    @property
    def match(self) -> str:
        return self._logging.match

    @property
    def verbose(self) -> bool:
        return self._logging.verbose

    @property
    def quiet(self) -> bool:
        return self._logging.quiet


_ENV: Optional[Environment] = None


def reset_env_caches() -> None:
    """Invalidate cached views of environment variables."""
    global _ENV
    _ENV = None


def get_env() -> Environment:
    global _ENV
    if _ENV is None:
        _ENV = Environment()
    return _ENV
