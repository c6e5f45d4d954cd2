"""
Discovery of a live log file and its rolled-over siblings.

The live file `app.log` and its backups (`app.log.2024-01-01`, ...) share a
directory and a name prefix. Enumeration snapshots each candidate's mtime
once, so later sorting never touches the filesystem.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .diagnostics import internal_logger

MATCH_PREFIX = "prefix"
MATCH_STRICT = "strict"
MATCH_MODES = (MATCH_PREFIX, MATCH_STRICT)

# Suffixes TimedRotatingFileHandler produces for every `when` setting
DEFAULT_SUFFIX_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}(_\d{2}(-\d{2}){0,2})?", re.ASCII
)


@dataclass(frozen=True)
class LogFileRef:
    path: Path
    mtime: float

    @property
    def name(self) -> str:
        return self.path.name


def split_active_path(active_file: str | os.PathLike) -> tuple[Path, str]:
    """
    Split the live log path into (directory, base name).

    A bare name such as `app.log` resolves against the working directory.
    """
    raw = os.fspath(active_file)
    if not raw:
        raise ValueError("active log file path must not be empty")

    absolute = Path(os.path.abspath(raw))
    return absolute.parent, absolute.name


def build_matcher(
    base_name: str,
    match: str = MATCH_PREFIX,
    suffix_pattern: Optional[re.Pattern[str]] = None,
) -> Callable[[str], bool]:
    """
    Return the file name predicate for a matching mode.

    prefix: anything starting with the base name. This also accepts
    unrelated files such as `app.log2` or `app.log.bak`.

    strict: the base name itself, or `<base>.<suffix>` where the whole
    suffix matches the rolled-file date pattern, so `app.log.2024-01-01.bak`
    is not a backup.
    """
    if match == MATCH_PREFIX:
        return lambda name: name.startswith(base_name)

    if match == MATCH_STRICT:
        pattern = suffix_pattern or DEFAULT_SUFFIX_PATTERN
        rolled_prefix = base_name + "."

        def _strict(name: str) -> bool:
            if name == base_name:
                return True
            if not name.startswith(rolled_prefix):
                return False
            return pattern.fullmatch(name[len(rolled_prefix):]) is not None

        return _strict

    raise ValueError(f"Unknown match mode: {match!r} (expected one of {MATCH_MODES})")


def enumerate_log_files(
    active_file: str | os.PathLike,
    *,
    match: str = MATCH_PREFIX,
    suffix_pattern: Optional[re.Pattern[str]] = None,
    diagnostics: Optional[logging.Logger] = None,
) -> list[LogFileRef]:
    """
    Snapshot every file in the live file's directory that the matcher accepts.

    The live file itself is part of the result. An unreadable or missing
    directory yields an empty list.
    """
    log = diagnostics or internal_logger()
    directory, base_name = split_active_path(active_file)
    accept = build_matcher(base_name, match, suffix_pattern)

    log.debug("directory name: %s, current file name: %s", directory, base_name)

    try:
        with os.scandir(directory) as it:
            entries = [e for e in it if accept(e.name)]
    except FileNotFoundError:
        log.debug("Log directory %s does not exist; nothing to enumerate", directory)
        return []
    except OSError as e:
        log.warning("Cannot list log directory %s: %s", directory, e)
        return []

    refs: list[LogFileRef] = []
    for entry in entries:
        try:
            if not entry.is_file():
                continue
            st = entry.stat()
        except OSError:
            # Removed between listing and stat
            continue
        refs.append(LogFileRef(path=Path(entry.path), mtime=st.st_mtime))

    log.debug("Found %d candidate file(s) for %s", len(refs), base_name)
    return refs
