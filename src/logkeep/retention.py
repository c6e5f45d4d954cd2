"""
Bounded retention for rolled log files.

After a rollover, the live file and its backups are ordered by modification
time and the oldest are removed until `max_backup_index` backups remain.
The live file occupies one slot of the quota, so at most
`max_backup_index + 1` matching files survive a pass.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .diagnostics import internal_logger
from .enumerator import MATCH_MODES, MATCH_PREFIX, LogFileRef, enumerate_log_files

DEFAULT_MAX_BACKUP_INDEX = 1


class Rotator(Protocol):
    """The base rolling capability: close, rename with date suffix, reopen."""

    def roll_over(self) -> None: ...


@dataclass(frozen=True)
class RetentionConfig:
    max_backup_index: int = DEFAULT_MAX_BACKUP_INDEX
    match: str = MATCH_PREFIX

    def __post_init__(self) -> None:
        if self.max_backup_index < 0:
            raise ValueError(
                f"max_backup_index must be >= 0, got {self.max_backup_index}"
            )
        if self.match not in MATCH_MODES:
            raise ValueError(f"Unknown match mode: {self.match!r}")


@dataclass(frozen=True)
class DeletionFailure:
    path: Path
    error: OSError


@dataclass
class RetentionReport:
    candidates: list[LogFileRef] = field(default_factory=list)
    deleted: list[Path] = field(default_factory=list)
    vanished: list[Path] = field(default_factory=list)
    failures: list[DeletionFailure] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def retained(self) -> list[Path]:
        gone = set(self.deleted) | set(self.vanished)
        return [r.path for r in self.candidates if r.path not in gone]


def order_by_mtime(
    refs: Iterable[LogFileRef],
    live_file: str | os.PathLike | None = None,
) -> list[LogFileRef]:
    """
    Oldest first.

    Equal mtimes are resolved deterministically: the live file sorts after
    its tied siblings, the rest by name.
    """
    live = Path(os.path.abspath(os.fspath(live_file))) if live_file else None

    def _key(ref: LogFileRef):
        return (ref.mtime, live is not None and ref.path == live, ref.path.name)

    return sorted(refs, key=_key)


def select_excess(
    ordered: list[LogFileRef], max_backup_index: int
) -> list[LogFileRef]:
    """The leading entries of `ordered` that do not fit the quota."""
    excess = len(ordered) - (max_backup_index + 1)
    if excess <= 0:
        return []
    return ordered[:excess]


class RetentionEnforcer:
    """
    Runs the base rollover, then trims the backups it leaves behind.

    Not guarded against repeated calls: a second enforce() without a
    rollover in between re-enumerates and only deletes what is still
    over quota.
    """

    def __init__(
        self,
        rotator: Rotator,
        active_file: str | os.PathLike,
        config: Optional[RetentionConfig] = None,
        *,
        diagnostics: Optional[logging.Logger] = None,
        suffix_pattern: Optional[re.Pattern[str]] = None,
    ):
        self.rotator = rotator
        self.active_file = Path(os.path.abspath(os.fspath(active_file)))
        self.config = config or RetentionConfig()
        self.diagnostics = diagnostics or internal_logger()
        self.suffix_pattern = suffix_pattern

    def roll_over(self) -> RetentionReport:
        # Rollover errors propagate; no cleanup after a failed roll.
        self.rotator.roll_over()
        return self.enforce()

    def enforce(self, dry_run: bool = False) -> RetentionReport:
        log = self.diagnostics
        keep = self.config.max_backup_index
        log.debug("maxBackupIndex: %d", keep)

        refs = enumerate_log_files(
            self.active_file,
            match=self.config.match,
            suffix_pattern=self.suffix_pattern,
            diagnostics=log,
        )
        ordered = order_by_mtime(refs, self.active_file)
        report = RetentionReport(candidates=ordered, dry_run=dry_run)

        victims = select_excess(ordered, keep)
        if not victims:
            log.debug(
                "%d file(s) within quota of %d for %s",
                len(ordered),
                keep + 1,
                self.active_file.name,
            )
            return report

        for ref in victims:
            if dry_run:
                log.info("Would delete %s", ref.path)
                report.deleted.append(ref.path)
                continue

            try:
                ref.path.unlink()
            except FileNotFoundError:
                log.debug("%s already gone", ref.path)
                report.vanished.append(ref.path)
            except OSError as e:
                log.warning("Could not delete old log file %s: %s", ref.path, e)
                report.failures.append(DeletionFailure(path=ref.path, error=e))
            else:
                log.debug("Deleted old log file %s", ref.path)
                report.deleted.append(ref.path)

        if report.failures:
            log.warning(
                "Retention for %s left %d file(s) over quota",
                self.active_file.name,
                len(report.failures),
            )
        return report


class _NoRollover:
    def roll_over(self) -> None:
        return None


def prune(
    active_file: str | os.PathLike,
    max_backup_index: int = DEFAULT_MAX_BACKUP_INDEX,
    *,
    match: str = MATCH_PREFIX,
    dry_run: bool = False,
    suffix_pattern: Optional[re.Pattern[str]] = None,
    diagnostics: Optional[logging.Logger] = None,
) -> RetentionReport:
    """One retention pass over `active_file` and its siblings, no rollover."""
    enforcer = RetentionEnforcer(
        _NoRollover(),
        active_file,
        RetentionConfig(max_backup_index=max_backup_index, match=match),
        diagnostics=diagnostics,
        suffix_pattern=suffix_pattern,
    )
    return enforcer.enforce(dry_run=dry_run)
