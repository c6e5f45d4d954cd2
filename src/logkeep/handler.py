from __future__ import annotations

import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from .enumerator import MATCH_PREFIX
from .retention import (
    DEFAULT_MAX_BACKUP_INDEX,
    RetentionConfig,
    RetentionEnforcer,
    RetentionReport,
)


class _BaseRollover:
    """Exposes the stock TimedRotatingFileHandler rollover as a Rotator."""

    def __init__(self, handler: TimedRotatingFileHandler):
        self._handler = handler

    def roll_over(self) -> None:
        TimedRotatingFileHandler.doRollover(self._handler)


class RetainingTimedRotatingFileHandler(TimedRotatingFileHandler):
    """
    TimedRotatingFileHandler that keeps at most `max_backup_index` backups.

    Backups are every sibling file the matcher accepts, ordered by mtime;
    the stock backupCount cleanup is disabled in favour of that pass.
    """

    def __init__(
        self,
        filename: str | os.PathLike,
        when: str = "midnight",
        interval: int = 1,
        max_backup_index: int = DEFAULT_MAX_BACKUP_INDEX,
        encoding: Optional[str] = "utf-8",
        delay: bool = False,
        utc: bool = False,
        atTime=None,
        match: str = MATCH_PREFIX,
        diagnostics: Optional[logging.Logger] = None,
    ):
        config = RetentionConfig(max_backup_index=max_backup_index, match=match)

        super().__init__(
            os.fspath(filename),
            when=when,
            interval=interval,
            backupCount=0,
            encoding=encoding,
            delay=delay,
            utc=utc,
            atTime=atTime,
        )

        self._enforcer = RetentionEnforcer(
            _BaseRollover(self),
            self.baseFilename,
            config,
            diagnostics=diagnostics,
        )
        self.last_report: Optional[RetentionReport] = None

    # ------------------------------------------------------------
    # MaxBackupIndex
    # ------------------------------------------------------------

    @property
    def max_backup_index(self) -> int:
        return self._enforcer.config.max_backup_index

    @max_backup_index.setter
    def max_backup_index(self, value: int) -> None:
        self._enforcer.config = RetentionConfig(
            max_backup_index=int(value), match=self._enforcer.config.match
        )

    def setMaxBackupIndex(self, value: int) -> None:
        self.max_backup_index = value

    def getMaxBackupIndex(self) -> int:
        return self.max_backup_index

    @property
    def match(self) -> str:
        return self._enforcer.config.match

    @match.setter
    def match(self, value: str) -> None:
        self._enforcer.config = RetentionConfig(
            max_backup_index=self._enforcer.config.max_backup_index, match=value
        )

    @property
    def enforcer(self) -> RetentionEnforcer:
        return self._enforcer

    # ------------------------------------------------------------
    # Rollover / retention
    # ------------------------------------------------------------

    def doRollover(self) -> None:
        self.last_report = self._enforcer.roll_over()

    def force_rollover(
        self,
        max_backup_index: Optional[int] = None,
        match: Optional[str] = None,
    ) -> RetentionReport:
        """
        Roll now, under the handler lock.

        max_backup_index and match apply to this rollover only.
        """
        self.acquire()
        try:
            config = self._enforcer.config
            try:
                self._enforcer.config = RetentionConfig(
                    max_backup_index=(
                        config.max_backup_index
                        if max_backup_index is None
                        else int(max_backup_index)
                    ),
                    match=config.match if match is None else match,
                )
                self.doRollover()
            finally:
                self._enforcer.config = config
        finally:
            self.release()
        return self.last_report

    def prune(self, dry_run: bool = False) -> RetentionReport:
        self.acquire()
        try:
            self.last_report = self._enforcer.enforce(dry_run=dry_run)
        finally:
            self.release()
        return self.last_report

    def repoint(self, new_logfile: str | os.PathLike) -> None:
        Path(new_logfile).parent.mkdir(parents=True, exist_ok=True)

        self.acquire()
        try:
            self.close()
            self.baseFilename = os.path.abspath(os.fspath(new_logfile))
            self._enforcer.active_file = Path(self.baseFilename)

            # Schedule follows the new file, as in TimedRotatingFileHandler.__init__
            if os.path.exists(self.baseFilename):
                t = int(os.stat(self.baseFilename).st_mtime)
            else:
                t = int(time.time())
            self.rolloverAt = self.computeRollover(t)

            if not self.delay:
                self.stream = self._open()
        finally:
            self.release()
