from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .handler import RetainingTimedRotatingFileHandler

INITIALIZED: bool = False
LOG_FILE_PATH: Optional[Path] = None
FILE_HANDLER: Optional["RetainingTimedRotatingFileHandler"] = None


def reset() -> None:
    global INITIALIZED, LOG_FILE_PATH, FILE_HANDLER
    INITIALIZED = False
    LOG_FILE_PATH = None
    FILE_HANDLER = None
