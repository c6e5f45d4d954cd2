from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path

from env import get_logging_env, resolve_log_file
from logkeep.enumerator import LogFileRef, enumerate_log_files
from logkeep.retention import order_by_mtime


# ----------------------------
# Help dispatch (subparser-local)
# ----------------------------


def dispatch_subparser_help(
    parser: argparse.ArgumentParser, path: list[str] | None
) -> int:
    """
    Implements consistent `X help [subcmd ...]` behavior for a subtree parser.
    """
    if not path:
        parser.print_help()
        return 0

    try:
        parser.parse_args(path + ["--help"])
    except SystemExit:
        pass
    return 0


# ----------------------------
# Log file helpers
# ----------------------------


def resolve_active_file(explicit: str | None) -> Path:
    if explicit:
        return Path(explicit).expanduser().resolve()
    return resolve_log_file(get_logging_env().log_file)


def resolve_match(explicit: str | None) -> str:
    return explicit or get_logging_env().match


def list_log_files(active_file: Path, match: str) -> list[LogFileRef]:
    """Matching files, newest first."""
    refs = enumerate_log_files(active_file, match=match)
    return list(reversed(order_by_mtime(refs, active_file)))


def find_log_file(active_file: Path, name: str, match: str) -> Path | None:
    for ref in list_log_files(active_file, match):
        if ref.path.name == name:
            return ref.path

    # Bare date suffix: `show 2024-01-01` for `app.log.2024-01-01`
    candidate = active_file.with_name(f"{active_file.name}.{name}")
    if candidate.is_file():
        return candidate
    return None


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def print_tail(path: Path, lines: int) -> None:
    try:
        data = read_text(path).splitlines()
    except Exception as e:
        print(f"[error reading log] {e}")
        return

    tail = data[-lines:] if lines > 0 else data
    for line in tail:
        print(line)


def format_mtime(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


# ----------------------------
# CLI output helpers
# ----------------------------


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    """
    Simple fixed-width table printer for CLI output.
    """
    if not rows:
        print("(no results)")
        return

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    fmt = "  ".join(f"{{:{w}}}" for w in widths)

    print(fmt.format(*headers))
    print(fmt.format(*("-" * w for w in widths)))

    for row in rows:
        print(fmt.format(*(str(c) for c in row)))
