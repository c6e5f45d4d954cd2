from __future__ import annotations

import argparse
from pathlib import Path

from env import MATCH_MODES, get_logging_env
from logkeep import get_logger
from logkeep import state as _state
from logkeep.handler import RetainingTimedRotatingFileHandler
from logkeep.retention import RetentionReport, prune

from cli.common import (
    dispatch_subparser_help,
    find_log_file,
    format_mtime,
    list_log_files,
    print_table,
    print_tail,
    resolve_active_file,
    resolve_match,
)

log = get_logger(__name__)


def _add_target_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--file", help="Live log file (default: configured log file)")
    p.add_argument("--match", choices=MATCH_MODES, help="Sibling matching mode")


def build_logs_parser(subparsers: argparse._SubParsersAction) -> None:
    logs = subparsers.add_parser("logs", help="Log file utilities")
    lsub = logs.add_subparsers(dest="logs_cmd", required=True)

    help_p = lsub.add_parser("help", help="Show help for logs")
    help_p.add_argument("path", nargs="*", help="Subcommand path (e.g. list, prune)")
    help_p.set_defaults(action="help", _help_parser=logs)

    list_p = lsub.add_parser("list", help="List the live file and its backups")
    _add_target_args(list_p)
    list_p.set_defaults(action="list")

    show_p = lsub.add_parser("show", help="Show a log file (tail)")
    show_p.add_argument("name", help="File name or rolled date suffix")
    _add_target_args(show_p)
    show_p.add_argument("--tail", type=int, default=120, help="Lines from end")
    show_p.set_defaults(action="show")

    prune_p = lsub.add_parser("prune", help="Delete backups beyond the quota")
    _add_target_args(prune_p)
    prune_p.add_argument("--keep", type=int, help="MaxBackupIndex override")
    prune_p.add_argument(
        "--dry-run", action="store_true", help="Report without deleting"
    )
    prune_p.set_defaults(action="prune")

    roll_p = lsub.add_parser("roll", help="Force a rollover, then prune")
    _add_target_args(roll_p)
    roll_p.add_argument("--keep", type=int, help="MaxBackupIndex override")
    roll_p.set_defaults(action="roll")


def _resolve_keep(args: argparse.Namespace) -> int | None:
    keep = getattr(args, "keep", None)
    if keep is None:
        return get_logging_env().max_backup_index
    if keep < 0:
        print(f"--keep must be >= 0, got {keep}")
        return None
    return keep


def _print_report(report: RetentionReport) -> None:
    verb = "would delete" if report.dry_run else "deleted"
    for p in report.deleted:
        print(f"{verb}: {p.name}")
    for p in report.vanished:
        print(f"already gone: {p.name}")
    for f in report.failures:
        print(f"failed: {f.path.name} ({f.error})")
    print(
        f"{len(report.candidates)} matched, "
        f"{len(report.deleted)} {verb}, "
        f"{len(report.retained)} retained"
    )


def handle_logs(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    active = resolve_active_file(getattr(args, "file", None))
    match = resolve_match(getattr(args, "match", None))

    if args.action == "list":
        rows = [
            [
                ref.name,
                format_mtime(ref.mtime),
                "live" if ref.path == active else "backup",
            ]
            for ref in list_log_files(active, match)
        ]
        print_table(["file", "modified", "role"], rows)
        return 0

    if args.action == "show":
        path = find_log_file(active, args.name, match)
        if not path:
            print(f"Log not found: {args.name}")
            return 1
        print_tail(path, int(args.tail))
        return 0

    if args.action == "prune":
        keep = _resolve_keep(args)
        if keep is None:
            return 2
        report = prune(active, keep, match=match, dry_run=bool(args.dry_run))
        _print_report(report)
        return 0 if report.ok else 1

    if args.action == "roll":
        keep = _resolve_keep(args)
        if keep is None:
            return 2

        live = _state.FILE_HANDLER
        if live is not None and Path(live.baseFilename).resolve() == active.resolve():
            # Roll the handler that owns the file, or its stream keeps
            # writing into the renamed backup.
            try:
                report = live.force_rollover(keep, match)
            except OSError as e:
                log.error("Rollover of %s failed: %s", active, e)
                print(f"Rollover failed: {e}")
                return 1
            _print_report(report)
            return 0 if report.ok else 1

        handler = RetainingTimedRotatingFileHandler(
            active, max_backup_index=keep, match=match
        )
        try:
            handler.doRollover()
        except OSError as e:
            log.error("Rollover of %s failed: %s", active, e)
            print(f"Rollover failed: {e}")
            return 1
        finally:
            handler.close()

        _print_report(handler.last_report)
        return 0 if handler.last_report.ok else 1

    raise SystemExit(f"Unknown logs action: {args.action}")
