from __future__ import annotations

import argparse

from env import MATCH_MODES, ConfigError, get_env
from logkeep.retention import order_by_mtime, select_excess
from cli.render import RENDER
from cli.common import (
    dispatch_subparser_help,
    list_log_files,
    resolve_active_file,
    resolve_match,
)


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Environment utilities")
    sub = env.add_subparsers(dest="env_cmd", required=True)

    help_p = sub.add_parser("help", help="Show help for env")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=env)

    dump_p = sub.add_parser(
        "dump", help="Show resolved environment and effective retention"
    )
    dump_p.add_argument("--file", help="Live log file (default: configured log file)")
    dump_p.add_argument("--match", choices=MATCH_MODES, help="Sibling matching mode")
    dump_p.add_argument("--keep", type=int, help="MaxBackupIndex override")
    dump_p.set_defaults(action="dump")


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    if args.action == "dump":
        return handle_env_dump(
            file=getattr(args, "file", None),
            match=getattr(args, "match", None),
            keep=getattr(args, "keep", None),
        )

    raise RuntimeError(f"Unknown env action: {args.action}")


def _effective_retention(
    file: str | None, match: str | None, keep: int | None
) -> dict[str, object]:
    env = get_env()
    active = resolve_active_file(file)
    mode = resolve_match(match)
    quota = env.max_backup_index if keep is None else keep

    refs = order_by_mtime(list_log_files(active, mode), active)
    excess = select_excess(refs, quota)

    return {
        "log_file": active,
        "match": mode,
        "max_backup_index": quota,
        "files_kept_max": quota + 1,
        "files_matched": len(refs),
        "over_quota": ", ".join(r.name for r in excess) or "-",
    }


def handle_env_dump(
    file: str | None = None,
    match: str | None = None,
    keep: int | None = None,
) -> int:
    if keep is not None and keep < 0:
        RENDER.print(f"[bold red]--keep must be >= 0, got {keep}[/bold red]")
        return 2

    try:
        data = get_env().as_dict()
    except ConfigError as e:
        RENDER.print(f"[bold red]Invalid configuration:[/bold red] {e}")
        return 2

    data["Effective retention"] = _effective_retention(file, match, keep)

    RENDER.print("\n[bold]logkeep environment[/bold]")
    RENDER.print("─" * 50)

    for section, values in data.items():
        RENDER.print(f"\n[bold cyan]{section}[/bold cyan]")
        for key, value in values.items():
            RENDER.print(f"  {key:<20} = {value}", markup=False)

    RENDER.print()
    return 0
