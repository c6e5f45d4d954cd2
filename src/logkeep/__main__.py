#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys

from bootstrap import bootstrap_base_env, bootstrap_run_context


def _dispatch_help(parser: argparse.ArgumentParser, argv: list[str]) -> int:
    # Support:
    #   logkeep help
    #   logkeep help logs
    #   logkeep logs help
    if not argv:
        parser.print_help()
        return 0

    if argv and argv[0] == "help":
        argv = argv[1:]

    if argv:
        try:
            build_parser().parse_args(argv + ["--help"])
        except SystemExit:
            pass
        return 0

    parser.print_help()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="logkeep")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="No console logging")

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from cli.cli_env import build_env_parser
    from cli.cli_logs import build_logs_parser

    build_env_parser(sub)
    build_logs_parser(sub)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # Load config/.env before anything reads the environment
    bootstrap_base_env(config_dir="config", env_file=".env", required=False)

    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "_help", False):
        return _dispatch_help(parser, argv)

    bootstrap_run_context(
        command=args.command,
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
    )

    # Initialize logging AFTER run-context env stamping
    from env import ConfigError
    from logkeep import init_logging, get_logger

    # The CLI inspects and prunes log files itself; startup retention would
    # act on them before the subcommand (list, --dry-run, --keep) does.
    try:
        init_logging(prune_on_start=False)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    log = get_logger("logkeep")
    log.debug(f"Command: {args.command}")

    if args.command == "env":
        from cli.cli_env import handle_env

        return handle_env(args)

    if args.command == "logs":
        from cli.cli_logs import handle_logs

        return handle_logs(args)

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
