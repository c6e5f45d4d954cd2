from __future__ import annotations

"""bootstrap.py

Process bootstrap for logkeep.

This module is intentionally tiny and side-effectful.

Rules:
1) Only bootstrap is allowed to *mutate* os.environ for shared run context.
2) Call bootstrap_base_env() exactly once at the true entrypoint.
3) Call bootstrap_run_context() after argparse parsing, before init_logging().

Everything else should treat environment variables as the source of truth.
"""

import os
from datetime import datetime

from env import CONFIG_DIR, PROJECT_ROOT, _load_dotenv, reset_env_caches


_BOOTSTRAPPED = False


def bootstrap_base_env(
    *, config_dir: str = "config", env_file: str = ".env", required: bool = False
) -> None:
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return

    dotenv_path = (
        CONFIG_DIR / env_file
        if config_dir == "config"
        else PROJECT_ROOT / config_dir / env_file
    )

    if required and not dotenv_path.exists():
        raise RuntimeError(
            f"Missing required env file: {dotenv_path}\n"
            f"Expected {config_dir}/{env_file} relative to project root."
        )

    _load_dotenv(dotenv_path)

    os.environ.setdefault(
        "LOGKEEP_RUN_ID",
        datetime.now().strftime("%Y-%m-%d_%H-%M-%S"),
    )

    reset_env_caches()
    _BOOTSTRAPPED = True


def bootstrap_run_context(
    *,
    command: str,
    log_file: str | None = None,
    max_backup_index: int | None = None,
    match: str | None = None,
    verbose: bool | None = None,
    quiet: bool | None = None,
) -> None:
    """Establish run-scoped context used by logging and the CLI handlers."""

    os.environ["LOGKEEP_COMMAND"] = command

    if log_file:
        os.environ["LOGKEEP_LOG_FILE"] = log_file
    if max_backup_index is not None:
        os.environ["LOGKEEP_MAX_BACKUP_INDEX"] = str(max_backup_index)
    if match:
        os.environ["LOGKEEP_MATCH"] = match

    if verbose is not None:
        os.environ["LOGKEEP_VERBOSE"] = "1" if verbose else "0"
    if quiet is not None:
        os.environ["LOGKEEP_QUIET"] = "1" if quiet else "0"

    # Context changes must invalidate cached env views.
    reset_env_caches()
