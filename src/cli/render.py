from __future__ import annotations

from rich.console import Console

# CLI output goes to stdout; logging renders to its own console on stderr.
# No explicit file: rich resolves sys.stdout at write time.
RENDER = Console(soft_wrap=True, highlight=False)
