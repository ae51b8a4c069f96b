"""CLI entry point: global option handling, then dispatch to the command table."""

from __future__ import annotations

import sys
from pathlib import Path

from rich.console import Console

from .host import run

console = Console(stderr=True)

USAGE = """\
usage: artisan [--project PATH] [--verbose] <command> [args...]

  --project, -C PATH   Project root (default: current directory)
  --verbose, -v        Show debug diagnostics from discovery and configuration
"""


def _split_global_options(args: list[str]) -> tuple[Path | None, bool, list[str]]:
    """Peel leading global options off *args* before click sees them.

    The project path decides which commands exist, so it has to be known
    before the dispatcher is built.
    """
    project: Path | None = None
    verbose = False
    rest = list(args)
    while rest:
        arg = rest[0]
        if arg in ("--verbose", "-v"):
            verbose = True
            rest.pop(0)
        elif arg in ("--project", "-C"):
            if len(rest) < 2:
                raise ValueError(f"{arg} requires a path")
            project = Path(rest[1])
            del rest[:2]
        elif arg.startswith("--project="):
            project = Path(arg.split("=", 1)[1])
            rest.pop(0)
        else:
            break
    return project, verbose, rest


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    try:
        project, verbose, rest = _split_global_options(args)
    except ValueError as e:
        console.print(f"error: {e}", style="bold")
        console.print(USAGE, style="dim", markup=False)
        return 2
    if project is not None and not project.is_dir():
        console.print(f"error: not a directory: {project}", style="bold")
        return 2
    return run(rest, project_path=project, verbose=verbose)


if __name__ == "__main__":
    sys.exit(main())
