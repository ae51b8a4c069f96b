"""Path helpers, directory walking, safe text reads, command-name derivation."""

from __future__ import annotations

import os
import re
from collections.abc import Iterator
from pathlib import Path

# Directories never worth descending into when scanning a project tree.
IGNORED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".venv",
        "venv",
        "env",
        ".tox",
        ".nox",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        "__pycache__",
        "node_modules",
        "build",
        "dist",
    }
)

COMMAND_SUFFIX = "Command"


def derive_command_name(type_name: str) -> str:
    """Dispatch name for a class name: strip a trailing 'Command', lower-case.

    >>> derive_command_name("FooCommand")
    'foo'
    """
    if type_name.endswith(COMMAND_SUFFIX) and len(type_name) > len(COMMAND_SUFFIX):
        type_name = type_name[: -len(COMMAND_SUFFIX)]
    return type_name.lower()


def normalize_package_name(name: str) -> str:
    """PEP 503 normalisation: 'Foo_Bar.baz' -> 'foo-bar-baz'."""
    return re.sub(r"[-_.]+", "-", name).lower()


def read_text(path: Path) -> str | None:
    """Read a text file, returning None when it cannot be read."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def walk_files(root: Path, suffixes: tuple[str, ...] | None = None) -> Iterator[Path]:
    """Yield files under *root* in sorted order, pruning IGNORED_DIRS.

    When *suffixes* is given only files whose name ends with one of them are
    yielded.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for filename in sorted(filenames):
            if suffixes is None or filename.endswith(suffixes):
                yield Path(dirpath) / filename


def short_cwd(p: Path) -> str:
    """Return path relative to home directory, using ~ prefix."""
    try:
        rel = p.relative_to(Path.home())
        return f"~/{rel}" if str(rel) != "." else "~"
    except ValueError:
        return str(p)
