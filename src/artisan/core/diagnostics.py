"""Diagnostics: structured warnings emitted by library code, printed at the CLI edge."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from artisan.core.config import LoggingConfiguration

DEBUG = "debug"
INFO = "info"
WARNING = "warning"
ERROR = "error"

_SEVERITY = {DEBUG: 10, INFO: 20, WARNING: 30, ERROR: 40}

# Level names accepted in artisan.json (.NET style) and their Python equivalents.
_LEVEL_ALIASES = {
    "trace": 0,
    "debug": 10,
    "information": 20,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
    "fatal": 50,
    "none": 100,
    "off": 100,
}

_STYLES = {DEBUG: "dim", INFO: "green", WARNING: "yellow", ERROR: "red"}


@dataclass(frozen=True)
class Diagnostic:
    level: str
    message: str
    path: Path | None = None

    @property
    def severity(self) -> int:
        return _SEVERITY.get(self.level, 30)

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.level}: {self.path}: {self.message}"
        return f"{self.level}: {self.message}"


def warning(message: str, path: Path | None = None) -> Diagnostic:
    return Diagnostic(WARNING, message, path)


def debug(message: str, path: Path | None = None) -> Diagnostic:
    return Diagnostic(DEBUG, message, path)


def level_threshold(level: str) -> int:
    """Map a configured level name to a numeric threshold (unknown -> warning)."""
    return _LEVEL_ALIASES.get(level.strip().lower(), 30)


def make_console(logging: LoggingConfiguration | None = None, stderr: bool = True) -> Console:
    if logging is None:
        return Console(stderr=stderr)
    return Console(stderr=stderr, no_color=not logging.enable_colors)


def print_diagnostics(
    diagnostics: list[Diagnostic],
    logging: LoggingConfiguration | None = None,
    console: Console | None = None,
    verbose: bool = False,
) -> int:
    """Print diagnostics at or above the configured level. Returns how many were shown."""
    console = console or make_console(logging)
    threshold = level_threshold(logging.level) if logging else 30
    if verbose:
        threshold = min(threshold, 10)
    timestamps = bool(logging and logging.enable_timestamps)

    shown = 0
    for diag in diagnostics:
        if diag.severity < threshold:
            continue
        style = _STYLES.get(diag.level, "yellow")
        prefix = f"[dim]{datetime.now():%H:%M:%S}[/dim] " if timestamps else ""
        console.print(f"  {prefix}[{style}]{escape(str(diag))}[/{style}]", soft_wrap=True)
        shown += 1
    return shown
