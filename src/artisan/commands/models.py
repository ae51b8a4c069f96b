"""Command table data models: CommandOrigin, CommandDescriptor, DiscoveryResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Callable

import click

from artisan.core.diagnostics import Diagnostic


class CommandOrigin(IntEnum):
    """Where a command came from. Lower value wins a name collision."""

    EXPLICIT = 0
    DISCOVERED_COMPILED = 1
    DISCOVERED_HEURISTIC = 2

    @property
    def label(self) -> str:
        return {0: "explicit", 1: "discovered", 2: "unresolved"}[self.value]


@dataclass(eq=False)
class CommandDescriptor:
    """One entry of the command table.

    Identity is ``(name, origin)``. ``handle`` is a zero-argument factory for
    the command (normally the class); heuristic entries have none and never
    reach the dispatcher.
    """

    name: str
    origin: CommandOrigin
    handle: Callable[[], object] | None = None
    description: str = ""
    examples: tuple[tuple[str, ...], ...] = ()
    source: Path | None = None
    click_command: click.Command | None = field(default=None, repr=False)

    @property
    def resolved(self) -> bool:
        return self.handle is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandDescriptor):
            return NotImplemented
        return (self.name, self.origin) == (other.name, other.origin)

    def __hash__(self) -> int:
        return hash((self.name, self.origin))


@dataclass
class DiscoveryResult:
    commands: list[CommandDescriptor] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    complete: bool = True

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.commands]
