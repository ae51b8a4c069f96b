"""Command: the base class every dispatchable artisan command derives from."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import ClassVar

import click
from rich.console import Console

console = Console()


class Command(ABC):
    """Base class for artisan commands.

    Subclasses implement :meth:`handle` and optionally :meth:`params`::

        class GreetCommand(Command):
            description = "Say hello."
            examples = [["greet", "Ada"]]

            def params(self):
                return [click.Argument(["who"])]

            def handle(self, who):
                self.info(f"hello {who}")
                return 0

    The dispatch name is ``name`` when set, otherwise derived from the class
    name (``GreetCommand`` -> ``greet``).
    """

    name: ClassVar[str | None] = None
    description: ClassVar[str] = ""
    examples: ClassVar[list[list[str]]] = []

    def params(self) -> list[click.Parameter]:
        return []

    @abstractmethod
    def handle(self, **options) -> int | None:
        """Run the command. Return the exit status (None means 0)."""

    def info(self, message: str) -> None:
        console.print(f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        console.print(f"[red]{message}[/red]")

    @classmethod
    def summary(cls) -> str:
        """Description, falling back to the first line of the docstring."""
        if cls.description:
            return cls.description
        doc = inspect.getdoc(cls)
        if doc and doc != inspect.getdoc(Command):
            return doc.strip().splitlines()[0]
        return ""

    def to_click(self, name: str) -> click.Command:
        def callback(**options):
            status = self.handle(**options)
            ctx = click.get_current_context()
            ctx.exit(status or 0)

        epilog = None
        if self.examples:
            epilog = "Examples:\n\n" + "\n".join(
                "  artisan " + " ".join(example) for example in self.examples
            )
        return click.Command(
            name,
            callback=callback,
            params=list(self.params()),
            help=self.summary(),
            short_help=self.summary() or None,
            epilog=epilog,
        )
