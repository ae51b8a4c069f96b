"""Host entry points: create_builder, create_application, run."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from rich.console import Console

from .commands import ArtisanGroup, CommandRegistry, create_app, register_builtin_commands
from .core.diagnostics import make_console, print_diagnostics
from .providers import apply_providers


def create_builder(
    project_path: Path | None = None,
    commands: Iterable[Callable | tuple[Callable, str]] = (),
    builtins: bool = True,
) -> CommandRegistry:
    """Registry for *project_path* with built-ins, providers and *commands* queued.

    Items of *commands* are handles or ``(handle, name)`` pairs.
    """
    registry = CommandRegistry(project_path)
    if builtins:
        register_builtin_commands(registry)
    for item in commands:
        if isinstance(item, tuple):
            registry.add_command(*item)
        else:
            registry.add_command(item)
    registry.configure(apply_providers)
    return registry


def create_application(registry: CommandRegistry, **kwargs) -> ArtisanGroup:
    """Build the registry's table and register it with a fresh dispatcher."""
    table = registry.build()
    config = registry.configuration
    aliases = {d.name: config.aliases_for(d.name) for d in table}
    return create_app(table, resolver=registry.resolve, aliases=aliases, **kwargs)


def run(
    args: list[str],
    project_path: Path | None = None,
    commands: Iterable[Callable | tuple[Callable, str]] = (),
    verbose: bool = False,
    console: Console | None = None,
) -> int:
    """Build, print diagnostics, dispatch *args*. Returns the exit status."""
    registry = create_builder(project_path, commands)
    app = create_application(
        registry, help="Run project commands discovered by artisan."
    )
    logging = registry.configuration.logging
    print_diagnostics(
        registry.diagnostics, logging, console or make_console(logging), verbose=verbose
    )
    try:
        app.main(args=args, prog_name="artisan")
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    return 0
