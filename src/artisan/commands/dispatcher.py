"""ArtisanGroup: click dispatcher that keeps registration order and resolves aliases."""

from __future__ import annotations

from collections.abc import Callable

import click

from .models import CommandDescriptor


class ArtisanGroup(click.Group):
    """A click group whose listing order is registration order.

    Aliases are resolved when a command is looked up, not when it is
    registered, so the table only ever holds canonical names.
    """

    def __init__(
        self,
        *args,
        resolver: Callable[[str], str] | None = None,
        aliases: dict[str, list[str]] | None = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.resolver = resolver or (lambda token: token)
        self.aliases = aliases or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(self.commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is not None:
            return command
        return super().get_command(ctx, self.resolver(cmd_name))

    def resolve_command(self, ctx: click.Context, args: list[str]):
        _, command, rest = super().resolve_command(ctx, args)
        # report the canonical name so ctx.invoked_subcommand is stable
        return (command.name if command else None), command, rest

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        rows = []
        for name in self.list_commands(ctx):
            command = self.commands[name]
            if command.hidden:
                continue
            label = name
            if aliases := self.aliases.get(name):
                label = f"{name} ({', '.join(aliases)})"
            rows.append((label, command.get_short_help_str(formatter.width - 6)))
        if rows:
            with formatter.section("Commands"):
                formatter.write_dl(rows)


def create_app(
    table: list[CommandDescriptor],
    resolver: Callable[[str], str] | None = None,
    aliases: dict[str, list[str]] | None = None,
    **kwargs,
) -> ArtisanGroup:
    """Register every built table entry exactly once, in table order."""
    kwargs.setdefault("name", "artisan")
    app = ArtisanGroup(resolver=resolver, aliases=aliases, **kwargs)
    for descriptor in table:
        if descriptor.click_command is None:
            continue
        if descriptor.name in app.commands:
            raise ValueError(f"duplicate command name in table: {descriptor.name}")
        app.add_command(descriptor.click_command, descriptor.name)
    return app
