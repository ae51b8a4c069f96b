"""Built-in commands: list, about, config:publish."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

import click
from rich.table import Table

from artisan.core.config import ArtisanConfiguration, find_config_file, save_configuration
from artisan.core.errors import ConfigurationError
from artisan.core.utils import short_cwd

from .base import Command, console

if TYPE_CHECKING:
    from .registry import CommandRegistry


class _RegistryCommand(Command):
    def __init__(self, registry: CommandRegistry):
        self.registry = registry


class ListCommand(_RegistryCommand):
    """List available commands."""

    name = "list"
    examples = [["list"], ["list", "--unresolved"]]

    def params(self):
        return [
            click.Option(
                ["--unresolved"],
                is_flag=True,
                help="Also show command-like classes found in source but not loadable.",
            )
        ]

    def handle(self, unresolved: bool = False) -> int:
        config = self.registry.configuration
        table = Table(box=None, show_header=True, header_style="bold", pad_edge=False)
        table.add_column("command", no_wrap=True)
        table.add_column("origin", style="dim", no_wrap=True)
        table.add_column("aliases", style="dim")
        table.add_column("description")
        for descriptor in self.registry.table:
            table.add_row(
                descriptor.name,
                descriptor.origin.label,
                ", ".join(config.aliases_for(descriptor.name)),
                descriptor.description,
            )
        console.print(table)

        if unresolved and self.registry.unresolved:
            console.print()
            console.print("[bold]unresolved[/bold] [dim](found in source, not loadable)[/dim]")
            for descriptor in self.registry.unresolved:
                console.print(f"  {descriptor.name:<20} [dim]{descriptor.source}[/dim]", soft_wrap=True)
        if not self.registry.discovery_complete:
            console.print("[yellow]discovery incomplete: budget exhausted[/yellow]")
        return 0


class AboutCommand(_RegistryCommand):
    """Show what artisan detected about this project."""

    name = "about"

    def handle(self) -> int:
        context = self.registry.context
        config = self.registry.configuration
        manifest = context.manifest_path.name if context.manifest_path else "-"
        rows = [
            ("project", context.name),
            ("path", short_cwd(context.project_path)),
            ("type", context.project_type.value),
            ("manifest", manifest),
        ]
        rows.extend((key, value) for key, value in sorted(context.properties.items()))
        rows += [
            ("config files", "yes" if context.has_configuration_files else "no"),
            ("data context", "yes" if context.has_data_context else "no"),
            ("packages", str(len(context.available_packages))),
            ("artisan config", config.source.name if config.source else "defaults"),
            ("commands path", self.registry.discovery_path),
            ("discovery", "on" if config.enable_command_discovery else "off"),
        ]
        for key, value in rows:
            console.print(f"  [bold]{key:<16}[/bold] {value}")
        return 0


class PublishConfigCommand(_RegistryCommand):
    """Write artisan.json with the default configuration."""

    name = "config:publish"

    def params(self):
        return [click.Option(["--force", "-f"], is_flag=True, help="Overwrite an existing file.")]

    def handle(self, force: bool = False) -> int:
        project_path = self.registry.project_path
        existing = find_config_file(project_path)
        if existing is not None and not force:
            self.error(f"{existing.name} already exists (use --force to overwrite)")
            return 1
        try:
            path = save_configuration(ArtisanConfiguration(), project_path)
        except ConfigurationError as e:
            self.error(str(e))
            return 1
        self.info(f"created {path.name}")
        return 0


BUILTIN_COMMANDS = (ListCommand, AboutCommand, PublishConfigCommand)


def register_builtin_commands(registry: CommandRegistry) -> CommandRegistry:
    for cls in BUILTIN_COMMANDS:
        factory = partial(cls, registry)
        registry.add_command(factory, cls.name)
    return registry
