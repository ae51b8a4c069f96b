"""CommandRegistry: merge explicit and discovered commands into the command table."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from functools import partial
from pathlib import Path

from artisan.core.config import ArtisanConfiguration, load_configuration
from artisan.core.diagnostics import Diagnostic, debug, warning
from artisan.core.errors import CommandRegistrationError
from artisan.core.utils import derive_command_name
from artisan.project import ProjectContext, default_commands_path, detect

from .discovery import CommandDiscoveryService, command_name, describe_class
from .models import CommandDescriptor, CommandOrigin


def _handle_class(handle: Callable) -> type | None:
    """The class behind a handle: the handle itself or a partial of a class."""
    if inspect.isclass(handle):
        return handle
    if isinstance(handle, partial) and inspect.isclass(handle.func):
        return handle.func
    return None


def handle_name(handle: Callable) -> str:
    """Dispatch name for an explicit handle registered without a name."""
    if (cls := _handle_class(handle)) is not None:
        return command_name(cls)
    return derive_command_name(getattr(handle, "__name__", type(handle).__name__))


class CommandRegistry:
    """Builder for the command table handed to the dispatcher.

    Explicit registrations are processed first, in order; a later explicit
    registration with the same name replaces an earlier one. Discovered
    commands are then added only under names that are still free, module-tier
    hits before heuristic ones.
    """

    def __init__(
        self,
        project_path: Path | None = None,
        configuration: ArtisanConfiguration | None = None,
        context: ProjectContext | None = None,
    ):
        self.project_path = (project_path or Path.cwd()).resolve()
        self.diagnostics: list[Diagnostic] = []
        if configuration is None:
            configuration = load_configuration(self.project_path, self.diagnostics)
        self.configuration = configuration
        self.context = context or detect(self.project_path)
        self.table: list[CommandDescriptor] = []
        self.unresolved: list[CommandDescriptor] = []
        self.discovery_complete = True
        self._registrations: list[tuple[Callable, str | None]] = []
        self._configure_callbacks: list[Callable[[CommandRegistry], None]] = []
        self._discovery_path: str | None = None

    @property
    def discovery_path(self) -> str:
        if self._discovery_path is not None:
            return self._discovery_path
        if self.configuration.commands_path_explicit:
            return self.configuration.commands_path
        return default_commands_path(self.context)

    def add_command(self, handle: Callable, name: str | None = None) -> CommandRegistry:
        self._registrations.append((handle, name))
        return self

    def use_command_discovery(self, path: str | Path) -> CommandRegistry:
        self._discovery_path = str(path)
        return self

    def configure(self, callback: Callable[[CommandRegistry], None]) -> CommandRegistry:
        """Run *callback* against this registry just before the table is built."""
        self._configure_callbacks.append(callback)
        return self

    def resolve(self, token: str) -> str:
        return self.configuration.resolve_alias(token)

    def _explicit_descriptors(self) -> list[CommandDescriptor]:
        descriptors = []
        for handle, name in self._registrations:
            name = name or handle_name(handle)
            if (cls := _handle_class(handle)) is not None:
                descriptor = describe_class(cls, CommandOrigin.EXPLICIT, name=name)
                descriptor.handle = handle
                descriptors.append(descriptor)
            else:
                descriptors.append(
                    CommandDescriptor(
                        name=name,
                        origin=CommandOrigin.EXPLICIT,
                        handle=handle,
                        description=(inspect.getdoc(handle) or "").split("\n")[0],
                    )
                )
        return descriptors

    def _discovered_descriptors(self) -> list[CommandDescriptor]:
        if not self.configuration.enable_command_discovery:
            self.diagnostics.append(debug("command discovery disabled"))
            return []
        service = CommandDiscoveryService(self.project_path, self.configuration.discovery)
        result = service.discover(self.discovery_path)
        self.diagnostics.extend(result.diagnostics)
        self.discovery_complete = result.complete
        return sorted(result.commands, key=lambda d: d.origin)

    def merge(self) -> dict[str, CommandDescriptor]:
        """Merge explicit and discovered entries without activating anything."""
        callbacks, self._configure_callbacks = self._configure_callbacks, []
        for callback in callbacks:
            callback(self)

        table: dict[str, CommandDescriptor] = {}
        for descriptor in self._explicit_descriptors():
            table[descriptor.name] = descriptor

        self.unresolved = []
        for descriptor in self._discovered_descriptors():
            if descriptor.name in table:
                continue
            table[descriptor.name] = descriptor
        for name, descriptor in list(table.items()):
            if not descriptor.resolved:
                self.unresolved.append(table.pop(name))
        return table

    def _activate(self, descriptor: CommandDescriptor) -> None:
        try:
            command = descriptor.handle()
            descriptor.click_command = command.to_click(descriptor.name)
        except Exception as e:
            raise CommandRegistrationError(descriptor.name, f"{type(e).__name__}: {e}") from e

    def build(self) -> list[CommandDescriptor]:
        """Produce the ordered command table. Entries that fail to activate are dropped."""
        built: list[CommandDescriptor] = []
        for descriptor in self.merge().values():
            try:
                self._activate(descriptor)
            except CommandRegistrationError as e:
                self.diagnostics.append(warning(str(e), descriptor.source))
                continue
            built.append(descriptor)
        self.table = built
        return built
