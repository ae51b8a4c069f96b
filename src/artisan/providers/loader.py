"""Provider loader: import extension providers named in artisan.json."""

from __future__ import annotations

import importlib
import inspect
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from artisan.core.diagnostics import Diagnostic, warning

if TYPE_CHECKING:
    from artisan.commands.registry import CommandRegistry
    from artisan.core.config import ArtisanConfiguration

# Attribute looked up when an identifier names only a module.
DEFAULT_ATTRIBUTE = "provider"


@runtime_checkable
class Provider(Protocol):
    """An extension that contributes commands to the registry."""

    def register(self, registry: CommandRegistry) -> None: ...


def _import_target(identifier: str):
    module_name, _, attr = identifier.partition(":")
    module = importlib.import_module(module_name.strip())
    target = getattr(module, (attr or DEFAULT_ATTRIBUTE).strip())
    return target() if inspect.isclass(target) else target


def load_provider(identifier: str) -> Provider:
    """Import ``module:attr`` (or ``module``, using its ``provider`` attribute).

    Classes are instantiated. Raises on import failure or when the target has
    no ``register`` method.
    """
    provider = _import_target(identifier)
    if not isinstance(provider, Provider):
        raise TypeError(f"{identifier} has no register() method")
    return provider


def load_providers(identifiers: list[str]) -> tuple[list[Provider], list[Diagnostic]]:
    providers: list[Provider] = []
    diagnostics: list[Diagnostic] = []
    for identifier in identifiers:
        try:
            providers.append(load_provider(identifier))
        except Exception as e:
            diagnostics.append(
                warning(f"could not load provider '{identifier}': {type(e).__name__}: {e}")
            )
    return providers, diagnostics


def apply_providers(
    registry: CommandRegistry, configuration: ArtisanConfiguration | None = None
) -> list[Provider]:
    """Load the configured providers and let each register its commands."""
    configuration = configuration or registry.configuration
    providers, diagnostics = load_providers(configuration.providers)
    registry.diagnostics.extend(diagnostics)

    applied: list[Provider] = []
    for provider in providers:
        name = type(provider).__name__
        mark = len(registry._registrations)
        try:
            if callable(configure := getattr(provider, "configure", None)):
                configure(configuration)
            provider.register(registry)
        except Exception as e:
            # drop whatever the provider registered before failing
            del registry._registrations[mark:]
            registry.diagnostics.append(
                warning(f"provider {name} failed: {type(e).__name__}: {e}")
            )
            continue
        applied.append(provider)
    return applied
