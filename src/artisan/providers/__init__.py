"""Providers: extension packages that register additional commands."""

from .loader import Provider, apply_providers, load_provider, load_providers

__all__ = [
    "Provider",
    "apply_providers",
    "load_provider",
    "load_providers",
]
