"""Exception types raised by artisan."""

from __future__ import annotations


class ArtisanError(Exception):
    """Base class for artisan errors."""


class ConfigurationError(ArtisanError):
    """The configuration file could not be written."""


class CommandRegistrationError(ArtisanError):
    """A command could not be activated or handed to the dispatcher."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"could not register command '{name}': {reason}")
        self.name = name
        self.reason = reason
