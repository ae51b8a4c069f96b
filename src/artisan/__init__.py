"""artisan: discover a project's commands and dispatch them from one CLI."""

from .commands import Command, CommandRegistry
from .host import create_application, create_builder, run

__version__ = "0.1.0"

__all__ = [
    "Command",
    "CommandRegistry",
    "create_application",
    "create_builder",
    "run",
]
