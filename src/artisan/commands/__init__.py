"""Commands: base class, discovery, registry, and the click dispatcher."""

from .base import Command
from .builtin import BUILTIN_COMMANDS, register_builtin_commands
from .discovery import CommandDiscoveryService, is_command_class, load_module
from .dispatcher import ArtisanGroup, create_app
from .models import CommandDescriptor, CommandOrigin, DiscoveryResult
from .registry import CommandRegistry, handle_name

__all__ = [
    "BUILTIN_COMMANDS",
    "ArtisanGroup",
    "Command",
    "CommandDescriptor",
    "CommandDiscoveryService",
    "CommandOrigin",
    "CommandRegistry",
    "DiscoveryResult",
    "create_app",
    "handle_name",
    "is_command_class",
    "load_module",
    "register_builtin_commands",
]
