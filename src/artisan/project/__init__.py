"""Project: context detection for the host project."""

from .detector import default_commands_path, detect, find_manifest
from .models import ProjectContext, ProjectType

__all__ = [
    "ProjectContext",
    "ProjectType",
    "default_commands_path",
    "detect",
    "find_manifest",
]
