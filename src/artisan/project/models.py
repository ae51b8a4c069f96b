"""Project context data model: ProjectType, ProjectContext."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from artisan.core.utils import normalize_package_name


class ProjectType(str, Enum):
    CONSOLE = "console"
    WEB_HOST = "web-host"
    WORKER_SERVICE = "worker-service"
    LIBRARY = "library"
    GENERIC = "generic"


@dataclass(frozen=True)
class ProjectContext:
    """What the detector learned about a project directory."""

    project_path: Path
    project_type: ProjectType = ProjectType.GENERIC
    manifest_path: Path | None = None
    properties: Mapping[str, str] = field(default_factory=dict)
    has_configuration_files: bool = False
    has_data_context: bool = False
    available_packages: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "available_packages", frozenset(self.available_packages))

    @property
    def name(self) -> str:
        return self.properties.get("name", self.project_path.name)

    def has_package(self, name: str) -> bool:
        return normalize_package_name(name) in self.available_packages
