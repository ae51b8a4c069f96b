"""Configuration: artisan.json, env overrides, aliases and paths."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

import json5
from dotenv import load_dotenv

from .diagnostics import Diagnostic, warning
from .errors import ConfigurationError

# Recognised config file names, in precedence order.
CONFIG_FILE_NAMES = ("artisan.json", "py-artisan.json", ".artisan.json")

DEFAULT_COMMANDS_PATH = "console/commands"

_FALSE_VALUES = ("0", "false", "no", "off")


def _default_paths() -> dict[str, str]:
    return {
        "commands": DEFAULT_COMMANDS_PATH,
        "models": "models",
        "controllers": "controllers",
        "views": "views",
    }


@dataclass
class LoggingConfiguration:
    level: str = "Information"
    enable_colors: bool = True
    enable_timestamps: bool = False


@dataclass
class DiscoveryBudget:
    """Upper bounds for one discovery run; None means unbounded."""

    max_files: int | None = None
    timeout: float | None = None


@dataclass
class ArtisanConfiguration:
    commands_path: str = DEFAULT_COMMANDS_PATH
    enable_command_discovery: bool = True
    aliases: dict[str, str] = field(default_factory=dict)
    providers: list[str] = field(default_factory=list)
    paths: dict[str, str] = field(default_factory=_default_paths)
    logging: LoggingConfiguration = field(default_factory=LoggingConfiguration)
    discovery: DiscoveryBudget = field(default_factory=DiscoveryBudget)
    # file the configuration was read from; None when defaults are in use
    source: Path | None = field(default=None, compare=False)
    # True when commands_path came from a file or the environment
    commands_path_explicit: bool = field(default=False, compare=False)

    def resolve_alias(self, token: str) -> str:
        """Map an alias to its canonical command name; unknown tokens pass through."""
        return self.aliases.get(token, token)

    def aliases_for(self, name: str) -> list[str]:
        """All aliases pointing at *name*, in configuration order."""
        return [alias for alias, target in self.aliases.items() if target == name]

    def to_dict(self) -> dict:
        data: dict = {
            "commandsPath": self.commands_path,
            "enableCommandDiscovery": self.enable_command_discovery,
            "aliases": dict(self.aliases),
            "providers": list(self.providers),
            "paths": dict(self.paths),
            "logging": {
                "level": self.logging.level,
                "enableColors": self.logging.enable_colors,
                "enableTimestamps": self.logging.enable_timestamps,
            },
        }
        budget = {}
        if self.discovery.max_files is not None:
            budget["maxFiles"] = self.discovery.max_files
        if self.discovery.timeout is not None:
            budget["timeout"] = self.discovery.timeout
        if budget:
            data["discovery"] = budget
        return data


def _fold(key: str) -> str:
    """Case- and separator-insensitive key: 'enable_command_discovery' == 'EnableCommandDiscovery'."""
    return key.replace("_", "").replace("-", "").lower()


def _folded(data: dict) -> dict:
    return {_fold(k): v for k, v in data.items() if isinstance(k, str)}


def _apply_settings(config: ArtisanConfiguration, data: dict, path: Path) -> list[Diagnostic]:
    """Apply one parsed settings document to *config*, skipping ill-typed fields."""
    diagnostics: list[Diagnostic] = []
    data = _folded(data)

    def bad(key: str, expected: str) -> None:
        diagnostics.append(warning(f"ignoring '{key}': expected {expected}", path))

    def str_entries(key: str, value) -> dict[str, str] | None:
        if not isinstance(value, dict):
            bad(key, "an object")
            return None
        entries = {}
        for k, v in value.items():
            if isinstance(v, str):
                entries[k] = v
            else:
                bad(f"{key}.{k}", "a string")
        return entries

    if "commandspath" in data:
        if isinstance(data["commandspath"], str) and data["commandspath"]:
            config.commands_path = data["commandspath"]
            config.commands_path_explicit = True
        else:
            bad("commandsPath", "a non-empty string")

    if "enablecommanddiscovery" in data:
        if isinstance(data["enablecommanddiscovery"], bool):
            config.enable_command_discovery = data["enablecommanddiscovery"]
        else:
            bad("enableCommandDiscovery", "a boolean")

    if "aliases" in data:
        if (aliases := str_entries("aliases", data["aliases"])) is not None:
            config.aliases.update(aliases)

    if "paths" in data:
        if (paths := str_entries("paths", data["paths"])) is not None:
            config.paths.update(paths)

    if "providers" in data:
        if isinstance(data["providers"], list):
            config.providers = [str(p) for p in data["providers"]]
        else:
            bad("providers", "a list")

    if "logging" in data:
        if isinstance(data["logging"], dict):
            logging = _folded(data["logging"])
            if isinstance(logging.get("level"), str):
                config.logging.level = logging["level"]
            if isinstance(logging.get("enablecolors"), bool):
                config.logging.enable_colors = logging["enablecolors"]
            if isinstance(logging.get("enabletimestamps"), bool):
                config.logging.enable_timestamps = logging["enabletimestamps"]
        else:
            bad("logging", "an object")

    if "discovery" in data:
        if isinstance(data["discovery"], dict):
            budget = _folded(data["discovery"])
            max_files = budget.get("maxfiles")
            if isinstance(max_files, int) and not isinstance(max_files, bool) and max_files > 0:
                config.discovery.max_files = max_files
            timeout = budget.get("timeout")
            if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
                config.discovery.timeout = float(timeout)
        else:
            bad("discovery", "an object")

    return diagnostics


def find_config_file(project_path: Path) -> Path | None:
    for name in CONFIG_FILE_NAMES:
        candidate = project_path / name
        if candidate.is_file():
            return candidate
    return None


def _apply_env(config: ArtisanConfiguration) -> None:
    if commands_path := os.getenv("ARTISAN_COMMANDS_PATH"):
        config.commands_path = commands_path
        config.commands_path_explicit = True
    if (discovery := os.getenv("ARTISAN_DISCOVERY")) is not None:
        config.enable_command_discovery = discovery.strip().lower() not in _FALSE_VALUES
    if level := os.getenv("ARTISAN_LOG_LEVEL"):
        config.logging.level = level


def load_configuration(
    project_path: Path | None = None,
    diagnostics: list[Diagnostic] | None = None,
) -> ArtisanConfiguration:
    """Load config with priority: env > .env > artisan.json > defaults.

    Never raises: an unreadable or malformed file yields the defaults and a
    warning appended to *diagnostics*.
    """
    project_path = project_path or Path.cwd()
    diagnostics = diagnostics if diagnostics is not None else []

    load_dotenv(project_path / ".env")

    config = ArtisanConfiguration()
    path = find_config_file(project_path)
    if path is not None:
        try:
            data = json5.loads(path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as e:
            diagnostics.append(warning(f"could not load artisan configuration: {e}", path))
        else:
            if isinstance(data, dict):
                candidate = ArtisanConfiguration(source=path)
                diagnostics.extend(_apply_settings(candidate, data, path))
                config = candidate
            else:
                diagnostics.append(
                    warning("could not load artisan configuration: not a JSON object", path)
                )

    _apply_env(config)
    return config


def save_configuration(config: ArtisanConfiguration, project_path: Path | None = None) -> Path:
    """Write *config* as pretty-printed JSON to artisan.json. Returns the path written."""
    project_path = project_path or Path.cwd()
    path = project_path / CONFIG_FILE_NAMES[0]
    try:
        path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"could not write {path}: {e}") from e
    return path


def get_path(config: ArtisanConfiguration, key: str) -> str:
    """Relative directory for a logical area, or '' when unknown."""
    return config.paths.get(key, "")
