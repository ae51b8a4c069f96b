"""ProjectContextDetector: classify a project directory from its manifest and tree."""

from __future__ import annotations

import configparser
import re
import tomllib
from pathlib import Path

from artisan.core.config import DEFAULT_COMMANDS_PATH
from artisan.core.utils import normalize_package_name, read_text, walk_files

from .models import ProjectContext, ProjectType

MANIFEST_NAMES = ("pyproject.toml", "setup.cfg", "setup.py")

CONFIGURATION_FILES = (
    ".env",
    "settings.json",
    "config.json",
    "settings.toml",
    "config.toml",
    "settings.yaml",
    "config.yaml",
    "settings.py",
)

REQUIREMENTS_FILE = "requirements.txt"

_WEB_HOST_RE = re.compile(
    r"\b(django|fastapi|flask|starlette|aiohttp|sanic|litestar|quart)\b", re.IGNORECASE
)
_WORKER_RE = re.compile(r"\b(celery|dramatiq|rq|arq|huey)\b", re.IGNORECASE)
_BUILD_MARKERS = ("[project]", "[build-system]", "[metadata]", "[tool.poetry]", "setup(")
_EXECUTABLE_MARKERS = (
    "[project.scripts]",
    "[project.gui-scripts]",
    "[tool.poetry.scripts]",
    "console_scripts",
    "entry_points",
)

_PROPERTY_PATTERNS = {
    "name": re.compile(r"^\s*name\s*[=:]\s*[\"']?([A-Za-z0-9][\w.\-]*)[\"']?", re.MULTILINE),
    "version": re.compile(r"^\s*version\s*[=:]\s*[\"']?([0-9][\w.\-+!]*)[\"']?", re.MULTILINE),
    "requires-python": re.compile(
        r"(?:requires-python|python_requires)\s*[=:]\s*[\"']?([^\"'\n,]+)[\"']?"
    ),
}
_PACKAGES_RE = re.compile(r"packages\s*=\s*\[\s*(?:\{\s*include\s*=\s*)?[\"']([\w.]+)[\"']")
_INSTALL_REQUIRES_RE = re.compile(r"install_requires\s*=\s*\[(.*?)\]", re.DOTALL)
_QUOTED_RE = re.compile(r"[\"']([^\"']+)[\"']")
_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._\-]*)")

# (module marker, declaration markers): a file declares a data context when it
# mentions the module and at least one of the declarations.
_DATA_CONTEXT_MARKERS = (
    ("sqlalchemy", ("DeclarativeBase", "declarative_base(", "sessionmaker(")),
    ("sqlmodel", ("SQLModel", "Session(")),
    ("django", ("models.Model",)),
)


def find_manifest(project_path: Path) -> Path | None:
    """Pick the project manifest at the root of *project_path*.

    One candidate is used as-is; with several, the first whose name carries no
    'test' marker wins, falling back to the first in listing order.
    """
    try:
        entries = sorted(project_path.iterdir())
    except OSError:
        return None
    candidates = [
        p
        for p in entries
        if p.is_file()
        and (p.name in MANIFEST_NAMES or (p.name.startswith("pyproject") and p.suffix == ".toml"))
    ]
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    for candidate in candidates:
        if "test" not in candidate.name.lower():
            return candidate
    return candidates[0]


def classify(manifest_text: str) -> ProjectType:
    if _WEB_HOST_RE.search(manifest_text):
        return ProjectType.WEB_HOST
    if _WORKER_RE.search(manifest_text):
        return ProjectType.WORKER_SERVICE
    if any(marker in manifest_text for marker in _BUILD_MARKERS):
        if any(marker in manifest_text for marker in _EXECUTABLE_MARKERS):
            return ProjectType.CONSOLE
        return ProjectType.LIBRARY
    return ProjectType.GENERIC


def extract_properties(manifest_text: str, project_path: Path) -> dict[str, str]:
    properties: dict[str, str] = {}
    for key, pattern in _PROPERTY_PATTERNS.items():
        if m := pattern.search(manifest_text):
            properties[key] = m.group(1).strip()

    if m := _PACKAGES_RE.search(manifest_text):
        properties["root-package"] = m.group(1)
    elif "name" in properties:
        guess = normalize_package_name(properties["name"]).replace("-", "_")
        for base in (project_path / "src", project_path):
            if (base / guess / "__init__.py").is_file():
                properties["root-package"] = guess
                break
    return properties


def has_configuration_files(project_path: Path) -> bool:
    return any((project_path / name).is_file() for name in CONFIGURATION_FILES)


def has_data_context(project_path: Path) -> bool:
    for path in walk_files(project_path, (".py",)):
        text = read_text(path)
        if text is None:
            continue
        for module, declarations in _DATA_CONTEXT_MARKERS:
            if module in text and any(d in text for d in declarations):
                return True
    return False


def _requirement_name(spec: str) -> str | None:
    spec = spec.strip()
    if not spec or spec.startswith(("#", "-")):
        return None
    m = _REQUIREMENT_NAME_RE.match(spec)
    return normalize_package_name(m.group(1)) if m else None


def _manifest_requirements(manifest: Path, text: str) -> list[str]:
    if manifest.suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError:
            return []
        project = data.get("project", {})
        reqs = list(project.get("dependencies", []))
        for extra in project.get("optional-dependencies", {}).values():
            reqs.extend(extra)
        poetry = data.get("tool", {}).get("poetry", {}).get("dependencies", {})
        reqs.extend(name for name in poetry if name.lower() != "python")
        return [r for r in reqs if isinstance(r, str)]

    if manifest.suffix == ".cfg":
        parser = configparser.ConfigParser()
        try:
            parser.read_string(text)
        except configparser.Error:
            return []
        return parser.get("options", "install_requires", fallback="").splitlines()

    if m := _INSTALL_REQUIRES_RE.search(text):
        return _QUOTED_RE.findall(m.group(1))
    return []


def available_packages(project_path: Path, manifest: Path | None) -> frozenset[str]:
    """Package names from requirements.txt and the manifest's dependency entries."""
    specs: list[str] = []
    requirements = read_text(project_path / REQUIREMENTS_FILE)
    if requirements:
        specs.extend(requirements.splitlines())
    if manifest is not None and (text := read_text(manifest)):
        specs.extend(_manifest_requirements(manifest, text))
    return frozenset(name for spec in specs if (name := _requirement_name(spec)))


def detect(project_path: Path | None = None) -> ProjectContext:
    """Inspect *project_path* and return its ProjectContext. Never raises."""
    project_path = (project_path or Path.cwd()).resolve()
    if not project_path.is_dir():
        return ProjectContext(project_path=project_path)

    manifest = find_manifest(project_path)
    project_type = ProjectType.GENERIC
    properties: dict[str, str] = {}
    if manifest is not None and (text := read_text(manifest)) is not None:
        project_type = classify(text)
        properties = extract_properties(text, project_path)

    return ProjectContext(
        project_path=project_path,
        project_type=project_type,
        manifest_path=manifest,
        properties=properties,
        has_configuration_files=has_configuration_files(project_path),
        has_data_context=has_data_context(project_path),
        available_packages=available_packages(project_path, manifest),
    )


def default_commands_path(context: ProjectContext) -> str:
    """Commands directory for a project: <root-package>/console/commands when present."""
    root_package = context.properties.get("root-package")
    if root_package:
        package_dir = root_package.replace(".", "/")
        for base in ("src", ""):
            rel = f"{base}/{package_dir}/{DEFAULT_COMMANDS_PATH}".lstrip("/")
            if (context.project_path / rel).is_dir():
                return rel
    return DEFAULT_COMMANDS_PATH
