"""CommandDiscoveryService: find Command subclasses under a directory.

Discovery runs in two tiers. The module tier imports every loadable module
file and collects the concrete Command subclasses it defines. Only when that
finds nothing does the heuristic tier run: it reads ``*.py`` files as text and
reports classes that look like commands. Heuristic hits have no handle, so they
are informational and are never registered with the dispatcher.
"""

from __future__ import annotations

import hashlib
import importlib.machinery
import importlib.util
import inspect
import re
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import ModuleType

from artisan.core.config import DiscoveryBudget
from artisan.core.diagnostics import Diagnostic, debug, warning
from artisan.core.utils import derive_command_name, read_text, walk_files

from .base import Command
from .models import CommandDescriptor, CommandOrigin, DiscoveryResult

_MODULE_PREFIX = "_artisan_discovered"

_COMMAND_CLASS_RE = re.compile(
    r"^[ \t]*class\s+(\w+)\s*\((?:[^)]*[\s,.])?(?:Base)?Command\s*[,)]", re.MULTILINE
)


def is_command_class(obj: object) -> bool:
    """True for concrete (non-abstract) subclasses of Command."""
    return (
        inspect.isclass(obj)
        and issubclass(obj, Command)
        and obj is not Command
        and not inspect.isabstract(obj)
    )


def command_name(cls: type) -> str:
    explicit = getattr(cls, "name", None)
    if isinstance(explicit, str) and explicit:
        return explicit
    return derive_command_name(cls.__name__)


def describe_class(
    cls: type, origin: CommandOrigin, name: str | None = None, source: Path | None = None
) -> CommandDescriptor:
    summary = cls.summary() if issubclass(cls, Command) else (inspect.getdoc(cls) or "")
    examples = tuple(tuple(str(a) for a in ex) for ex in getattr(cls, "examples", ()) or ())
    return CommandDescriptor(
        name=name or command_name(cls),
        origin=origin,
        handle=cls,
        description=summary,
        examples=examples,
        source=source,
    )


def _synthetic_package(directory: Path) -> str:
    """Register a package named after *directory* so sibling modules import relatively."""
    digest = hashlib.sha1(str(directory).encode()).hexdigest()[:12]
    package_name = f"{_MODULE_PREFIX}_{digest}"
    if package_name not in sys.modules:
        spec = importlib.machinery.ModuleSpec(package_name, None, is_package=True)
        spec.submodule_search_locations.append(str(directory))
        sys.modules[package_name] = importlib.util.module_from_spec(spec)
    return package_name


def load_module(path: Path) -> ModuleType:
    """Import the file at *path* under a unique synthetic module name.

    Files in the same directory share a synthetic parent package, so
    ``from ._helpers import x`` works between them.
    """
    path = path.resolve()
    stem = path.name.split(".")[0]
    module_name = f"{_synthetic_package(path.parent)}.{stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"no loader for {path.name}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


@contextmanager
def project_import_path(project_path: Path) -> Iterator[None]:
    """Put *project_path* and its ``src/`` on ``sys.path`` for the duration."""
    saved = list(sys.path)
    for entry in (project_path / "src", project_path):
        if entry.is_dir() and str(entry) not in sys.path:
            sys.path.insert(0, str(entry))
    try:
        yield
    finally:
        sys.path[:] = saved


class _Budget:
    def __init__(self, budget: DiscoveryBudget | None):
        self.max_files = budget.max_files if budget else None
        self.deadline = (
            time.monotonic() + budget.timeout if budget and budget.timeout is not None else None
        )
        self.files = 0

    def take(self) -> bool:
        """Account for one more file; False once the budget is spent."""
        if self.max_files is not None and self.files >= self.max_files:
            return False
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return False
        self.files += 1
        return True


class CommandDiscoveryService:
    """Enumerate command classes below a directory.

    Relative paths passed to :meth:`discover` resolve against *base_path*
    (default: the current directory).
    """

    def __init__(self, base_path: Path | None = None, budget: DiscoveryBudget | None = None):
        self.base_path = base_path or Path.cwd()
        self.budget = budget

    def discover(self, path: str | Path) -> DiscoveryResult:
        result = DiscoveryResult()
        search_path = self.base_path / path
        if not search_path.is_dir():
            result.diagnostics.append(debug("commands directory not found", search_path))
            return result

        budget = _Budget(self.budget)
        with project_import_path(self.base_path):
            found = self._scan_modules(search_path, budget, result)
        if not found and result.complete:
            found = self._scan_sources(search_path, budget, result)

        result.commands = _dedupe(found)
        return result

    def _scan_modules(
        self, search_path: Path, budget: _Budget, result: DiscoveryResult
    ) -> list[CommandDescriptor]:
        suffixes = tuple(importlib.machinery.all_suffixes())
        found: list[CommandDescriptor] = []
        for path in walk_files(search_path, suffixes):
            if path.name.startswith("_"):
                continue
            if not budget.take():
                _exhausted(result, search_path)
                break
            try:
                module = load_module(path)
            except (Exception, SystemExit) as e:
                result.diagnostics.append(
                    warning(f"could not load module: {type(e).__name__}: {e}", path)
                )
                continue
            for _, obj in inspect.getmembers(module, is_command_class):
                if obj.__module__ != module.__name__:
                    continue
                found.append(describe_class(obj, CommandOrigin.DISCOVERED_COMPILED, source=path))
        return found

    def _scan_sources(
        self, search_path: Path, budget: _Budget, result: DiscoveryResult
    ) -> list[CommandDescriptor]:
        found: list[CommandDescriptor] = []
        for path in walk_files(search_path, (".py",)):
            if path.name.startswith("_"):
                continue
            if not budget.take():
                _exhausted(result, search_path)
                break
            text = read_text(path)
            if text is None:
                result.diagnostics.append(warning("could not read source file", path))
                continue
            if "class " not in text or "Command" not in text:
                continue
            for m in _COMMAND_CLASS_RE.finditer(text):
                found.append(
                    CommandDescriptor(
                        name=derive_command_name(m.group(1)),
                        origin=CommandOrigin.DISCOVERED_HEURISTIC,
                        source=path,
                    )
                )
        return found


def _exhausted(result: DiscoveryResult, search_path: Path) -> None:
    result.complete = False
    result.diagnostics.append(
        warning("discovery budget exhausted; continuing with commands found so far", search_path)
    )


def _dedupe(descriptors: list[CommandDescriptor]) -> list[CommandDescriptor]:
    seen: set[CommandDescriptor] = set()
    unique: list[CommandDescriptor] = []
    for d in descriptors:
        if d not in seen:
            seen.add(d)
            unique.append(d)
    return unique
