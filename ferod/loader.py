"""
ferod/loader.py

Discovers command and event listener files.

A source only produces raw values; collect() decides whether each one has
the expected shape. Every problem is tied to the file it came from and
never stops the remaining files from loading.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Protocol

from ferod.errors import InvalidModuleError


logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "**/*.py"
_MODULE_PREFIX = "ferod_module"


class ModuleSource(Protocol):
    def load_all(self) -> list[tuple[str, Any]]: ...


class FileModuleSource:
    """
    Imports every file matching `pattern` under `directory` and yields the
    value of its `attribute` (falling back to the module object itself).
    Files whose name starts with an underscore are skipped.
    """

    def __init__(self, directory: str | Path, attribute: str, pattern: str = DEFAULT_PATTERN) -> None:
        self.directory = Path(directory)
        self.attribute = attribute
        self.pattern = pattern
        self.errors: list[InvalidModuleError] = []

    def paths(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p for p in self.directory.glob(self.pattern)
            if p.is_file() and not p.name.startswith("_")
        )

    def _module_name(self, path: Path) -> str:
        digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
        return f"{_MODULE_PREFIX}_{path.stem}_{digest}"

    def load_file(self, path: Path) -> Any:
        name = self._module_name(path)
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise InvalidModuleError(str(path), "not an importable Python file")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(name, None)
            raise InvalidModuleError(str(path), f"import failed: {type(e).__name__}: {e}") from e
        return getattr(module, self.attribute, module)

    def load_all(self) -> list[tuple[str, Any]]:
        self.errors = []
        loaded: list[tuple[str, Any]] = []
        for path in self.paths():
            try:
                loaded.append((str(path), self.load_file(path)))
            except InvalidModuleError as e:
                logger.error("Skipping %s", e, exc_info=e.__cause__)
                self.errors.append(e)
        return loaded


class MemoryModuleSource:
    """In-memory (path, value) pairs, for tests and programmatic registration."""

    def __init__(self, entries: Iterable[tuple[str, Any]] = ()) -> None:
        self.entries = list(entries)

    def load_all(self) -> list[tuple[str, Any]]:
        return list(self.entries)


def collect(
    source: ModuleSource,
    expected: type | tuple[type, ...],
) -> tuple[list[tuple[str, Any]], list[InvalidModuleError]]:
    """
    Load everything from `source` and keep the values that are instances of
    `expected`. Returns (accepted (path, value) pairs, errors).
    """
    names = expected.__name__ if isinstance(expected, type) else " or ".join(t.__name__ for t in expected)
    accepted: list[tuple[str, Any]] = []
    loaded = source.load_all()
    errors: list[InvalidModuleError] = list(getattr(source, "errors", []))
    for path, value in loaded:
        if isinstance(value, expected):
            accepted.append((path, value))
            continue
        error = InvalidModuleError(path, f"does not export {names} (got {type(value).__name__})")
        logger.error("Skipping %s", error)
        errors.append(error)
    return accepted, errors
