"""Source unit discovery.

Walks a source tree and derives a dotted module name for every ``.py`` file:

    src/library/models.py      -> "library.models"
    src/library/__init__.py    -> "library"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset({
    "__pycache__", ".git", ".venv", "venv", "env", ".tox", ".eggs",
    ".pytest_cache", ".mypy_cache", "build", "dist", "node_modules",
})


@dataclass(frozen=True)
class SourceUnit:
    """One Python module handed to the scanner."""

    module: str
    text: str
    path: Path | None = None
    is_package: bool = False
    read_error: str | None = None  # set when the file could not be read or decoded

    @property
    def package(self) -> str:
        """Package that relative imports in this unit resolve against."""
        if self.is_package:
            return self.module
        return self.module.rpartition(".")[0]


def module_name_for(path: Path, root: Path) -> tuple[str, bool]:
    """Return ``(module_name, is_package)`` for a file below ``root``."""
    parts = list(path.relative_to(root).with_suffix("").parts)
    is_package = parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    return ".".join(parts), is_package


def discover_sources(root: Path | str) -> list[SourceUnit]:
    """Load every Python module below ``root``, sorted by module name.

    Files that cannot be read or decoded come back with empty text and
    ``read_error`` set, so the batch reports them instead of losing them.
    """
    root_dir = Path(root)
    units: list[SourceUnit] = []
    if not root_dir.exists():
        return units

    for py_file in sorted(root_dir.rglob("*.py")):
        relative = py_file.relative_to(root_dir)
        if any(part in SKIP_DIRS for part in relative.parts[:-1]):
            continue
        module, is_package = module_name_for(py_file, root_dir)
        if not module:
            continue
        try:
            text = py_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read %s: %s", py_file, e)
            units.append(SourceUnit(
                module=module, text="", path=py_file, is_package=is_package, read_error=str(e)
            ))
            continue
        units.append(SourceUnit(module=module, text=text, path=py_file, is_package=is_package))

    units.sort(key=lambda u: u.module)
    return units
