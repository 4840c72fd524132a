"""Directory filer - writes generated modules below an output root.

Module ``library.book_model`` lands in ``<root>/library/book_model.py``.
Missing package directories get an empty ``__init__.py`` so the output tree
is importable on its own.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fluent_modelgen.core.exceptions import FilerError

logger = logging.getLogger(__name__)


class DirectoryFiler:
    """Filer writing generated modules as files below ``root``.

    Args:
        root: Output directory. Created on first write if missing.
        init_packages: Create ``__init__.py`` in new package directories.
    """

    def __init__(self, root: Path | str, *, init_packages: bool = True) -> None:
        self._root = Path(root)
        self._init_packages = init_packages
        self._written: dict[str, Path] = {}

    @property
    def root(self) -> Path:
        return self._root

    @property
    def written(self) -> dict[str, Path]:
        """Module name -> file path of every module written in this batch."""
        return dict(self._written)

    def path_for(self, module: str) -> Path:
        return self._root.joinpath(*module.split(".")).with_suffix(".py")

    def create_source(self, module: str, text: str) -> None:
        if module in self._written:
            raise FilerError(module, "module already written in this batch")

        path = self.path_for(module)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if self._init_packages:
                self._ensure_packages(path.parent)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise FilerError(module, str(e)) from e

        self._written[module] = path
        logger.debug("Wrote %s to %s", module, path)

    def _ensure_packages(self, directory: Path) -> None:
        current = directory
        while current != self._root and self._root in current.parents:
            init = current / "__init__.py"
            if not init.exists():
                init.write_text("", encoding="utf-8")
            current = current.parent
