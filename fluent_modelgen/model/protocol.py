"""Structural scanner protocol.

Any static front end (the bundled AST scanner, a stub-file reader, an
existing AST from another tool) can feed the builder by implementing this
interface.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from fluent_modelgen.core.sources import SourceUnit
from fluent_modelgen.model.entity import ClassRecord


@runtime_checkable
class Scanner(Protocol):
    """Structural scanner protocol."""

    def scan(self, unit: SourceUnit) -> list[ClassRecord]:
        """Return one record per top-level class of the unit, in declaration order."""
        ...
