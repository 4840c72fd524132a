"""Host protocols.

A generation batch talks to its host through two narrow interfaces: a
Filer that accepts generated modules and a Messager that accepts
diagnostics. Every host (directory output, in-memory, test doubles) MUST
implement these protocols.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fluent_modelgen.core.diagnostics import Diagnostic


@runtime_checkable
class Filer(Protocol):
    """Sink for generated source modules."""

    def create_source(self, module: str, text: str) -> None:
        """Write one generated module.

        Raises:
            FilerError: If the module cannot be written, including a second
                write of the same module within one batch.
        """
        ...


@runtime_checkable
class Messager(Protocol):
    """Sink for diagnostics."""

    def report(self, diagnostic: Diagnostic) -> None:
        """Record one diagnostic."""
        ...
