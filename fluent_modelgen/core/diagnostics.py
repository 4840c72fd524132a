"""Structured diagnostics and the default Messager.

Every failure path of a batch ends in a ``Diagnostic``. The collector keeps
them in report order, drops exact duplicates (a superclass error seen from
several subclasses is reported once) and forwards each one to ``logging``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fluent_modelgen.core.enums import DiagnosticKind, Severity
from fluent_modelgen.core.exceptions import ModelBuildError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.NOTE: logging.DEBUG,
}


@dataclass(frozen=True)
class Diagnostic:
    """One diagnostic associated with a class and, optionally, a member."""

    severity: Severity
    kind: DiagnosticKind
    message: str
    class_name: str | None = None
    member: str | None = None
    line: int | None = None

    @classmethod
    def from_error(cls, error: ModelBuildError, line: int | None = None) -> Diagnostic:
        """Build an error diagnostic from a model-building exception."""
        return cls(
            severity=Severity.ERROR,
            kind=error.kind,
            message=error.detail,
            class_name=error.class_name,
            member=error.member,
            line=line,
        )

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def __str__(self) -> str:
        where = self.class_name or "<batch>"
        if self.member:
            where = f"{where}.{self.member}"
        if self.line is not None:
            where = f"{where} (line {self.line})"
        return f"{self.severity.value}: [{self.kind.value}] {where}: {self.message}"


class DiagnosticCollector:
    """Messager that collects diagnostics and mirrors them to logging."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger
        self._diagnostics: list[Diagnostic] = []
        self._seen: set[Diagnostic] = set()

    def report(self, diagnostic: Diagnostic) -> None:
        """Record a diagnostic unless an identical one was already reported."""
        if diagnostic in self._seen:
            return
        self._seen.add(diagnostic)
        self._diagnostics.append(diagnostic)
        self._log.log(_LOG_LEVELS[diagnostic.severity], "%s", diagnostic)

    def error(self, kind: DiagnosticKind, message: str, **where: object) -> None:
        self.report(Diagnostic(Severity.ERROR, kind, message, **where))  # type: ignore[arg-type]

    def warning(self, kind: DiagnosticKind, message: str, **where: object) -> None:
        self.report(Diagnostic(Severity.WARNING, kind, message, **where))  # type: ignore[arg-type]

    def note(self, message: str, **where: object) -> None:
        self.report(Diagnostic(Severity.NOTE, DiagnosticKind.GENERATION, message, **where))  # type: ignore[arg-type]

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """All diagnostics in report order."""
        return list(self._diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self._diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self._diagnostics if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self._diagnostics)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        """Diagnostics of one kind, in report order."""
        return [d for d in self._diagnostics if d.kind is kind]

    def __len__(self) -> int:
        return len(self._diagnostics)
