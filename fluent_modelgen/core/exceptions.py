"""fluent_modelgen exception hierarchy.

Exceptions are raised inside the scanner, resolver, builder and filer and
converted into diagnostics at the per-class boundary. None of them escape
``ModelProcessor.process``.
"""

from __future__ import annotations

from fluent_modelgen.core.enums import DiagnosticKind


class ModelGenError(Exception):
    """Base exception for all fluent_modelgen errors."""


# --- Model building ---


class ModelBuildError(ModelGenError):
    """Base for errors that exclude one class from generation."""

    kind: DiagnosticKind = DiagnosticKind.INTERNAL_ERROR

    def __init__(self, class_name: str, detail: str, member: str | None = None) -> None:
        self.class_name = class_name
        self.member = member
        self.detail = detail
        where = f"{class_name}.{member}" if member else class_name
        super().__init__(f"{where}: {detail}")


class AmbiguousIdentifierError(ModelBuildError):
    """Raised when an entity has more than one identifier attribute."""

    kind = DiagnosticKind.AMBIGUOUS_IDENTIFIER

    def __init__(self, class_name: str, names: list[str]) -> None:
        self.names = names
        super().__init__(class_name, f"multiple identifier attributes {names}")


class MissingIdentifierError(ModelBuildError):
    """Raised when an entity has no identifier attribute."""

    kind = DiagnosticKind.MISSING_IDENTIFIER

    def __init__(self, class_name: str) -> None:
        super().__init__(class_name, "entity declares no identifier attribute")


class UnresolvedReferenceError(ModelBuildError):
    """Raised when an association or embedding target is not a known mapped type.

    ``deferrable`` is True when the target is merely unknown so far and may
    still resolve once the whole batch has been scanned.
    """

    kind = DiagnosticKind.UNRESOLVED_REFERENCE

    def __init__(
        self,
        class_name: str,
        member: str,
        target: str,
        detail: str | None = None,
        *,
        deferrable: bool = False,
    ) -> None:
        self.target = target
        self.deferrable = deferrable
        super().__init__(
            class_name,
            detail or f"cannot resolve target type '{target}'",
            member,
        )


class ConflictingMarkersError(ModelBuildError):
    """Raised when a member carries mutually exclusive markers."""

    kind = DiagnosticKind.CONFLICTING_MARKERS

    def __init__(self, class_name: str, member: str, markers: list[str]) -> None:
        self.markers = markers
        super().__init__(class_name, f"conflicting markers {markers}", member)


class NameCollisionError(ModelBuildError):
    """Raised when an inherited attribute is redeclared with a different kind."""

    kind = DiagnosticKind.NAME_COLLISION

    def __init__(self, class_name: str, member: str, inherited: str, declared: str) -> None:
        self.inherited = inherited
        self.declared = declared
        super().__init__(
            class_name,
            f"redeclares inherited {inherited} attribute as {declared}",
            member,
        )


# --- Scanning ---


class ScanError(ModelGenError):
    """Base for structural scanning errors."""


class SourceSyntaxError(ScanError):
    """Raised when a source unit cannot be parsed."""

    def __init__(self, module: str, line: int | None, detail: str) -> None:
        self.module = module
        self.line = line
        super().__init__(f"Cannot parse module '{module}' (line {line}): {detail}")


# --- Output ---


class OutputError(ModelGenError):
    """Base for generated-source output errors."""


class FilerError(OutputError):
    """Raised when a generated module cannot be written."""

    def __init__(self, module: str, detail: str) -> None:
        self.module = module
        super().__init__(f"Cannot write generated module '{module}': {detail}")


# --- Registry ---


class RegistryError(ModelGenError):
    """Base for batch model registry errors."""


class ModelNotFoundError(RegistryError):
    """Raised when a qualified name has no model in the registry."""

    def __init__(self, qualified_name: str) -> None:
        self.qualified_name = qualified_name
        super().__init__(f"Model not found: '{qualified_name}'")


class DuplicateModelError(RegistryError):
    """Raised when a registry entry would be overwritten."""

    def __init__(self, qualified_name: str) -> None:
        self.qualified_name = qualified_name
        super().__init__(f"Model already registered: '{qualified_name}'")


# --- Options ---


class OptionsError(ModelGenError):
    """Raised for invalid processor option values."""
