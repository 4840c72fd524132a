"""Generation orchestrator.

ModelProcessor drives one batch: scan every source unit, build the batch
registry, emit an accessor module for every successful generation root and
hand it to the filer. Every failure ends as a diagnostic; ``process`` never
raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from fluent_modelgen.adapters.protocol import Filer, Messager
from fluent_modelgen.core.diagnostics import Diagnostic
from fluent_modelgen.core.enums import AttributeKind, DiagnosticKind, Severity
from fluent_modelgen.core.exceptions import FilerError, ModelGenError, SourceSyntaxError
from fluent_modelgen.core.options import ProcessorOptions
from fluent_modelgen.core.registry import ModelRegistry
from fluent_modelgen.core.sources import SourceUnit
from fluent_modelgen.emit import naming
from fluent_modelgen.emit.emitter import CodeEmitter
from fluent_modelgen.model.builder import ModelBuilder
from fluent_modelgen.model.entity import ClassRecord, EntityModel
from fluent_modelgen.model.protocol import Scanner
from fluent_modelgen.model.scanner import AstScanner

logger = logging.getLogger(__name__)

_ENTITY_REFS = (AttributeKind.TO_ONE, AttributeKind.TO_MANY, AttributeKind.KEYED_COLLECTION)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one ``process`` call."""

    registry: ModelRegistry
    generated: tuple[str, ...]
    diagnostics: tuple[Diagnostic, ...]

    @property
    def failed(self) -> bool:
        """True if any error-level diagnostic was reported."""
        return any(d.is_error for d in self.diagnostics)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]


class _BatchMessager:
    """Forwards diagnostics to the host while keeping the batch's own copy."""

    def __init__(self, host: Messager) -> None:
        self._host = host
        self.diagnostics: list[Diagnostic] = []
        self._seen: set[Diagnostic] = set()

    def report(self, diagnostic: Diagnostic) -> None:
        if diagnostic in self._seen:
            return
        self._seen.add(diagnostic)
        self.diagnostics.append(diagnostic)
        self._host.report(diagnostic)


class ModelProcessor:
    """Runs generation batches against a host filer and messager.

    Args:
        filer: Receives one generated module per generation root.
        messager: Receives every diagnostic.
        options: Processor options; defaults to ``ProcessorOptions()``.
        scanner: Structural scanner; defaults to ``AstScanner()``.
    """

    def __init__(
        self,
        filer: Filer,
        messager: Messager,
        options: ProcessorOptions | None = None,
        scanner: Scanner | None = None,
    ) -> None:
        self._filer = filer
        self._messager = messager
        self._options = options or ProcessorOptions()
        self._scanner = scanner or AstScanner()
        self._emitter = CodeEmitter()
        self._unknown_options: list[str] = []

    @classmethod
    def from_mapping(
        cls,
        filer: Filer,
        messager: Messager,
        raw_options: Mapping[str, Any],
        scanner: Scanner | None = None,
    ) -> ModelProcessor:
        """Create a processor from processor-style string options.

        Unknown option keys are reported as warnings on every batch.

        Raises:
            OptionsError: If a recognized option has an invalid value.
        """
        options, unknown = ProcessorOptions.from_mapping(raw_options)
        processor = cls(filer, messager, options, scanner)
        processor._unknown_options = unknown
        return processor

    @property
    def options(self) -> ProcessorOptions:
        return self._options

    def process(self, units: Iterable[SourceUnit]) -> BatchResult:
        """Run one generation batch over ``units``."""
        messager = _BatchMessager(self._messager)
        registry = ModelRegistry()
        generated: list[str] = []

        for key in self._unknown_options:
            messager.report(Diagnostic(
                severity=Severity.WARNING,
                kind=DiagnosticKind.UNKNOWN_OPTION,
                message=f"unrecognized processor option '{key}'",
            ))

        try:
            records = self._scan(units, messager)
            registry = ModelBuilder(messager).build(records)
            self._emit(registry, messager, generated)
        except Exception as e:
            logger.exception("Generation batch aborted")
            messager.report(Diagnostic(
                severity=Severity.ERROR,
                kind=DiagnosticKind.INTERNAL_ERROR,
                message=f"{type(e).__name__}: {e}",
            ))

        result = BatchResult(
            registry=registry,
            generated=tuple(generated),
            diagnostics=tuple(messager.diagnostics),
        )
        logger.info(
            "Generated %d modules (%d errors)", len(result.generated), len(result.errors)
        )
        return result

    def _scan(self, units: Iterable[SourceUnit], messager: Messager) -> list[ClassRecord]:
        records: list[ClassRecord] = []
        for unit in units:
            if unit.read_error is not None:
                messager.report(Diagnostic(
                    severity=Severity.ERROR,
                    kind=DiagnosticKind.UNREADABLE_SOURCE,
                    message=f"cannot read {unit.path or unit.module}: {unit.read_error}",
                    class_name=unit.module,
                ))
                continue
            try:
                records.extend(self._scanner.scan(unit))
            except SourceSyntaxError as e:
                messager.report(Diagnostic(
                    severity=Severity.ERROR,
                    kind=DiagnosticKind.SYNTAX_ERROR,
                    message=str(e),
                    class_name=unit.module,
                    line=e.line,
                ))
        return records

    def _emit(self, registry: ModelRegistry, messager: Messager, generated: list[str]) -> None:
        skipped = {
            model.qualified_name
            for model in registry.entities()
            if self._options.is_skipped(model.qualified_name, model.simple_name)
        }
        for model in registry.entities():
            if model.qualified_name in skipped:
                if self._options.debug:
                    messager.report(Diagnostic(
                        severity=Severity.NOTE,
                        kind=DiagnosticKind.GENERATION,
                        message="skipped by option",
                        class_name=model.qualified_name,
                    ))
                continue

            if skipped:
                self._warn_skipped_targets(model, registry, skipped, messager)

            try:
                source = self._emitter.emit(model, registry)
                self._filer.create_source(source.module, source.text)
            except FilerError as e:
                messager.report(Diagnostic(
                    severity=Severity.ERROR,
                    kind=DiagnosticKind.OUTPUT_ERROR,
                    message=str(e),
                    class_name=model.qualified_name,
                ))
                continue
            except ModelGenError as e:
                logger.exception("Cannot emit %s", model.qualified_name)
                messager.report(Diagnostic(
                    severity=Severity.ERROR,
                    kind=DiagnosticKind.INTERNAL_ERROR,
                    message=str(e),
                    class_name=model.qualified_name,
                ))
                continue

            generated.append(source.module)
            if self._options.debug:
                messager.report(Diagnostic(
                    severity=Severity.NOTE,
                    kind=DiagnosticKind.GENERATION,
                    message=f"generated {source.module}.{source.class_name}",
                    class_name=model.qualified_name,
                ))

    def _warn_skipped_targets(
        self, model: EntityModel, registry: ModelRegistry, skipped: set[str], messager: Messager
    ) -> None:
        """Warn for accessors of ``model`` that would import a skipped entity's module."""
        owners = [model]
        for owner in owners:
            for attr in owner.attributes:
                if attr.target is None:
                    continue
                if attr.kind in _ENTITY_REFS and attr.target in skipped:
                    messager.report(Diagnostic(
                        severity=Severity.WARNING,
                        kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                        message=f"target '{attr.target}' is skipped by option; "
                        "its accessor module is not generated",
                        class_name=owner.qualified_name,
                        member=attr.name,
                        line=attr.line,
                    ))
                elif attr.kind not in _ENTITY_REFS and registry.has(attr.target):
                    embedded = registry.get(attr.target)
                    if embedded not in owners:
                        owners.append(embedded)
        for descendant in model.descendants:
            if descendant in skipped:
                messager.report(Diagnostic(
                    severity=Severity.WARNING,
                    kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                    message=f"descendant '{descendant}' is skipped by option; "
                    "its accessor module is not generated",
                    class_name=model.qualified_name,
                    member=naming.narrowing_method_name(registry.get(descendant).simple_name),
                ))
