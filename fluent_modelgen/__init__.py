"""fluent_modelgen - build-time fluent metamodel generator for mapped entity classes."""

from __future__ import annotations

from fluent_modelgen.adapters.filesystem import DirectoryFiler
from fluent_modelgen.adapters.memory import MemoryFiler
from fluent_modelgen.adapters.protocol import Filer, Messager
from fluent_modelgen.core.diagnostics import Diagnostic, DiagnosticCollector
from fluent_modelgen.core.enums import (
    AttributeKind,
    ContainerType,
    DiagnosticKind,
    PersistenceType,
    Severity,
)
from fluent_modelgen.core.exceptions import (
    AmbiguousIdentifierError,
    ConflictingMarkersError,
    DuplicateModelError,
    FilerError,
    MissingIdentifierError,
    ModelBuildError,
    ModelGenError,
    ModelNotFoundError,
    NameCollisionError,
    OptionsError,
    OutputError,
    RegistryError,
    ScanError,
    SourceSyntaxError,
    UnresolvedReferenceError,
)
from fluent_modelgen.core.options import ProcessorOptions
from fluent_modelgen.core.processor import BatchResult, ModelProcessor
from fluent_modelgen.core.registry import ModelRegistry
from fluent_modelgen.core.sources import SourceUnit, discover_sources
from fluent_modelgen.emit.emitter import CodeEmitter, GeneratedSource
from fluent_modelgen.model.builder import ModelBuilder
from fluent_modelgen.model.entity import AttributeModel, ClassRecord, EntityModel, MemberRecord
from fluent_modelgen.model.scanner import AstScanner

__all__ = [
    # Processor
    "ModelProcessor",
    "BatchResult",
    "ProcessorOptions",
    # Sources
    "SourceUnit",
    "discover_sources",
    # Host adapters
    "Filer",
    "Messager",
    "DirectoryFiler",
    "MemoryFiler",
    "Diagnostic",
    "DiagnosticCollector",
    # Pipeline
    "AstScanner",
    "ModelBuilder",
    "ModelRegistry",
    "CodeEmitter",
    "GeneratedSource",
    # Models
    "ClassRecord",
    "MemberRecord",
    "EntityModel",
    "AttributeModel",
    # Enums
    "PersistenceType",
    "AttributeKind",
    "ContainerType",
    "DiagnosticKind",
    "Severity",
    # Exceptions
    "ModelGenError",
    "ModelBuildError",
    "AmbiguousIdentifierError",
    "MissingIdentifierError",
    "UnresolvedReferenceError",
    "ConflictingMarkersError",
    "NameCollisionError",
    "ScanError",
    "SourceSyntaxError",
    "OutputError",
    "FilerError",
    "RegistryError",
    "ModelNotFoundError",
    "DuplicateModelError",
    "OptionsError",
]
