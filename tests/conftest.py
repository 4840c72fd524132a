"""Shared test fixtures."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from fluent_modelgen.adapters.memory import MemoryFiler
from fluent_modelgen.core.diagnostics import DiagnosticCollector
from fluent_modelgen.core.options import ProcessorOptions
from fluent_modelgen.core.processor import BatchResult, ModelProcessor
from fluent_modelgen.core.registry import ModelRegistry
from fluent_modelgen.core.sources import SourceUnit
from fluent_modelgen.model.builder import ModelBuilder
from fluent_modelgen.model.entity import ClassRecord
from fluent_modelgen.model.scanner import AstScanner

MARKERS = (
    "from typing import Annotated\n"
    "from fluent_modelgen.markers import (\n"
    "    ElementCollection, Embedded, Id, ManyToMany, ManyToOne, OneToMany, OneToOne,\n"
    "    Transient, Version, embeddable, entity, mapped_superclass,\n"
    ")\n"
)


def unit(module: str, text: str, *, is_package: bool = False) -> SourceUnit:
    """Source unit with dedented text and the marker imports prepended."""
    return SourceUnit(module=module, text=MARKERS + textwrap.dedent(text), is_package=is_package)


def scan_all(sources: dict[str, str]) -> list[ClassRecord]:
    scanner = AstScanner()
    records: list[ClassRecord] = []
    for module, text in sources.items():
        records.extend(scanner.scan(unit(module, text)))
    return records


@pytest.fixture
def source_unit():
    """The ``unit`` helper, for tests that drive a processor directly."""
    return unit


@pytest.fixture
def collector() -> DiagnosticCollector:
    return DiagnosticCollector()


@pytest.fixture
def scan():
    """Scan one module and return its class records by simple name.

    Usage:
        records = scan("library.models", "@entity\\nclass Book: ...")
    """

    def _scan(module: str, text: str) -> dict[str, ClassRecord]:
        return {r.simple_name: r for r in AstScanner().scan(unit(module, text))}

    return _scan


@pytest.fixture
def build(collector: DiagnosticCollector):
    """Scan and build a batch of ``{module: source}``; diagnostics go to ``collector``."""

    def _build(sources: dict[str, str]) -> ModelRegistry:
        return ModelBuilder(collector).build(scan_all(sources))

    return _build


@pytest.fixture
def memory_filer() -> MemoryFiler:
    return MemoryFiler()


@pytest.fixture
def run_batch(memory_filer: MemoryFiler, collector: DiagnosticCollector):
    """Run a full processor batch over ``{module: source}`` into ``memory_filer``."""

    def _run(sources: dict[str, str], **options) -> BatchResult:
        processor = ModelProcessor(memory_filer, collector, ProcessorOptions(**options))
        return processor.process([unit(m, t) for m, t in sources.items()])

    return _run


@pytest.fixture
def src_dir(tmp_path: Path) -> Path:
    """Temporary source root for entity modules."""
    return tmp_path / "src"


@pytest.fixture
def write_source(src_dir: Path):
    """Helper to write entity modules into the source root.

    Usage:
        write_source("library/models.py", "@entity\\nclass Book: ...")
    """

    def _write(relative_path: str, content: str, *, markers: bool = True) -> Path:
        file_path = src_dir / relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        text = textwrap.dedent(content)
        if markers:
            text = MARKERS + text
        file_path.write_text(text, encoding="utf-8")
        return file_path

    return _write
