"""Unit tests for Diagnostic and DiagnosticCollector."""

from __future__ import annotations

import logging

import pytest

from fluent_modelgen.core.diagnostics import Diagnostic, DiagnosticCollector
from fluent_modelgen.core.enums import DiagnosticKind, Severity
from fluent_modelgen.core.exceptions import MissingIdentifierError, UnresolvedReferenceError


class TestDiagnostic:
    def test_str_with_member_and_line(self) -> None:
        diagnostic = Diagnostic(
            Severity.ERROR,
            DiagnosticKind.UNRESOLVED_REFERENCE,
            "cannot resolve 'Shelf'",
            class_name="lib.Book",
            member="shelf",
            line=12,
        )
        assert str(diagnostic) == "error: [UnresolvedReference] lib.Book.shelf (line 12): cannot resolve 'Shelf'"

    def test_str_without_class(self) -> None:
        diagnostic = Diagnostic(Severity.WARNING, DiagnosticKind.UNKNOWN_OPTION, "unrecognized processor option 'x'")
        assert str(diagnostic) == "warning: [UnknownOption] <batch>: unrecognized processor option 'x'"

    def test_from_error(self) -> None:
        diagnostic = Diagnostic.from_error(MissingIdentifierError("lib.Book"), line=3)
        assert diagnostic.severity is Severity.ERROR
        assert diagnostic.kind is DiagnosticKind.MISSING_IDENTIFIER
        assert diagnostic.class_name == "lib.Book"
        assert diagnostic.member is None
        assert diagnostic.line == 3
        assert diagnostic.is_error

    def test_from_error_keeps_member(self) -> None:
        error = UnresolvedReferenceError("lib.Book", "shelf", "Shelf")
        assert Diagnostic.from_error(error).member == "shelf"


class TestDiagnosticCollector:
    def test_report_order_and_filters(self) -> None:
        collector = DiagnosticCollector()
        collector.warning(DiagnosticKind.UNKNOWN_OPTION, "unrecognized processor option 'x'")
        collector.error(DiagnosticKind.MISSING_IDENTIFIER, "no identifier", class_name="lib.Book")
        collector.note("generated lib.book_model.BookModel", class_name="lib.Book")
        assert [d.severity for d in collector.diagnostics] == [Severity.WARNING, Severity.ERROR, Severity.NOTE]
        assert len(collector.errors) == 1
        assert len(collector.warnings) == 1
        assert collector.has_errors
        assert collector.of_kind(DiagnosticKind.GENERATION)[0].class_name == "lib.Book"

    def test_duplicates_are_dropped(self) -> None:
        collector = DiagnosticCollector()
        collector.error(DiagnosticKind.MISSING_IDENTIFIER, "no identifier", class_name="lib.Book")
        collector.error(DiagnosticKind.MISSING_IDENTIFIER, "no identifier", class_name="lib.Book")
        assert len(collector) == 1

    def test_no_errors(self) -> None:
        collector = DiagnosticCollector()
        collector.warning(DiagnosticKind.UNKNOWN_OPTION, "x")
        assert not collector.has_errors

    def test_mirrors_to_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        collector = DiagnosticCollector()
        with caplog.at_level(logging.DEBUG, logger="fluent_modelgen.core.diagnostics"):
            collector.error(DiagnosticKind.MISSING_IDENTIFIER, "no identifier", class_name="lib.Book")
            collector.note("generated", class_name="lib.Book")
        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.ERROR, logging.DEBUG]
        assert "[MissingIdentifier] lib.Book" in caplog.records[0].getMessage()
