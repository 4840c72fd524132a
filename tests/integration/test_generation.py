"""Integration test for the full generation workflow.

Covers: discovery of entity sources on disk, a processor batch writing
through DirectoryFiler, and importing the generated accessor modules to
build paths and predicates.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest

from fluent_modelgen.adapters.filesystem import DirectoryFiler
from fluent_modelgen.core.diagnostics import DiagnosticCollector
from fluent_modelgen.core.processor import BatchResult, ModelProcessor
from fluent_modelgen.core.sources import discover_sources
from fluent_modelgen.criteria import JoinType, joins_of, path_of

MODELS = """
    import datetime
    from typing import Optional

    @embeddable
    class Address:
        street: str
        city: str

    @mapped_superclass
    class Auditable:
        created: datetime.datetime

    @entity
    class Author(Auditable):
        id: Annotated[int, Id]
        name: str
        address: Address
        books: Annotated[list["Book"], OneToMany]

    @entity
    class Tag:
        id: Annotated[int, Id]
        label: str

    @entity
    class Publication:
        id: Annotated[int, Id]
        title: str
        pages: int

    @entity
    class Book(Publication):
        isbn: str
        author: Annotated[Author, ManyToOne]
        sequel: Annotated[Optional["Book"], OneToOne]
        tags: Annotated[set[Tag], ManyToMany]
        keywords: list[str]
"""


# --- Fixtures ---


@pytest.fixture
def library_sources(write_source) -> None:
    write_source("shelf/__init__.py", "", markers=False)
    write_source("shelf/models.py", MODELS)


@pytest.fixture
def generate(src_dir: Path, tmp_path: Path):
    """Run one batch over ``src_dir`` into a fresh output directory."""

    def _generate(name: str = "out") -> tuple[BatchResult, Path]:
        out = tmp_path / name
        processor = ModelProcessor(DirectoryFiler(out), DiagnosticCollector())
        return processor.process(discover_sources(src_dir)), out

    return _generate


@pytest.fixture
def generated(library_sources, generate, monkeypatch: pytest.MonkeyPatch):
    """Generate the library and make the output importable."""
    result, out = generate()
    monkeypatch.syspath_prepend(str(out))
    yield result
    for module in [m for m in sys.modules if m == "shelf" or m.startswith("shelf.")]:
        del sys.modules[module]


def accessor(module: str, class_name: str):
    return getattr(importlib.import_module(module), class_name)


# --- Tests ---


class TestGeneration:
    def test_batch_succeeds(self, generated: BatchResult) -> None:
        assert not generated.failed
        assert generated.generated == (
            "shelf.author_model",
            "shelf.book_model",
            "shelf.publication_model",
            "shelf.tag_model",
        )

    def test_deterministic_output(self, library_sources, generate) -> None:
        _, first = generate("first")
        _, second = generate("second")
        assert list(first.rglob("*_model.py"))
        for path in sorted(first.rglob("*.py")):
            twin = second / path.relative_to(first)
            assert twin.read_text(encoding="utf-8") == path.read_text(encoding="utf-8")


class TestGeneratedAccessors:
    def test_navigation(self, generated: BatchResult) -> None:
        BookModel = accessor("shelf.book_model", "BookModel")
        book = BookModel()
        assert path_of(book) == ""
        assert str(book.author().name()) == "author.name"
        assert str(book.sequel().sequel().title()) == "sequel.sequel.title"
        assert book.__entity__ == "shelf.models.Book"

    def test_inherited_attributes(self, generated: BatchResult) -> None:
        BookModel = accessor("shelf.book_model", "BookModel")
        assert str(BookModel().pages()) == "pages"
        assert str(BookModel().author().created()) == "author.created"

    def test_embedded_accessor(self, generated: BatchResult) -> None:
        AuthorModel = accessor("shelf.author_model", "AuthorModel")
        city = AuthorModel().address().city()
        assert str(city) == "address.city"
        assert city.eq("Oslo").render() == ("address.city = :p1", {"p1": "Oslo"})

    def test_collection_join(self, generated: BatchResult) -> None:
        BookModel = accessor("shelf.book_model", "BookModel")
        label = BookModel().tags().join().label()
        assert str(label) == "tags.label"
        assert joins_of(label) == [("tags", JoinType.INNER)]
        keyword = BookModel().keywords().left_join()
        assert keyword.starts_with("sci").render() == ("keywords LIKE :p1 ESCAPE '\\'", {"p1": "sci%"})

    def test_mutual_association(self, generated: BatchResult) -> None:
        AuthorModel = accessor("shelf.author_model", "AuthorModel")
        title = AuthorModel().books().join().author().books().join().title()
        assert str(title) == "books.author.books.title"

    def test_predicates(self, generated: BatchResult) -> None:
        BookModel = accessor("shelf.book_model", "BookModel")
        book = BookModel()
        predicate = book.title().eq("Dune") & (book.pages().gt(300) | book.sequel().title().is_null())
        assert predicate.render() == (
            "title = :p1 AND (pages > :p2 OR sequel.title IS NULL)",
            {"p1": "Dune", "p2": 300},
        )

    def test_narrowing(self, generated: BatchResult) -> None:
        PublicationModel = accessor("shelf.publication_model", "PublicationModel")
        BookModel = accessor("shelf.book_model", "BookModel")
        narrowed = PublicationModel().as_book()
        assert isinstance(narrowed, BookModel)
        assert str(narrowed.isbn()) == "isbn"
