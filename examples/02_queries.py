"""
Example 02: Building Predicates

This example generates the ``library`` accessors, imports them and builds
query predicates by navigating attributes.
"""

import importlib
import sys
import tempfile
from pathlib import Path

from fluent_modelgen import DiagnosticCollector, MemoryFiler, ModelProcessor, discover_sources
from fluent_modelgen.criteria import joins_of


def generate() -> Path:
    """Generate the library accessors and return an importable output root."""
    filer = MemoryFiler()
    processor = ModelProcessor(filer, DiagnosticCollector())
    processor.process(
        unit for unit in discover_sources(Path(__file__).parent) if unit.module.startswith("library")
    )

    out_dir = Path(tempfile.mkdtemp())
    for module, text in filer.sources.items():
        path = out_dir.joinpath(*module.split(".")).with_suffix(".py")
        path.parent.mkdir(parents=True, exist_ok=True)
        (path.parent / "__init__.py").touch()
        path.write_text(text, encoding="utf-8")
    return out_dir


def main():
    sys.path.insert(0, str(generate()))
    BookModel = importlib.import_module("library.book_model").BookModel
    PublicationModel = importlib.import_module("library.publication_model").PublicationModel

    book = BookModel()

    print("=== Paths ===\n")
    print(f"book.author().name()          -> {book.author().name()}")
    print(f"book.author().address().city() -> {book.author().address().city()}")
    print(f"book.created()                -> {book.created()}\n")

    print("=== Predicates ===\n")
    predicate = (
        book.title().starts_with("Dune")
        & book.pages().between(200, 600)
        & (book.author().name().eq("Frank Herbert") | book.price().lt(10))
    )
    text, params = predicate.render()
    print(f"{text}\n  params: {params}\n")

    print("=== Collections ===\n")
    tag = book.tags().join()
    tagged = tag.label().in_(["classic", "sci-fi"]) & ~book.keywords().is_empty()
    print(f"{tagged}")
    print(f"joins: {joins_of(tag)}\n")

    print("=== Narrowing ===\n")
    publication = PublicationModel()
    print(f"{publication.as_book().isbn().is_not_null() | publication.as_magazine().issue().gt(12)}")


if __name__ == "__main__":
    main()
