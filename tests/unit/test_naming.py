"""Unit tests for accessor naming and import bookkeeping."""

from __future__ import annotations

import pytest

from fluent_modelgen.emit.imports import ImportBuilder, split_qualified
from fluent_modelgen.emit.naming import (
    accessor_class_name,
    accessor_module,
    embeddable_class_name,
    narrowing_method_name,
    snake_case,
)
from fluent_modelgen.model.types import TypeRef


class TestNaming:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Book", "book"),
            ("BookAuthor", "book_author"),
            ("ISBNCode", "isbn_code"),
            ("BookV2", "book_v2"),
            ("URL", "url"),
        ],
    )
    def test_snake_case(self, name: str, expected: str) -> None:
        assert snake_case(name) == expected

    def test_accessor_module_sits_in_entity_package(self) -> None:
        assert accessor_module("library.models.Book") == "library.book_model"
        assert accessor_module("library.catalog.models.BookAuthor") == "library.catalog.book_author_model"

    def test_accessor_module_of_top_level_module(self) -> None:
        assert accessor_module("models.Book") == "book_model"

    def test_accessor_module_of_package_init(self) -> None:
        assert accessor_module("library.Book", is_package=True) == "library.book_model"
        assert accessor_module("library.catalog.Book", is_package=True) == "library.catalog.book_model"

    def test_class_names(self) -> None:
        assert accessor_class_name("Book") == "BookModel"
        assert embeddable_class_name("Address") == "AddressEmbeddable"
        assert embeddable_class_name("Address", 1) == "AddressEmbeddable2"
        assert embeddable_class_name("Address", 2) == "AddressEmbeddable3"

    def test_narrowing_method_name(self) -> None:
        assert narrowing_method_name("Paperback") == "as_paperback"
        assert narrowing_method_name("EBook") == "as_e_book"


class TestImportBuilder:
    def test_split_qualified(self) -> None:
        assert split_qualified("a.b.C") == ("a.b", "C")
        assert split_qualified("C") == ("", "C")

    def test_runtime_lines_are_grouped_and_sorted(self) -> None:
        imports = ImportBuilder()
        imports.runtime("fluent_modelgen.criteria.StringPath")
        imports.runtime("fluent_modelgen.criteria.EntityPath")
        imports.runtime("decimal.Decimal")
        assert imports.render() == [
            "from decimal import Decimal",
            "from fluent_modelgen.criteria import EntityPath, StringPath",
        ]

    def test_type_only_names_go_under_guard(self) -> None:
        imports = ImportBuilder()
        imports.runtime("fluent_modelgen.criteria.EntityPath")
        imports.type_only("lib.author_model.AuthorModel")
        assert imports.render() == [
            "from fluent_modelgen.criteria import EntityPath",
            "from typing import TYPE_CHECKING",
            "",
            "if TYPE_CHECKING:",
            "    from lib.author_model import AuthorModel",
        ]

    def test_runtime_binding_serves_annotations(self) -> None:
        imports = ImportBuilder()
        imports.type_only("decimal.Decimal")
        imports.runtime("decimal.Decimal")
        assert imports.render() == ["from decimal import Decimal"]

    def test_clash_with_reserved_name_is_aliased(self) -> None:
        imports = ImportBuilder({"BookModel"})
        assert imports.type_only("lib.legacy.book_model.BookModel") == "BookModel_1"
        assert imports.statement("lib.legacy.book_model.BookModel") == (
            "from lib.legacy.book_model import BookModel as BookModel_1"
        )

    def test_clash_between_imports_is_aliased(self) -> None:
        imports = ImportBuilder()
        assert imports.runtime("a.Address") == "Address"
        assert imports.runtime("b.Address") == "Address_1"
        assert imports.runtime("a.Address") == "Address"
        assert imports.render() == ["from a import Address", "from b import Address as Address_1"]

    def test_reserve_after_construction(self) -> None:
        imports = ImportBuilder()
        imports.reserve("Tag")
        assert imports.runtime("lib.Tag") == "Tag_1"

    def test_unqualified_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="unqualified"):
            ImportBuilder().runtime("Book")

    def test_annotation_text(self) -> None:
        imports = ImportBuilder()
        assert imports.annotation(TypeRef("int")) == "int"
        assert imports.annotation(TypeRef("dict",(TypeRef("str"), TypeRef("decimal.Decimal")))) == (
            "dict[str, Decimal]"
        )
        assert imports.annotation(TypeRef("T")) == "Any"
        assert imports.annotation(None) == "Any"
