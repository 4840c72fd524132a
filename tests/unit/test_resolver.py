"""Unit tests for TypeResolver."""

from __future__ import annotations

import pytest

from fluent_modelgen.core.enums import (
    AttributeKind,
    ContainerType,
    DiagnosticKind,
    Marker,
    PersistenceType,
)
from fluent_modelgen.core.exceptions import ConflictingMarkersError, UnresolvedReferenceError
from fluent_modelgen.model.entity import ClassRecord, MemberRecord
from fluent_modelgen.model.resolver import TypeResolver, container_type
from fluent_modelgen.model.types import TypeRef

BOOK = ClassRecord("lib.Book", "Book", "lib", PersistenceType.ENTITY)
AUTHOR = ClassRecord("lib.Author", "Author", "lib", PersistenceType.ENTITY)
ADDRESS = ClassRecord("lib.Address", "Address", "lib", PersistenceType.EMBEDDABLE)
AUDITABLE = ClassRecord("lib.Auditable", "Auditable", "lib", PersistenceType.MAPPED_SUPERCLASS)


def member(name: str, type_ref: TypeRef | None, *markers: Marker) -> MemberRecord:
    return MemberRecord(name=name, type=type_ref, markers=frozenset(markers))


def ref(name: str, *args: str) -> TypeRef:
    return TypeRef(name, tuple(TypeRef(a) for a in args))


@pytest.fixture
def resolver() -> TypeResolver:
    universe = {r.qualified_name: r for r in (BOOK, AUTHOR, ADDRESS, AUDITABLE)}
    return TypeResolver(universe)


class TestSingular:
    def test_identifier(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("id", ref("int"), Marker.ID), BOOK)
        assert attr.kind is AttributeKind.IDENTIFIER
        assert attr.type_name == "int"
        assert attr.declared_in == "lib.Book"

    def test_basic(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("title", ref("str")), BOOK)
        assert attr.kind is AttributeKind.BASIC
        assert attr.target is None

    def test_version_is_basic(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("version", ref("int"), Marker.VERSION), BOOK)
        assert attr.kind is AttributeKind.BASIC

    def test_version_on_embeddable_type_is_basic(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("stamp", ref("lib.Address"), Marker.VERSION), BOOK)
        assert attr.kind is AttributeKind.BASIC
        assert attr.target is None
        assert attr.type_name == "lib.Address"
        assert resolver.warnings == []

    def test_to_one(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("author", ref("lib.Author"), Marker.MANY_TO_ONE), BOOK)
        assert attr.kind is AttributeKind.TO_ONE
        assert attr.target == "lib.Author"

    def test_embedded_marker(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("address", ref("lib.Address"), Marker.EMBEDDED), AUTHOR)
        assert attr.kind is AttributeKind.EMBEDDED
        assert attr.target == "lib.Address"

    def test_implicit_embedding(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("address", ref("lib.Address")), AUTHOR)
        assert attr.kind is AttributeKind.EMBEDDED
        assert attr.target == "lib.Address"

    def test_nullable_to_one(self, resolver: TypeResolver) -> None:
        type_ref = TypeRef("lib.Author", nullable=True)
        attr = resolver.resolve(member("author", type_ref, Marker.ONE_TO_ONE), BOOK)
        assert attr.kind is AttributeKind.TO_ONE


class TestPlural:
    def test_to_many_list(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("books", ref("list", "lib.Book"), Marker.ONE_TO_MANY), AUTHOR)
        assert attr.kind is AttributeKind.TO_MANY
        assert attr.target == "lib.Book"
        assert attr.container is ContainerType.LIST
        assert attr.element == TypeRef("lib.Book")
        assert attr.type_name == "lib.Book"

    def test_keyed_collection(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(
            member("by_isbn", ref("dict", "str", "lib.Book"), Marker.MANY_TO_MANY), AUTHOR
        )
        assert attr.kind is AttributeKind.KEYED_COLLECTION
        assert attr.container is ContainerType.MAP
        assert attr.key_type == TypeRef("str")
        assert attr.target == "lib.Book"

    def test_plain_collection(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("labels", ref("set", "str")), BOOK)
        assert attr.kind is AttributeKind.COLLECTION
        assert attr.container is ContainerType.SET
        assert attr.target is None
        assert attr.type_name == "str"

    def test_embeddable_collection_records_target(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("addresses", ref("list", "lib.Address"), Marker.ELEMENT_COLLECTION), AUTHOR)
        assert attr.kind is AttributeKind.COLLECTION
        assert attr.target == "lib.Address"

    def test_plain_mapping(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("meta", ref("dict", "str", "int")), BOOK)
        assert attr.kind is AttributeKind.COLLECTION
        assert attr.container is ContainerType.MAP
        assert attr.key_type == TypeRef("str")
        assert attr.element == TypeRef("int")

    def test_container_types(self) -> None:
        assert container_type(ref("tuple", "int", "...")) is ContainerType.LIST
        assert container_type(ref("collections.abc.Sequence", "int")) is ContainerType.LIST
        assert container_type(ref("frozenset", "int")) is ContainerType.SET
        assert container_type(ref("typing.Iterable", "int")) is ContainerType.COLLECTION
        assert container_type(ref("collections.abc.Mapping", "str", "int")) is ContainerType.MAP


class TestFailures:
    def test_conflicting_markers(self, resolver: TypeResolver) -> None:
        with pytest.raises(ConflictingMarkersError) as exc_info:
            resolver.resolve(member("author", ref("lib.Author"), Marker.ID, Marker.MANY_TO_ONE), BOOK)
        assert exc_info.value.member == "author"
        assert exc_info.value.kind is DiagnosticKind.CONFLICTING_MARKERS

    def test_unknown_target_is_deferrable(self, resolver: TypeResolver) -> None:
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            resolver.resolve(member("shelf", ref("lib.Shelf"), Marker.MANY_TO_ONE), BOOK)
        assert exc_info.value.deferrable is True
        assert exc_info.value.target == "lib.Shelf"

    def test_wrong_persistence_type_is_final(self, resolver: TypeResolver) -> None:
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            resolver.resolve(member("address", ref("lib.Address"), Marker.MANY_TO_ONE), BOOK)
        assert exc_info.value.deferrable is False

    def test_to_many_requires_container(self, resolver: TypeResolver) -> None:
        with pytest.raises(UnresolvedReferenceError, match="container"):
            resolver.resolve(member("books", ref("lib.Book"), Marker.ONE_TO_MANY), AUTHOR)

    def test_to_one_rejects_container(self, resolver: TypeResolver) -> None:
        with pytest.raises(UnresolvedReferenceError):
            resolver.resolve(member("authors", ref("list", "lib.Author"), Marker.MANY_TO_ONE), BOOK)

    def test_to_many_without_element(self, resolver: TypeResolver) -> None:
        with pytest.raises(UnresolvedReferenceError, match="element"):
            resolver.resolve(member("books", ref("list"), Marker.ONE_TO_MANY), AUTHOR)

    def test_association_with_unknown_annotation(self, resolver: TypeResolver) -> None:
        with pytest.raises(UnresolvedReferenceError):
            resolver.resolve(member("author", None, Marker.MANY_TO_ONE), BOOK)


class TestWarnings:
    def test_unmarked_entity_reference(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("author", ref("lib.Author")), BOOK)
        assert attr.kind is AttributeKind.BASIC
        assert [w.kind for w in resolver.warnings] == [DiagnosticKind.UNCLASSIFIED_ATTRIBUTE]
        assert resolver.warnings[0].member == "author"

    def test_identifier_in_embeddable(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("code", ref("str"), Marker.ID), ADDRESS)
        assert attr.kind is AttributeKind.BASIC
        assert len(resolver.warnings) == 1

    def test_unknown_annotation_is_basic(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("title", None), BOOK)
        assert attr.kind is AttributeKind.BASIC
        assert attr.type_name == "Any"
        assert len(resolver.warnings) == 1

    def test_unknown_annotation_identifier(self, resolver: TypeResolver) -> None:
        attr = resolver.resolve(member("id", None, Marker.ID), BOOK)
        assert attr.kind is AttributeKind.IDENTIFIER
        assert resolver.warnings == []
