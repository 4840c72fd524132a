"""Type resolver.

Classifies one scanned member into an attribute kind and, for associations,
embeddings and collections, resolves the referenced mapped class.

Decision order (first match wins):
1. Id marker                      -> Identifier
2. Embedded marker                -> Embedded
3. OneToOne/ManyToOne marker      -> ToOne
4. OneToMany/ManyToMany, keyed    -> KeyedCollection
5. OneToMany/ManyToMany           -> ToMany
6. container, no association      -> Collection
7. otherwise                      -> Basic (Embedded if the type is an embeddable)
"""

from __future__ import annotations

from collections.abc import Container, Mapping

from fluent_modelgen.core.diagnostics import Diagnostic
from fluent_modelgen.core.enums import (
    AttributeKind,
    ContainerType,
    DiagnosticKind,
    Marker,
    PersistenceType,
    Severity,
)
from fluent_modelgen.core.exceptions import ConflictingMarkersError, UnresolvedReferenceError
from fluent_modelgen.model.entity import AttributeModel, ClassRecord, MemberRecord
from fluent_modelgen.model.types import KEYED_CONTAINERS, ORDERED_CONTAINERS, UNORDERED_CONTAINERS, TypeRef

_ENTITY = frozenset({PersistenceType.ENTITY})
_EMBEDDABLE = frozenset({PersistenceType.EMBEDDABLE})


def container_type(type_ref: TypeRef) -> ContainerType:
    """Map a container TypeRef onto its ContainerType."""
    name = type_ref.container_name
    if name in KEYED_CONTAINERS:
        return ContainerType.MAP
    if name in ORDERED_CONTAINERS:
        return ContainerType.LIST
    if name in UNORDERED_CONTAINERS:
        return ContainerType.SET
    return ContainerType.COLLECTION


class TypeResolver:
    """Resolves member records against a universe of scanned classes.

    Args:
        universe: Qualified name -> ClassRecord for every class visible to
            this resolution pass.
        warnings: Optional list that receives warning diagnostics.
        later: Names declared later in the batch. Unmarked references to
            them are deferred instead of being classified as basic.
    """

    def __init__(
        self,
        universe: Mapping[str, ClassRecord],
        warnings: list[Diagnostic] | None = None,
        later: Container[str] = (),
    ) -> None:
        self._universe = universe
        self._warnings = warnings if warnings is not None else []
        self._later = later

    @property
    def warnings(self) -> list[Diagnostic]:
        return self._warnings

    def resolve(self, member: MemberRecord, owner: ClassRecord) -> AttributeModel:
        """Classify one member declared by ``owner``.

        Raises:
            ConflictingMarkersError: If the member carries exclusive markers.
            UnresolvedReferenceError: If a referenced type is unknown or of
                the wrong persistence type.
        """
        markers = member.markers - {Marker.TRANSIENT}
        if len(markers) > 1:
            raise ConflictingMarkersError(
                owner.qualified_name, member.name, sorted(m.value for m in markers)
            )
        marker = next(iter(markers), None)
        type_ref = member.type

        if type_ref is None:
            if marker is not None and marker not in (Marker.ID, Marker.VERSION):
                raise UnresolvedReferenceError(
                    owner.qualified_name, member.name, "?",
                    "declared type annotation cannot be understood",
                )
            if marker is not Marker.ID:
                self._warn(owner, member, "declared type cannot be understood; treated as basic")
            kind = AttributeKind.IDENTIFIER if marker is Marker.ID else AttributeKind.BASIC
            return self._attribute(member, owner, kind, "Any")

        if marker is Marker.ID:
            if owner.persistence_type is PersistenceType.EMBEDDABLE:
                self._warn(owner, member, "identifier marker ignored inside an embeddable")
                return self._attribute(member, owner, AttributeKind.BASIC, str(type_ref))
            return self._attribute(member, owner, AttributeKind.IDENTIFIER, str(type_ref))

        if marker is Marker.VERSION:
            return self._attribute(member, owner, AttributeKind.BASIC, str(type_ref))

        if marker is Marker.EMBEDDED:
            if type_ref.is_container:
                raise UnresolvedReferenceError(
                    owner.qualified_name, member.name, str(type_ref),
                    "embedding marker on a container type",
                )
            target = self._lookup(type_ref, member, owner, _EMBEDDABLE, "embeddable")
            return self._attribute(
                member, owner, AttributeKind.EMBEDDED, str(type_ref), target=target.qualified_name
            )

        if marker is not None and marker.is_to_one:
            if type_ref.is_container:
                raise UnresolvedReferenceError(
                    owner.qualified_name, member.name, str(type_ref),
                    f"{marker.value} association declared on a container type",
                )
            target = self._lookup(type_ref, member, owner, _ENTITY, "entity")
            return self._attribute(
                member, owner, AttributeKind.TO_ONE, str(type_ref), target=target.qualified_name
            )

        if marker is not None and marker.is_to_many:
            return self._to_many(member, owner, marker, type_ref)

        if type_ref.is_container:
            return self._plain_collection(member, owner, type_ref)

        if marker is Marker.ELEMENT_COLLECTION:
            self._warn(owner, member, "ElementCollection marker on a non-container type; treated as basic")

        self._defer_later(type_ref, member, owner)
        record = self._universe.get(type_ref.name)
        if record is not None and record.persistence_type is PersistenceType.EMBEDDABLE:
            return self._attribute(
                member, owner, AttributeKind.EMBEDDED, str(type_ref), target=record.qualified_name
            )
        if record is not None and record.is_mapped:
            self._warn(
                owner, member,
                f"references mapped class '{type_ref.name}' without an association marker; treated as basic",
            )
        return self._attribute(member, owner, AttributeKind.BASIC, str(type_ref))

    # ------------------------------------------------------------------
    # Plural attributes
    # ------------------------------------------------------------------

    def _to_many(
        self, member: MemberRecord, owner: ClassRecord, marker: Marker, type_ref: TypeRef
    ) -> AttributeModel:
        if not type_ref.is_container:
            raise UnresolvedReferenceError(
                owner.qualified_name, member.name, str(type_ref),
                f"{marker.value} association requires a container type",
            )
        element = type_ref.element
        if element is None:
            raise UnresolvedReferenceError(
                owner.qualified_name, member.name, str(type_ref),
                "container declares no element type",
            )
        target = self._lookup(element, member, owner, _ENTITY, "entity")
        kind = AttributeKind.KEYED_COLLECTION if type_ref.is_keyed else AttributeKind.TO_MANY
        return self._attribute(
            member, owner, kind, str(element),
            target=target.qualified_name,
            container=container_type(type_ref),
            element=element,
            key_type=type_ref.key,
        )

    def _plain_collection(self, member: MemberRecord, owner: ClassRecord, type_ref: TypeRef) -> AttributeModel:
        element = type_ref.element
        target = None
        if element is not None:
            self._defer_later(element, member, owner)
            record = self._universe.get(element.name)
            if record is not None and record.persistence_type is PersistenceType.EMBEDDABLE:
                target = record.qualified_name
            elif record is not None and record.is_mapped:
                self._warn(
                    owner, member,
                    f"collection of mapped class '{element.name}' without an association marker; "
                    "treated as a basic collection",
                )
        return self._attribute(
            member, owner, AttributeKind.COLLECTION,
            str(element) if element is not None else "Any",
            target=target,
            container=container_type(type_ref),
            element=element,
            key_type=type_ref.key,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lookup(
        self,
        type_ref: TypeRef,
        member: MemberRecord,
        owner: ClassRecord,
        expected: frozenset[PersistenceType],
        role: str,
    ) -> ClassRecord:
        record = self._universe.get(type_ref.name)
        if record is None:
            raise UnresolvedReferenceError(
                owner.qualified_name, member.name, type_ref.name, deferrable=True
            )
        if record.persistence_type not in expected:
            raise UnresolvedReferenceError(
                owner.qualified_name, member.name, type_ref.name,
                f"target type '{type_ref.name}' is not a mapped {role}",
            )
        return record

    def _defer_later(self, type_ref: TypeRef, member: MemberRecord, owner: ClassRecord) -> None:
        if type_ref.name in self._later:
            raise UnresolvedReferenceError(
                owner.qualified_name, member.name, type_ref.name, deferrable=True
            )

    def _attribute(
        self,
        member: MemberRecord,
        owner: ClassRecord,
        kind: AttributeKind,
        type_name: str,
        **extra,
    ) -> AttributeModel:
        return AttributeModel(
            name=member.name,
            kind=kind,
            type_name=type_name,
            declared_in=owner.qualified_name,
            declared_type=member.type,
            line=member.line,
            **extra,
        )

    def _warn(self, owner: ClassRecord, member: MemberRecord, message: str) -> None:
        self._warnings.append(
            Diagnostic(
                severity=Severity.WARNING,
                kind=DiagnosticKind.UNCLASSIFIED_ATTRIBUTE,
                message=message,
                class_name=owner.qualified_name,
                member=member.name,
                line=member.line,
            )
        )
