"""Structural records and resolved model data classes.

Frozen dataclasses: ``ClassRecord``/``MemberRecord`` are the scanner's raw
output, ``EntityModel``/``AttributeModel`` the builder's resolved model
consumed by the emitter.
"""

from __future__ import annotations

from dataclasses import dataclass

from fluent_modelgen.core.enums import AttributeKind, ContainerType, Marker, PersistenceType
from fluent_modelgen.model.types import TypeRef


@dataclass(frozen=True)
class MemberRecord:
    """One declared member of a scanned class."""

    name: str
    type: TypeRef | None
    markers: frozenset[Marker] = frozenset()
    line: int | None = None


@dataclass(frozen=True)
class ClassRecord:
    """Flat structural record of one top-level class declaration."""

    qualified_name: str
    simple_name: str
    module: str
    persistence_type: PersistenceType | None
    bases: tuple[TypeRef, ...] = ()
    type_params: tuple[str, ...] = ()
    members: tuple[MemberRecord, ...] = ()
    line: int | None = None
    is_package: bool = False

    @property
    def supertype(self) -> TypeRef | None:
        return self.bases[0] if self.bases else None

    @property
    def is_mapped(self) -> bool:
        return self.persistence_type is not None


@dataclass(frozen=True)
class AttributeModel:
    """One resolved attribute of a mapped class."""

    name: str
    kind: AttributeKind
    type_name: str
    declared_in: str
    target: str | None = None  # entity or embeddable qualified name
    container: ContainerType | None = None
    element: TypeRef | None = None
    key_type: TypeRef | None = None
    declared_type: TypeRef | None = None
    line: int | None = None


@dataclass(frozen=True)
class EntityModel:
    """Resolved model of one mapped class (entity, mapped superclass or embeddable)."""

    qualified_name: str
    simple_name: str
    module: str
    persistence_type: PersistenceType
    attributes: tuple[AttributeModel, ...] = ()
    super_name: str | None = None  # lookup key, not a copy
    descendants: tuple[str, ...] = ()
    is_package: bool = False

    @property
    def is_entity(self) -> bool:
        return self.persistence_type is PersistenceType.ENTITY

    @property
    def is_embeddable(self) -> bool:
        return self.persistence_type is PersistenceType.EMBEDDABLE

    @property
    def identifier(self) -> AttributeModel | None:
        for attr in self.attributes:
            if attr.kind is AttributeKind.IDENTIFIER:
                return attr
        return None

    @property
    def attribute_names(self) -> list[str]:
        return [attr.name for attr in self.attributes]

    def attribute(self, name: str) -> AttributeModel:
        """Look up an attribute by name.

        Raises:
            KeyError: If the model has no such attribute.
        """
        for attr in self.attributes:
            if attr.name == name:
                return attr
        raise KeyError(f"{self.qualified_name} has no attribute '{name}'")
