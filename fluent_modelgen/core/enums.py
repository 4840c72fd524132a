"""Enumerations shared by the scanner, builder, emitter and diagnostics."""

from __future__ import annotations

from enum import Enum


class PersistenceType(Enum):
    """Persistence role of a scanned class."""

    ENTITY = "entity"
    MAPPED_SUPERCLASS = "mapped_superclass"
    EMBEDDABLE = "embeddable"


class Marker(Enum):
    """Recognized member markers."""

    ID = "Id"
    EMBEDDED = "Embedded"
    ONE_TO_ONE = "OneToOne"
    MANY_TO_ONE = "ManyToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_MANY = "ManyToMany"
    ELEMENT_COLLECTION = "ElementCollection"
    VERSION = "Version"
    TRANSIENT = "Transient"

    @property
    def is_to_one(self) -> bool:
        return self in (Marker.ONE_TO_ONE, Marker.MANY_TO_ONE)

    @property
    def is_to_many(self) -> bool:
        return self in (Marker.ONE_TO_MANY, Marker.MANY_TO_MANY)


class AttributeKind(Enum):
    """Closed set of resolved attribute kinds."""

    IDENTIFIER = "Identifier"
    BASIC = "Basic"
    EMBEDDED = "Embedded"
    TO_ONE = "ToOne"
    TO_MANY = "ToMany"
    COLLECTION = "Collection"
    KEYED_COLLECTION = "KeyedCollection"

    @property
    def is_plural(self) -> bool:
        return self in (
            AttributeKind.TO_MANY,
            AttributeKind.COLLECTION,
            AttributeKind.KEYED_COLLECTION,
        )


class ContainerType(Enum):
    """Shape of a collection attribute's declared container."""

    LIST = "list"
    SET = "set"
    COLLECTION = "collection"
    MAP = "map"


class Severity(Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


class DiagnosticKind(Enum):
    """Diagnostic categories reported through the Messager."""

    # errors
    AMBIGUOUS_IDENTIFIER = "AmbiguousIdentifier"
    MISSING_IDENTIFIER = "MissingIdentifier"
    UNRESOLVED_REFERENCE = "UnresolvedReference"
    CONFLICTING_MARKERS = "ConflictingMarkers"
    NAME_COLLISION = "NameCollision"
    SYNTAX_ERROR = "SyntaxError"
    UNREADABLE_SOURCE = "UnreadableSource"
    OUTPUT_ERROR = "OutputError"
    INTERNAL_ERROR = "InternalError"
    # warnings
    UNCLASSIFIED_ATTRIBUTE = "UnclassifiedAttribute"
    INCONSISTENT_HIERARCHY = "InconsistentHierarchy"
    UNKNOWN_OPTION = "UnknownOption"
    # notes
    GENERATION = "Generation"
