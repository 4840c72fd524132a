"""Criteria runtime - the handles generated accessor modules are built from."""

from __future__ import annotations

from fluent_modelgen.criteria.paths import (
    AnyPath,
    BooleanPath,
    CollectionPath,
    ComparablePath,
    EmbeddedPath,
    EntityPath,
    JoinType,
    MapPath,
    NumberPath,
    Path,
    StringPath,
    escape_like,
    joins_of,
    path_of,
    treat,
)
from fluent_modelgen.criteria.predicate import (
    Comparison,
    Junction,
    Membership,
    Negation,
    Order,
    Predicate,
    order_by,
)

__all__ = [
    # Paths
    "Path",
    "EntityPath",
    "EmbeddedPath",
    "AnyPath",
    "ComparablePath",
    "NumberPath",
    "StringPath",
    "BooleanPath",
    "CollectionPath",
    "MapPath",
    "JoinType",
    "path_of",
    "joins_of",
    "treat",
    "escape_like",
    # Predicates
    "Predicate",
    "Comparison",
    "Junction",
    "Negation",
    "Membership",
    "Order",
    "order_by",
]
