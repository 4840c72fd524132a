"""Persistence markers for entity source code.

At runtime the class markers only tag the class. The scanner recognises all
markers by name in the source text, with or without a module prefix::

    from typing import Annotated

    from fluent_modelgen.markers import Id, ManyToOne, entity

    @entity
    class Book:
        id: Annotated[int, Id]
        title: str
        author: Annotated[Author, ManyToOne(fetch="lazy")]
"""

from __future__ import annotations

from typing import Any


# ----------------------------------------------------------------------
# Class markers
# ----------------------------------------------------------------------


def _class_marker(role: str):
    def marker(cls=None, **options):
        def apply(target):
            target.__persistence__ = role
            target.__persistence_options__ = options
            return target

        if cls is None:
            return apply
        return apply(cls)

    marker.__name__ = role
    marker.__doc__ = f"Mark a class as {role.replace('_', ' ')}. Usable bare or called."
    return marker


entity = _class_marker("entity")
mapped_superclass = _class_marker("mapped_superclass")
embeddable = _class_marker("embeddable")

Entity = entity
MappedSuperclass = mapped_superclass
Embeddable = embeddable


# ----------------------------------------------------------------------
# Member markers
# ----------------------------------------------------------------------


class MemberMarker:
    """Base of member markers. Options are kept for documentation only."""

    def __init__(self, **options: Any) -> None:
        self.options = options

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in sorted(self.options.items()))
        return f"{type(self).__name__}({args})"


class Id(MemberMarker):
    """Identifier attribute."""


class Embedded(MemberMarker):
    """Embedded value-type attribute."""


class OneToOne(MemberMarker):
    pass


class ManyToOne(MemberMarker):
    pass


class OneToMany(MemberMarker):
    pass


class ManyToMany(MemberMarker):
    pass


class ElementCollection(MemberMarker):
    """Collection of basic or embeddable values."""


class Version(MemberMarker):
    """Optimistic-locking version attribute; modelled as a basic attribute."""


class Transient(MemberMarker):
    """Attribute excluded from the persistent state."""


__all__ = [
    "entity",
    "mapped_superclass",
    "embeddable",
    "Entity",
    "MappedSuperclass",
    "Embeddable",
    "MemberMarker",
    "Id",
    "Embedded",
    "OneToOne",
    "ManyToOne",
    "OneToMany",
    "ManyToMany",
    "ElementCollection",
    "Version",
    "Transient",
]
