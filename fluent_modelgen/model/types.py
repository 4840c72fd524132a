"""Declared type references.

A TypeRef is the scanner's static view of an annotation: a (possibly
qualified) name plus generic arguments. It never refers to a live class.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace

# typing/collections aliases normalized to the builtin container names
CONTAINER_ALIASES: dict[str, str] = {
    "List": "list",
    "Set": "set",
    "FrozenSet": "frozenset",
    "Dict": "dict",
    "Tuple": "tuple",
    "DefaultDict": "defaultdict",
    "OrderedDict": "OrderedDict",
}

KEYED_CONTAINERS = frozenset({"dict", "Mapping", "MutableMapping", "OrderedDict", "defaultdict"})
ORDERED_CONTAINERS = frozenset({"list", "Sequence", "MutableSequence", "tuple"})
UNORDERED_CONTAINERS = frozenset({"set", "frozenset", "AbstractSet", "MutableSet"})
GENERIC_CONTAINERS = frozenset({"Collection", "Iterable"})


@dataclass(frozen=True)
class TypeRef:
    """A declared type: name, generic arguments and optionality."""

    name: str
    args: tuple[TypeRef, ...] = ()
    nullable: bool = False

    @property
    def simple_name(self) -> str:
        """Last dotted segment of the name."""
        return self.name.rsplit(".", 1)[-1]

    @property
    def container_name(self) -> str:
        """Normalized container name (``typing.List`` -> ``list``)."""
        simple = self.simple_name
        return CONTAINER_ALIASES.get(simple, simple)

    @property
    def is_keyed(self) -> bool:
        return self.container_name in KEYED_CONTAINERS

    @property
    def is_container(self) -> bool:
        name = self.container_name
        return (
            name in KEYED_CONTAINERS
            or name in ORDERED_CONTAINERS
            or name in UNORDERED_CONTAINERS
            or name in GENERIC_CONTAINERS
        )

    @property
    def element(self) -> TypeRef | None:
        """Element type of a container (value type for keyed containers)."""
        if not self.args:
            return None
        if self.is_keyed:
            return self.args[1] if len(self.args) > 1 else None
        return self.args[0]

    @property
    def key(self) -> TypeRef | None:
        """Key type of a keyed container."""
        if self.is_keyed and self.args:
            return self.args[0]
        return None

    def substitute(self, bindings: Mapping[str, TypeRef]) -> TypeRef:
        """Replace type variables named in ``bindings``."""
        if not bindings:
            return self
        bound = bindings.get(self.name)
        if bound is not None and not self.args:
            return replace(bound, nullable=bound.nullable or self.nullable)
        if not self.args:
            return self
        return replace(self, args=tuple(arg.substitute(bindings) for arg in self.args))

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(a) for a in self.args)}]"


ELLIPSIS = TypeRef("...")
