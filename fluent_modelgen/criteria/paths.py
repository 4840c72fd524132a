"""Path handles used by generated accessor modules.

Every handle knows its parent and the attribute name that leads to it, so
``str(handle)`` is the dotted navigation path from the root accessor:

    str(BookModel().author().name())  -> "author.name"

Path state lives in name-mangled attributes, and navigation helpers use
dunder names, so generated accessor methods can use any attribute name.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from fluent_modelgen.criteria.predicate import Comparison, Membership, Order

T = TypeVar("T")
E = TypeVar("E")
K = TypeVar("K")
P = TypeVar("P", bound="Path")

_LIKE_ESCAPE = "\\"


def _is_empty(value: Any) -> bool:
    """None and the empty string mean "no filter"."""
    return value is None or (isinstance(value, str) and not value)


class JoinType(enum.Enum):
    """Join flavour recorded on a collection navigation."""

    INNER = "inner"
    LEFT = "left"


class Path:
    """A node of a navigation chain.

    Args:
        parent: Handle this node was reached from, None for a root.
        name: Attribute name leading here; None for nodes that add no segment.
        join: Join type when this node joins a collection.
        wrap: Format applied to the rendered path, e.g. ``"KEY({})"``.
    """

    def __init__(
        self,
        parent: Path | None = None,
        name: str | None = None,
        *,
        join: JoinType | None = None,
        wrap: str | None = None,
    ) -> None:
        self.__parent = parent
        self.__name = name
        self.__join = join
        self.__wrap = wrap

    def __path_nodes__(self) -> tuple[Path, ...]:
        """Nodes from the root down to this handle."""
        nodes: list[Path] = []
        node: Path | None = self
        while node is not None:
            nodes.append(node)
            node = node.__parent
        return tuple(reversed(nodes))

    def __path_join__(self) -> JoinType | None:
        return self.__join

    def __path_with__(self, *, join: JoinType | None = None, wrap: str | None = None) -> Path:
        """Plain node at the same position, with a join type or wrapper."""
        return Path(self.__parent, self.__name, join=join, wrap=wrap)

    def __path_as__(self, accessor: type[P]) -> P:
        """The same position viewed through another accessor class."""
        return accessor(self.__parent, self.__name, join=self.__join, wrap=self.__wrap)

    def __str__(self) -> str:
        text = str(self.__parent) if self.__parent is not None else ""
        if self.__name:
            text = f"{text}.{self.__name}" if text else self.__name
        if self.__wrap:
            text = self.__wrap.format(text)
        return text

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {str(self) or '(root)'}>"


class EntityPath(Path):
    """Base of generated entity accessors. Called with no arguments it is a root."""

    __entity__: str = ""


class EmbeddedPath(Path):
    """Base of generated embeddable accessors."""

    __entity__: str = ""


def path_of(handle: Path) -> str:
    """Dotted navigation path of ``handle``."""
    return str(handle)


def joins_of(handle: Path) -> list[tuple[str, JoinType]]:
    """Joins along the navigation chain of ``handle``, outermost first."""
    joins = []
    for node in handle.__path_nodes__():
        join = node.__path_join__()
        if join is not None:
            joins.append((str(node), join))
    return joins


def treat(handle: Path, accessor: type[P]) -> P:
    """Narrow ``handle`` to a subclass accessor over the same path."""
    return handle.__path_as__(accessor)


# ----------------------------------------------------------------------
# Leaf handles
# ----------------------------------------------------------------------


class AnyPath(Path, Generic[T]):
    """Leaf handle for a basic attribute of any type.

    Operations taking a value return None when it is None or an empty string
    (an empty iterable for ``in_``), meaning "no filter".
    """

    def __init__(self, parent: Path | None = None, name: str | None = None, type_name: str = "", **kwargs: Any) -> None:
        super().__init__(parent, name, **kwargs)
        self.type_name = type_name

    def _compare(self, operator: str, operand: Any = None, escape: str | None = None) -> Comparison:
        return Comparison(str(self), operator, operand, escape)

    def _compare_value(self, operator: str, value: Any) -> Comparison | None:
        if _is_empty(value):
            return None
        return self._compare(operator, value)

    def _compare_values(self, operator: str, values: Iterable[Any] | None) -> Comparison | None:
        items = tuple(values) if values is not None else ()
        if not items:
            return None
        return self._compare(operator, items)

    def eq(self, value: T | None) -> Comparison | None:
        return self._compare_value("=", value)

    def ne(self, value: T | None) -> Comparison | None:
        return self._compare_value("<>", value)

    def in_(self, values: Iterable[T] | None) -> Comparison | None:
        return self._compare_values("IN", values)

    def not_in(self, values: Iterable[T] | None) -> Comparison | None:
        return self._compare_values("NOT IN", values)

    def is_null(self) -> Comparison:
        return self._compare("IS NULL")

    def is_not_null(self) -> Comparison:
        return self._compare("IS NOT NULL")

    def asc(self) -> Order:
        return Order(str(self))

    def desc(self) -> Order:
        return Order(str(self), descending=True)


class ComparablePath(AnyPath[T]):
    """Leaf handle for ordered values (dates, times, UUIDs, bytes)."""

    def lt(self, value: T | None) -> Comparison | None:
        return self._compare_value("<", value)

    def le(self, value: T | None) -> Comparison | None:
        return self._compare_value("<=", value)

    def gt(self, value: T | None) -> Comparison | None:
        return self._compare_value(">", value)

    def ge(self, value: T | None) -> Comparison | None:
        return self._compare_value(">=", value)

    def between(self, low: T | None, high: T | None) -> Comparison | None:
        """Range check; an open bound degrades to ``ge`` or ``le``."""
        if _is_empty(low):
            return self.le(high)
        if _is_empty(high):
            return self.ge(low)
        return self._compare("BETWEEN", (low, high))

    def not_between(self, low: T | None, high: T | None) -> Comparison | None:
        if _is_empty(low) or _is_empty(high):
            return None
        return self._compare("NOT BETWEEN", (low, high))


class NumberPath(ComparablePath[T]):
    """Leaf handle for numeric attributes."""


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so ``value`` matches literally."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


class StringPath(ComparablePath[str]):
    """Leaf handle for string attributes."""

    def like(self, pattern: str | None, escape: str | None = None) -> Comparison | None:
        if _is_empty(pattern):
            return None
        return self._compare("LIKE", pattern, escape)

    def not_like(self, pattern: str | None, escape: str | None = None) -> Comparison | None:
        if _is_empty(pattern):
            return None
        return self._compare("NOT LIKE", pattern, escape)

    def starts_with(self, prefix: str | None) -> Comparison | None:
        if _is_empty(prefix):
            return None
        return self.like(f"{escape_like(prefix)}%", _LIKE_ESCAPE)

    def ends_with(self, suffix: str | None) -> Comparison | None:
        if _is_empty(suffix):
            return None
        return self.like(f"%{escape_like(suffix)}", _LIKE_ESCAPE)

    def like_partial(self, text: str | None) -> Comparison | None:
        """Matches ``text`` anywhere in the value, wildcards taken literally."""
        if _is_empty(text):
            return None
        return self.like(f"%{escape_like(text)}%", _LIKE_ESCAPE)

    def not_like_partial(self, text: str | None) -> Comparison | None:
        if _is_empty(text):
            return None
        return self.not_like(f"%{escape_like(text)}%", _LIKE_ESCAPE)

    def contains(self, text: str | None) -> Comparison | None:
        return self.like_partial(text)


class BooleanPath(AnyPath[bool]):
    """Leaf handle for boolean attributes."""

    def is_true(self) -> Comparison:
        return self._compare("= TRUE")

    def is_false(self) -> Comparison:
        return self._compare("= FALSE")


# ----------------------------------------------------------------------
# Plural handles
# ----------------------------------------------------------------------


class CollectionPath(Path, Generic[E]):
    """Handle for a collection attribute.

    Args:
        parent: Owning handle.
        name: Attribute name.
        element: Factory building the element handle from a parent node.
        container: ``list``, ``set``, ``collection`` or ``map``.
    """

    def __init__(
        self,
        parent: Path | None,
        name: str | None,
        element: Callable[[Path], E],
        container: str = "collection",
        **kwargs: Any,
    ) -> None:
        super().__init__(parent, name, **kwargs)
        self.__element = element
        self.container = container

    def join(self) -> E:
        """Element handle reached through an inner join."""
        return self.__element(self.__path_with__(join=JoinType.INNER))

    def left_join(self) -> E:
        """Element handle reached through a left outer join."""
        return self.__element(self.__path_with__(join=JoinType.LEFT))

    def is_empty(self) -> Comparison:
        return Comparison(str(self), "IS EMPTY")

    def is_not_empty(self) -> Comparison:
        return Comparison(str(self), "IS NOT EMPTY")

    def is_member(self, value: Any) -> Membership | None:
        if value is None:
            return None
        return Membership(str(self), value)

    def is_not_member(self, value: Any) -> Membership | None:
        if value is None:
            return None
        return Membership(str(self), value, negated=True)

    def size(self) -> NumberPath[int]:
        """Element count, rendered ``SIZE(path)``."""
        return NumberPath(self.__path_with__(wrap="SIZE({})"), type_name="int")

    def _element(self, node: Path) -> E:
        return self.__element(node)


class MapPath(CollectionPath[E], Generic[K, E]):
    """Handle for a keyed collection; ``key()`` renders as ``KEY(path)``."""

    def __init__(
        self,
        parent: Path | None,
        name: str | None,
        element: Callable[[Path], E],
        container: str = "map",
        *,
        key: Callable[[Path], K],
        **kwargs: Any,
    ) -> None:
        super().__init__(parent, name, element, container, **kwargs)
        self.__key = key

    def key(self) -> K:
        return self.__key(self.__path_with__(wrap="KEY({})"))

    def value(self) -> E:
        return self._element(self.__path_with__())
