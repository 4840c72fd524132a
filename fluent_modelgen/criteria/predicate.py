"""Query predicates built from path handles.

Predicates render to a query-language fragment with ``:name`` parameters
plus the parameter dict, e.g.::

    (BookModel().title().eq("Dune") & BookModel().pages().gt(300)).render()
    -> ("title = :p1 AND pages > :p2", {"p1": "Dune", "p2": 300})

Handles return None instead of a predicate when their argument is None or
empty, and junctions drop None members, so optional filters compose without
branching:

    Junction.of("AND", book.title().eq(title), book.pages().ge(min_pages))
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class _Params:
    """Allocates ``:p1``, ``:p2``... names in render order."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}

    def bind(self, value: Any) -> str:
        name = f"p{len(self.values) + 1}"
        self.values[name] = value
        return f":{name}"


class Predicate:
    """Base predicate. Combine with ``&``, ``|`` and ``~``."""

    def render(self) -> tuple[str, dict[str, Any]]:
        """Return ``(text, params)``."""
        params = _Params()
        return self._render(params), params.values

    def _render(self, params: _Params) -> str:
        raise NotImplementedError

    def __and__(self, other: Predicate | None) -> Predicate:
        return Junction.of("AND", self, other)  # type: ignore[return-value]

    def __rand__(self, other: Predicate | None) -> Predicate:
        return Junction.of("AND", other, self)  # type: ignore[return-value]

    def __or__(self, other: Predicate | None) -> Predicate:
        return Junction.of("OR", self, other)  # type: ignore[return-value]

    def __ror__(self, other: Predicate | None) -> Predicate:
        return Junction.of("OR", other, self)  # type: ignore[return-value]

    def __invert__(self) -> Predicate:
        return Negation(self)

    def __str__(self) -> str:
        return self.render()[0]

    def __repr__(self) -> str:
        text, params = self.render()
        return f"{type(self).__name__}({text!r}, {params!r})"


class Comparison(Predicate):
    """``path <operator> operand``.

    Unary operators (``IS NULL``, ``IS EMPTY``...) take no operand;
    ``BETWEEN`` takes a ``(low, high)`` pair.
    """

    UNARY = frozenset({"IS NULL", "IS NOT NULL", "IS EMPTY", "IS NOT EMPTY", "= TRUE", "= FALSE"})

    def __init__(self, path: str, operator: str, operand: Any = None, escape: str | None = None) -> None:
        self.path = path
        self.operator = operator
        self.operand = operand
        self.escape = escape

    def _render(self, params: _Params) -> str:
        if self.operator in self.UNARY:
            return f"{self.path} {self.operator}"
        if self.operator in ("BETWEEN", "NOT BETWEEN"):
            low, high = self.operand
            return f"{self.path} {self.operator} {params.bind(low)} AND {params.bind(high)}"
        text = f"{self.path} {self.operator} {params.bind(self.operand)}"
        if self.escape is not None:
            text += f" ESCAPE '{self.escape}'"
        return text


class Junction(Predicate):
    """AND/OR of two or more predicates. Nested junctions of the same operator flatten."""

    def __init__(self, operator: str, predicates: Sequence[Predicate]) -> None:
        self.operator = operator
        self.predicates = tuple(predicates)

    @classmethod
    def of(cls, operator: str, *predicates: Predicate | None) -> Predicate | None:
        """Combine ``predicates``, skipping None.

        Returns None when nothing is left and the predicate itself when one is.
        """
        flat: list[Predicate] = []
        for predicate in predicates:
            if predicate is None:
                continue
            if not isinstance(predicate, Predicate):
                raise TypeError(f"Cannot combine predicate with {type(predicate).__name__}")
            if isinstance(predicate, Junction) and predicate.operator == operator:
                flat.extend(predicate.predicates)
            else:
                flat.append(predicate)
        if not flat:
            return None
        if len(flat) == 1:
            return flat[0]
        return cls(operator, flat)

    def _render(self, params: _Params) -> str:
        parts = []
        for predicate in self.predicates:
            text = predicate._render(params)
            if isinstance(predicate, Junction):
                text = f"({text})"
            parts.append(text)
        return f" {self.operator} ".join(parts)


class Membership(Predicate):
    """``:value MEMBER OF path``, or ``NOT MEMBER OF`` when negated."""

    def __init__(self, path: str, value: Any, negated: bool = False) -> None:
        self.path = path
        self.value = value
        self.negated = negated

    def _render(self, params: _Params) -> str:
        operator = "NOT MEMBER OF" if self.negated else "MEMBER OF"
        return f"{params.bind(self.value)} {operator} {self.path}"

    def __invert__(self) -> Predicate:
        return Membership(self.path, self.value, not self.negated)


class Negation(Predicate):
    """NOT of one predicate."""

    def __init__(self, predicate: Predicate) -> None:
        self.predicate = predicate

    def _render(self, params: _Params) -> str:
        return f"NOT ({self.predicate._render(params)})"

    def __invert__(self) -> Predicate:
        return self.predicate


class Order:
    """Sort key over a path: ``str(order)`` is ``path ASC`` or ``path DESC``."""

    def __init__(self, path: str, descending: bool = False) -> None:
        self.path = path
        self.descending = descending

    def __str__(self) -> str:
        return f"{self.path} {'DESC' if self.descending else 'ASC'}"

    def __repr__(self) -> str:
        return f"Order({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Order):
            return NotImplemented
        return (self.path, self.descending) == (other.path, other.descending)

    def __hash__(self) -> int:
        return hash((self.path, self.descending))


def order_by(*orders: Order | None) -> str:
    """Render an ORDER BY list, skipping None: ``"title ASC, pages DESC"``."""
    return ", ".join(str(order) for order in orders if order is not None)
