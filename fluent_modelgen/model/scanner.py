"""Structural scanner over Python source, using the ``ast`` module.

Produces a ``ClassRecord`` for every top-level class of a source unit.
Names in annotations and base lists are qualified through a per-module
symbol table built from the unit's imports and class definitions; entity
modules are never imported.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass, field

from fluent_modelgen.core.enums import Marker, PersistenceType
from fluent_modelgen.core.exceptions import SourceSyntaxError
from fluent_modelgen.core.sources import SourceUnit
from fluent_modelgen.model.entity import ClassRecord, MemberRecord
from fluent_modelgen.model.types import CONTAINER_ALIASES, ELLIPSIS, TypeRef

logger = logging.getLogger(__name__)

CLASS_MARKERS: dict[str, PersistenceType] = {
    "entity": PersistenceType.ENTITY,
    "Entity": PersistenceType.ENTITY,
    "mapped_superclass": PersistenceType.MAPPED_SUPERCLASS,
    "MappedSuperclass": PersistenceType.MAPPED_SUPERCLASS,
    "embeddable": PersistenceType.EMBEDDABLE,
    "Embeddable": PersistenceType.EMBEDDABLE,
}

MEMBER_MARKERS: dict[str, Marker] = {m.value: m for m in Marker}

_GENERIC_BASES = frozenset({"Generic", "Protocol"})
_TYPING_MODULES = ("typing", "typing_extensions")


def _dotted(node: ast.AST) -> str | None:
    """Return ``a.b.c`` for Name/Attribute chains, else None."""
    parts: list[str] = []
    current = node
    while isinstance(current, ast.Attribute):
        parts.append(current.attr)
        current = current.value
    if not isinstance(current, ast.Name):
        return None
    parts.append(current.id)
    return ".".join(reversed(parts))


def _callee(node: ast.AST) -> ast.AST:
    return node.func if isinstance(node, ast.Call) else node


def _simple(dotted: str) -> str:
    return dotted.rsplit(".", 1)[-1]


@dataclass
class _SymbolTable:
    """Module-level name -> qualified name bindings."""

    module: str
    package: str
    names: dict[str, str] = field(default_factory=dict)
    type_vars: set[str] = field(default_factory=set)
    is_package: bool = False

    @classmethod
    def from_module(cls, tree: ast.Module, unit: SourceUnit) -> _SymbolTable:
        table = cls(module=unit.module, package=unit.package, is_package=unit.is_package)
        for stmt in _top_level(tree.body):
            if isinstance(stmt, ast.ClassDef):
                table.names[stmt.name] = f"{unit.module}.{stmt.name}"
            elif isinstance(stmt, ast.Import):
                for alias in stmt.names:
                    if alias.asname:
                        table.names[alias.asname] = alias.name
                    else:
                        head = alias.name.split(".", 1)[0]
                        table.names[head] = head
            elif isinstance(stmt, ast.ImportFrom):
                source = table._import_source(stmt)
                for alias in stmt.names:
                    if alias.name == "*":
                        continue
                    local = alias.asname or alias.name
                    table.names[local] = f"{source}.{alias.name}" if source else alias.name
            elif isinstance(stmt, ast.Assign) and isinstance(stmt.value, ast.Call):
                callee = _dotted(stmt.value.func)
                if callee and _simple(callee) in ("TypeVar", "ParamSpec", "TypeVarTuple"):
                    for target in stmt.targets:
                        if isinstance(target, ast.Name):
                            table.type_vars.add(target.id)
        # Type variables stay bare so generic substitution can find them.
        for name in table.type_vars:
            table.names.pop(name, None)
        return table

    def _import_source(self, stmt: ast.ImportFrom) -> str:
        if not stmt.level:
            return stmt.module or ""
        parts = self.package.split(".") if self.package else []
        if stmt.level > 1:
            parts = parts[: len(parts) - (stmt.level - 1)]
        if stmt.module:
            parts.append(stmt.module)
        return ".".join(parts)

    def qualify(self, dotted: str) -> str:
        head, _, rest = dotted.partition(".")
        bound = self.names.get(head)
        if bound is None:
            return dotted
        return f"{bound}.{rest}" if rest else bound


def _top_level(body: list[ast.stmt]):
    """Yield module-level statements, descending into if/try blocks."""
    for stmt in body:
        if isinstance(stmt, ast.If):
            yield from _top_level(stmt.body)
            yield from _top_level(stmt.orelse)
        elif isinstance(stmt, ast.Try):
            yield from _top_level(stmt.body)
            for handler in stmt.handlers:
                yield from _top_level(handler.body)
            yield from _top_level(stmt.orelse)
        else:
            yield stmt


@dataclass
class _Annotation:
    """Accumulates what an annotation says besides its type."""

    markers: set[Marker] = field(default_factory=set)
    class_var: bool = False


class AstScanner:
    """Structural scanner for Python source units."""

    def scan(self, unit: SourceUnit) -> list[ClassRecord]:
        """Scan one unit.

        Raises:
            SourceSyntaxError: If the unit is not valid Python.
        """
        try:
            tree = ast.parse(unit.text, filename=str(unit.path or unit.module))
        except SyntaxError as e:
            raise SourceSyntaxError(unit.module, e.lineno, e.msg) from e

        symbols = _SymbolTable.from_module(tree, unit)
        records = [
            self._scan_class(node, symbols)
            for node in _top_level(tree.body)
            if isinstance(node, ast.ClassDef)
        ]
        logger.debug("Scanned %s: %d classes", unit.module, len(records))
        return records

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def _scan_class(self, node: ast.ClassDef, symbols: _SymbolTable) -> ClassRecord:
        persistence_type = None
        for decorator in node.decorator_list:
            name = _dotted(_callee(decorator))
            if name and _simple(name) in CLASS_MARKERS:
                persistence_type = CLASS_MARKERS[_simple(name)]

        bases: list[TypeRef] = []
        type_params: list[str] = [tp.name for tp in getattr(node, "type_params", [])]
        explicit_generic = bool(type_params)
        implicit_params: list[str] = []

        for base in node.bases:
            ref = self._type(base, symbols, _Annotation())
            if ref is None or ref.name in ("object", "builtins.object"):
                continue
            if ref.simple_name in _GENERIC_BASES:
                explicit_generic = True
                type_params.extend(a.name for a in ref.args if a.name not in type_params)
                continue
            bases.append(ref)
            for arg in ref.args:
                if arg.name in symbols.type_vars and arg.name not in implicit_params:
                    implicit_params.append(arg.name)

        if not explicit_generic:
            type_params = implicit_params

        members = []
        for stmt in node.body:
            member = self._scan_member(stmt, symbols)
            if member is not None:
                members.append(member)

        return ClassRecord(
            qualified_name=f"{symbols.module}.{node.name}",
            simple_name=node.name,
            module=symbols.module,
            persistence_type=persistence_type,
            bases=tuple(bases),
            type_params=tuple(type_params),
            members=tuple(members),
            line=node.lineno,
            is_package=symbols.is_package,
        )

    def _scan_member(self, stmt: ast.stmt, symbols: _SymbolTable) -> MemberRecord | None:
        if not isinstance(stmt, ast.AnnAssign) or not isinstance(stmt.target, ast.Name):
            return None
        name = stmt.target.id
        if name.startswith("__") and name.endswith("__"):
            return None

        annotation = _Annotation()
        type_ref = self._type(stmt.annotation, symbols, annotation)
        if annotation.class_var:
            return None

        # author: Author = ManyToOne()
        if stmt.value is not None:
            default = _dotted(_callee(stmt.value))
            if default and _simple(default) in MEMBER_MARKERS:
                annotation.markers.add(MEMBER_MARKERS[_simple(default)])

        if Marker.TRANSIENT in annotation.markers:
            return None
        return MemberRecord(
            name=name,
            type=type_ref,
            markers=frozenset(annotation.markers),
            line=stmt.lineno,
        )

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    def _type(self, node: ast.AST, symbols: _SymbolTable, annotation: _Annotation) -> TypeRef | None:
        """Convert an annotation expression into a TypeRef."""
        if isinstance(node, ast.Constant):
            if node.value is None:
                return TypeRef("None")
            if node.value is Ellipsis:
                return ELLIPSIS
            if isinstance(node.value, str):
                try:
                    parsed = ast.parse(node.value, mode="eval").body
                except SyntaxError:
                    return None
                return self._type(parsed, symbols, annotation)
            return None

        if isinstance(node, (ast.Name, ast.Attribute)):
            dotted = _dotted(node)
            return TypeRef(self._normalize(symbols.qualify(dotted))) if dotted else None

        if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
            return self._union([node.left, node.right], symbols, annotation)

        if isinstance(node, ast.Subscript):
            return self._subscript(node, symbols, annotation)

        return None

    def _subscript(self, node: ast.Subscript, symbols: _SymbolTable, annotation: _Annotation) -> TypeRef | None:
        dotted = _dotted(node.value)
        if dotted is None:
            return None
        qualified = symbols.qualify(dotted)
        construct = self._typing_construct(qualified)
        elements = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]

        if construct == "Annotated":
            for meta in elements[1:]:
                marker = _dotted(_callee(meta))
                if marker and _simple(marker) in MEMBER_MARKERS:
                    annotation.markers.add(MEMBER_MARKERS[_simple(marker)])
            return self._type(elements[0], symbols, annotation)
        if construct == "ClassVar":
            annotation.class_var = True
            return self._type(elements[0], symbols, annotation)
        if construct in ("Mapped", "Final", "Required", "NotRequired"):
            return self._type(elements[0], symbols, annotation)
        if construct == "Optional":
            inner = self._type(elements[0], symbols, annotation)
            return TypeRef(inner.name, inner.args, nullable=True) if inner else None
        if construct == "Union":
            return self._union(elements, symbols, annotation)

        args = []
        for element in elements:
            arg = self._type(element, symbols, annotation)
            if arg is None:
                return None
            args.append(arg)
        return TypeRef(self._normalize(qualified), tuple(args))

    def _union(self, nodes: list[ast.AST], symbols: _SymbolTable, annotation: _Annotation) -> TypeRef | None:
        members: list[TypeRef] = []
        for node in nodes:
            ref = self._type(node, symbols, annotation)
            if ref is None:
                return None
            # flatten nested X | Y | None
            members.extend(ref.args if ref.name == "Union" else [ref])
        nullable = any(m.name == "None" for m in members)
        rest = [m for m in members if m.name != "None"]
        if len(rest) == 1:
            return TypeRef(rest[0].name, rest[0].args, nullable=nullable or rest[0].nullable)
        return TypeRef("Union", tuple(rest), nullable=nullable)

    @staticmethod
    def _typing_construct(qualified: str) -> str | None:
        module, _, simple = qualified.rpartition(".")
        if not module or module in _TYPING_MODULES or module == "sqlalchemy.orm":
            return simple
        return None

    @staticmethod
    def _normalize(qualified: str) -> str:
        module, _, simple = qualified.rpartition(".")
        if (not module or module in _TYPING_MODULES) and simple in CONTAINER_ALIASES:
            return CONTAINER_ALIASES[simple]
        if module in ("builtins",):
            return simple
        return qualified
