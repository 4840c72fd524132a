"""Code emitter.

Renders one generation-root EntityModel into the source text of its
accessor module: the root accessor class plus one inline accessor class per
embeddable reached from it. The module layout lives in the
``accessor_module.py.j2`` template; this module decides names, imports and
the handle each attribute returns. Emission reads the registry and keeps no
state between calls, so the same model always yields the same text.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from fluent_modelgen.core.enums import AttributeKind, ContainerType
from fluent_modelgen.core.registry import ModelRegistry
from fluent_modelgen.emit import naming
from fluent_modelgen.emit.imports import ImportBuilder
from fluent_modelgen.model.entity import AttributeModel, EntityModel
from fluent_modelgen.model.types import TypeRef

logger = logging.getLogger(__name__)

GENERATOR = "fluent_modelgen"
CRITERIA = "fluent_modelgen.criteria"
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
MODULE_TEMPLATE = "accessor_module.py.j2"

_NUMBER_TYPES = frozenset({"int", "float", "complex", "decimal.Decimal"})
_COMPARABLE_TYPES = frozenset({
    "datetime.date",
    "datetime.datetime",
    "datetime.time",
    "datetime.timedelta",
    "uuid.UUID",
    "bytes",
})

# Generated Python is not markup: nothing is escaped.
_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(enabled_extensions=()),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class GeneratedSource:
    """One rendered accessor module."""

    module: str
    class_name: str
    text: str


@dataclass(frozen=True)
class _Leaf:
    """Leaf handle choice for a basic type: class name and annotation."""

    handle: str
    annotation: str
    type_name: str


@dataclass(frozen=True)
class _Method:
    """One accessor method as the template renders it."""

    name: str
    returns: str
    value: str
    lazy_import: str | None = None


@dataclass(frozen=True)
class _Class:
    name: str
    base: str
    description: str
    entity: str
    methods: tuple[_Method, ...]


class CodeEmitter:
    """Renders accessor modules for generation-root entity models."""

    def emit(self, model: EntityModel, registry: ModelRegistry) -> GeneratedSource:
        """Render the accessor module for ``model``.

        Raises:
            ModelNotFoundError: If a referenced embeddable is not in ``registry``.
        """
        return _Render(model, registry).run()


class _Render:
    """State of a single emission."""

    def __init__(self, model: EntityModel, registry: ModelRegistry) -> None:
        self.model = model
        self.registry = registry
        self.class_name = naming.accessor_class_name(model.simple_name)
        self.module = naming.accessor_module(model.qualified_name, model.is_package)
        self.embeddables = self._reach_embeddables()
        self.imports = ImportBuilder({self.class_name, *self.embeddables.values()})

    def run(self) -> GeneratedSource:
        classes = [self._class(self.model, self.class_name, "EntityPath")]
        for qualified_name, class_name in self.embeddables.items():
            classes.append(self._class(self.registry.get(qualified_name), class_name, "EmbeddedPath"))

        text = _env.get_template(MODULE_TEMPLATE).render(
            generator=GENERATOR,
            qualified_name=self.model.qualified_name,
            imports=self.imports.render(),
            classes=classes,
        )
        logger.debug("Rendered %s (%d lines)", self.module, text.count("\n"))
        return GeneratedSource(module=self.module, class_name=self.class_name, text=text)

    # ------------------------------------------------------------------
    # Embeddables
    # ------------------------------------------------------------------

    def _reach_embeddables(self) -> dict[str, str]:
        """Embeddables reachable from the root, in first-reach order, with class names."""
        reached: list[str] = []
        queue = [self.model]
        while queue:
            current = queue.pop(0)
            for attr in current.attributes:
                if not self._is_embeddable_ref(attr) or attr.target in reached:
                    continue
                reached.append(attr.target)  # type: ignore[arg-type]
                queue.append(self.registry.get(attr.target))  # type: ignore[arg-type]

        by_simple: dict[str, list[str]] = defaultdict(list)
        for qualified_name in reached:
            by_simple[qualified_name.rpartition(".")[2]].append(qualified_name)
        names: dict[str, str] = {}
        for simple, group in by_simple.items():
            for index, qualified_name in enumerate(sorted(group)):
                names[qualified_name] = naming.embeddable_class_name(simple, index)
        return {q: names[q] for q in reached}

    def _is_embeddable_ref(self, attr: AttributeModel) -> bool:
        if attr.target is None:
            return False
        if attr.kind is AttributeKind.EMBEDDED:
            return True
        return attr.kind is AttributeKind.COLLECTION

    # ------------------------------------------------------------------
    # Classes and methods
    # ------------------------------------------------------------------

    def _class(self, model: EntityModel, class_name: str, base: str) -> _Class:
        kind = "embeddable " if model.is_embeddable else ""
        base_name = self.imports.runtime(f"{CRITERIA}.{base}")
        methods = [self._method(attr) for attr in model.attributes]
        if model is self.model:
            methods.extend(
                self._narrowing(self.registry.get(descendant))
                for descendant in model.descendants
                if self.registry.has(descendant)
            )
        return _Class(
            name=class_name,
            base=base_name,
            description=f"{kind}{model.qualified_name}",
            entity=model.qualified_name,
            methods=tuple(methods),
        )

    def _method(self, attr: AttributeModel) -> _Method:
        kind = attr.kind
        if kind in (AttributeKind.IDENTIFIER, AttributeKind.BASIC):
            leaf = self._leaf(attr.declared_type)
            return _Method(attr.name, leaf.annotation, f'{leaf.handle}(self, "{attr.name}", "{leaf.type_name}")')
        if kind is AttributeKind.EMBEDDED:
            class_name = self.embeddables[attr.target]  # type: ignore[index]
            return _Method(attr.name, class_name, f'{class_name}(self, "{attr.name}")')
        if kind is AttributeKind.TO_ONE:
            local, statement = self._entity_accessor(attr.target)  # type: ignore[arg-type]
            return _Method(attr.name, local, f'{local}(self, "{attr.name}")', statement)
        return self._plural(attr)

    def _plural(self, attr: AttributeModel) -> _Method:
        statement = None
        if attr.kind in (AttributeKind.TO_MANY, AttributeKind.KEYED_COLLECTION):
            element, statement = self._entity_accessor(attr.target)  # type: ignore[arg-type]
            element_type = element
        elif attr.target is not None:
            element = element_type = self.embeddables[attr.target]
        else:
            leaf = self._leaf(attr.element)
            element = _leaf_factory(leaf)
            element_type = leaf.annotation

        container = attr.container.value if attr.container else "collection"
        if attr.container is ContainerType.MAP:
            key_leaf = self._leaf(attr.key_type)
            handle = self.imports.runtime(f"{CRITERIA}.MapPath")
            annotation = f"{handle}[{key_leaf.annotation}, {element_type}]"
            call = (
                f'{handle}(self, "{attr.name}", {element}, "{container}", '
                f"key={_leaf_factory(key_leaf)})"
            )
        else:
            handle = self.imports.runtime(f"{CRITERIA}.CollectionPath")
            annotation = f"{handle}[{element_type}]"
            call = f'{handle}(self, "{attr.name}", {element}, "{container}")'
        return _Method(attr.name, annotation, call, statement)

    def _narrowing(self, descendant: EntityModel) -> _Method:
        treat = self.imports.runtime(f"{CRITERIA}.treat")
        local, statement = self._entity_accessor(descendant.qualified_name)
        name = naming.narrowing_method_name(descendant.simple_name)
        return _Method(name, local, f"{treat}(self, {local})", statement)

    def _entity_accessor(self, target: str) -> tuple[str, str | None]:
        """Local name of an entity's accessor class and the statement importing it."""
        if target == self.model.qualified_name:
            return self.class_name, None
        target_model = self.registry.get(target) if self.registry.has(target) else None
        if target_model is not None:
            simple, module = target_model.simple_name, naming.accessor_module(target, target_model.is_package)
        else:
            simple, module = target.rpartition(".")[2], naming.accessor_module(target)
        qualified = f"{module}.{naming.accessor_class_name(simple)}"
        local = self.imports.type_only(qualified)
        # Imported on call so accessor modules can refer to each other.
        return local, self.imports.statement(qualified)

    def _leaf(self, type_ref: TypeRef | None) -> _Leaf:
        name = type_ref.name if type_ref is not None else "typing.Any"
        type_name = str(type_ref) if type_ref is not None else "Any"
        if name == "str":
            handle = self.imports.runtime(f"{CRITERIA}.StringPath")
            return _Leaf(handle, handle, type_name)
        if name == "bool":
            handle = self.imports.runtime(f"{CRITERIA}.BooleanPath")
            return _Leaf(handle, handle, type_name)
        if name in _NUMBER_TYPES:
            handle = self.imports.runtime(f"{CRITERIA}.NumberPath")
        elif name in _COMPARABLE_TYPES:
            handle = self.imports.runtime(f"{CRITERIA}.ComparablePath")
        else:
            handle = self.imports.runtime(f"{CRITERIA}.AnyPath")
        return _Leaf(handle, f"{handle}[{self.imports.annotation(type_ref)}]", type_name)


def _leaf_factory(leaf: _Leaf) -> str:
    return f'lambda parent: {leaf.handle}(parent, type_name="{leaf.type_name}")'
