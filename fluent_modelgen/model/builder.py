"""Model builder.

Turns the scanner's class records for one batch into a ModelRegistry of
immutable EntityModels.

Resolution runs in two passes. Pass 1 walks the classes in declaration
order and resolves each one against the classes declared so far; members
whose target is not known yet are parked. Pass 2 retries the parked members
against the whole batch, so forward references resolve regardless of
declaration order.

Attributes are folded along the C3 linearization of the class, root first.
For single inheritance that is plain superclass-to-subclass order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

from fluent_modelgen.adapters.protocol import Messager
from fluent_modelgen.core.diagnostics import Diagnostic
from fluent_modelgen.core.enums import AttributeKind, DiagnosticKind, PersistenceType, Severity
from fluent_modelgen.core.exceptions import (
    AmbiguousIdentifierError,
    ConflictingMarkersError,
    MissingIdentifierError,
    ModelBuildError,
    NameCollisionError,
    UnresolvedReferenceError,
)
from fluent_modelgen.core.registry import ModelRegistry
from fluent_modelgen.model.entity import AttributeModel, ClassRecord, EntityModel, MemberRecord
from fluent_modelgen.model.resolver import TypeResolver
from fluent_modelgen.model.types import TypeRef

logger = logging.getLogger(__name__)

ANY = TypeRef("typing.Any")

_SUPER_TYPES = (PersistenceType.ENTITY, PersistenceType.MAPPED_SUPERCLASS)


class _InconsistentHierarchy(Exception):
    pass


@dataclass
class _Slot:
    """One member of one level of a class's inheritance chain."""

    level: ClassRecord
    member: MemberRecord
    attribute: AttributeModel | None = None
    error: ModelBuildError | None = None
    deferred: bool = False
    unbound: MemberRecord | None = None  # as declared, before type variables became Any


@dataclass
class _Result:
    record: ClassRecord
    slots: list[_Slot] = field(default_factory=list)
    errors: list[ModelBuildError] = field(default_factory=list)
    attributes: tuple[AttributeModel, ...] = ()
    super_name: str | None = None
    descendants: tuple[str, ...] = ()


def _mentions(type_ref: TypeRef, names: set[str]) -> bool:
    if type_ref.name in names:
        return True
    return any(_mentions(arg, names) for arg in type_ref.args)


class ModelBuilder:
    """Builds the batch ModelRegistry from scanned class records.

    Args:
        messager: Receives every error and warning diagnostic.
    """

    def __init__(self, messager: Messager) -> None:
        self._messager = messager
        self._universe: dict[str, ClassRecord] = {}
        self._mro_cache: dict[str, list[ClassRecord]] = {}

    def build(self, records: Sequence[ClassRecord]) -> ModelRegistry:
        """Build models for every mapped class in ``records``.

        Classes with errors are marked failed in the registry; all others
        are registered. Never raises for model errors.
        """
        self._universe = {}
        self._mro_cache = {}
        ordered: list[ClassRecord] = []
        for record in records:
            if record.qualified_name not in self._universe:
                self._universe[record.qualified_name] = record
                ordered.append(record)

        mapped = [r for r in ordered if r.is_mapped]
        results = {r.qualified_name: self._prepare(r) for r in mapped}
        warnings: list[Diagnostic] = []

        # Pass 1: optimistic, against the classes declared so far.
        known: dict[str, ClassRecord] = {}
        later = set(self._universe)
        optimistic = TypeResolver(known, warnings, later)
        for record in ordered:
            known[record.qualified_name] = record
            later.discard(record.qualified_name)
            if record.is_mapped:
                self._resolve_slots(results[record.qualified_name], optimistic, final=False)

        # Pass 2: parked members against the whole batch.
        complete = TypeResolver(self._universe, warnings)
        for record in mapped:
            self._resolve_slots(results[record.qualified_name], complete, final=True)

        for record in mapped:
            self._fold(results[record.qualified_name])

        for diagnostic in warnings:
            self._messager.report(diagnostic)

        registry = ModelRegistry()
        for record in mapped:
            self._commit(record.qualified_name, results, registry)
        self._warn_excluded_targets(registry)
        logger.debug(
            "Built %d models (%d failed)", len(registry), len(registry.failed_names)
        )
        return registry

    # ------------------------------------------------------------------
    # Inheritance
    # ------------------------------------------------------------------

    def _prepare(self, record: ClassRecord) -> _Result:
        """Lay out the member slots of every mapped level, root first."""
        result = _Result(record=record)
        mro = self._linearize(record)
        bindings = self._bindings(mro)

        for level in reversed(mro):
            if not level.is_mapped:
                continue
            env = dict(bindings.get(level.qualified_name, {}))
            unbound = {param for param in level.type_params if param not in env}
            env.update((param, ANY) for param in unbound)
            for member in level.members:
                slot = _Slot(level, member)
                if member.type is not None and env:
                    if level is record and _mentions(member.type, unbound):
                        # Unbound on the generic class itself: markers classify it,
                        # association targets fall back to basic.
                        slot.unbound = member
                    slot.member = replace(member, type=member.type.substitute(env))
                result.slots.append(slot)

        result.super_name = next(
            (c.qualified_name for c in mro[1:] if c.persistence_type in _SUPER_TYPES), None
        )
        result.descendants = tuple(sorted(
            other.qualified_name
            for other in self._universe.values()
            if other is not record
            and other.persistence_type is PersistenceType.ENTITY
            and record in self._linearize(other)[1:]
        ))
        return result

    def _linearize(self, record: ClassRecord) -> list[ClassRecord]:
        """C3 linearization over scanned classes, ``record`` first."""
        cached = self._mro_cache.get(record.qualified_name)
        if cached is not None:
            return cached
        try:
            mro = self._c3(record, set())
        except _InconsistentHierarchy:
            self._messager.report(Diagnostic(
                severity=Severity.WARNING,
                kind=DiagnosticKind.INCONSISTENT_HIERARCHY,
                message="no consistent method resolution order; using depth-first base order",
                class_name=record.qualified_name,
                line=record.line,
            ))
            mro = self._depth_first(record, [])
        self._mro_cache[record.qualified_name] = mro
        return mro

    def _scanned_bases(self, record: ClassRecord) -> list[ClassRecord]:
        return [
            self._universe[base.name]
            for base in record.bases
            if base.name in self._universe and base.name != record.qualified_name
        ]

    def _c3(self, record: ClassRecord, path: set[str]) -> list[ClassRecord]:
        if record.qualified_name in path:
            raise _InconsistentHierarchy(record.qualified_name)
        path = path | {record.qualified_name}
        bases = self._scanned_bases(record)
        sequences = [self._c3(base, path) for base in bases] + [list(bases)]
        result = [record]
        while True:
            sequences = [seq for seq in sequences if seq]
            if not sequences:
                return result
            for seq in sequences:
                head = seq[0]
                if not any(head in other[1:] for other in sequences):
                    break
            else:
                raise _InconsistentHierarchy(record.qualified_name)
            result.append(head)
            sequences = [seq[1:] if seq[0] is head else seq for seq in sequences]

    def _depth_first(self, record: ClassRecord, seen: list[ClassRecord]) -> list[ClassRecord]:
        if record in seen:
            return seen
        seen.append(record)
        for base in self._scanned_bases(record):
            self._depth_first(base, seen)
        return seen

    def _bindings(self, mro: list[ClassRecord]) -> dict[str, dict[str, TypeRef]]:
        """Type-variable bindings of every level, propagated down from the class."""
        env: dict[str, dict[str, TypeRef]] = {mro[0].qualified_name: {}}
        for cls in mro:
            own = env.get(cls.qualified_name, {})
            for base in cls.bases:
                target = self._universe.get(base.name)
                if target is None or target.qualified_name in env:
                    continue
                args = [arg.substitute(own) for arg in base.args]
                env[target.qualified_name] = dict(zip(target.type_params, args))
        return env

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _resolve_slots(self, result: _Result, resolver: TypeResolver, *, final: bool) -> None:
        for slot in result.slots:
            if slot.attribute is not None or slot.error is not None:
                continue
            if final and not slot.deferred:
                continue
            try:
                slot.attribute = resolver.resolve(slot.member, slot.level)
                slot.deferred = False
            except UnresolvedReferenceError as e:
                if slot.unbound is not None and e.target == ANY.name:
                    slot.attribute = _basic(slot.unbound, slot.level)
                    slot.deferred = False
                elif e.deferrable and not final:
                    slot.deferred = True
                else:
                    slot.error = e
            except ConflictingMarkersError as e:
                slot.error = e

    def _fold(self, result: _Result) -> None:
        """Flatten resolved slots into the ordered attribute tuple."""
        record = result.record
        for slot in result.slots:
            if slot.error is None:
                continue
            if slot.level is record:
                result.errors.append(slot.error)
            else:
                result.errors.append(_inherited(record, slot.error))

        ordered: dict[str, AttributeModel] = {}
        for slot in result.slots:
            attr = slot.attribute
            if attr is None:
                continue
            inherited = ordered.get(attr.name)
            if inherited is not None and inherited.kind is not attr.kind:
                error = NameCollisionError(
                    slot.level.qualified_name, attr.name, inherited.kind.value, attr.kind.value
                )
                result.errors.append(error if slot.level is record else _inherited(record, error))
                continue
            # Replacing keeps the position where the name was first introduced.
            ordered[attr.name] = attr
        result.attributes = tuple(ordered.values())

        if record.persistence_type is PersistenceType.ENTITY:
            ids = [a.name for a in result.attributes if a.kind is AttributeKind.IDENTIFIER]
            if len(ids) > 1:
                result.errors.append(AmbiguousIdentifierError(record.qualified_name, ids))
            elif not ids:
                result.errors.append(MissingIdentifierError(record.qualified_name))

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _commit(self, qualified_name: str, results: Mapping[str, _Result], registry: ModelRegistry) -> bool:
        """Register or fail one model; embedded element models are committed first.

        Returns False if the model failed. A class already on the current
        path is a placeholder and counts as resolvable.
        """
        if registry.has(qualified_name):
            return True
        if registry.is_failed(qualified_name):
            return False
        if not registry.reserve(qualified_name):
            return True

        result = results[qualified_name]
        record = result.record
        errors = list(result.errors)
        if not errors:
            for attr in result.attributes:
                if attr.target is None or attr.kind not in (AttributeKind.EMBEDDED, AttributeKind.COLLECTION):
                    continue
                if not self._commit(attr.target, results, registry):
                    errors.append(UnresolvedReferenceError(
                        record.qualified_name, attr.name, attr.target,
                        f"embeddable '{attr.target}' has errors",
                    ))

        if errors:
            for error in errors:
                self._messager.report(Diagnostic.from_error(error, _line_of(error, result)))
            registry.mark_failed(qualified_name)
            return False

        registry.register(EntityModel(
            qualified_name=record.qualified_name,
            simple_name=record.simple_name,
            module=record.module,
            persistence_type=record.persistence_type,  # type: ignore[arg-type]
            attributes=result.attributes,
            super_name=result.super_name,
            descendants=result.descendants,
            is_package=record.is_package,
        ))
        return True

    def _warn_excluded_targets(self, registry: ModelRegistry) -> None:
        for model in registry.entities():
            for attr in model.attributes:
                if attr.kind.is_plural or attr.kind is AttributeKind.TO_ONE:
                    if attr.target and registry.is_failed(attr.target):
                        self._messager.report(Diagnostic(
                            severity=Severity.WARNING,
                            kind=DiagnosticKind.UNRESOLVED_REFERENCE,
                            message=f"target '{attr.target}' is excluded from generation",
                            class_name=model.qualified_name,
                            member=attr.name,
                            line=attr.line,
                        ))


def _basic(member: MemberRecord, level: ClassRecord) -> AttributeModel:
    return AttributeModel(
        name=member.name,
        kind=AttributeKind.BASIC,
        type_name=str(member.type),
        declared_in=level.qualified_name,
        declared_type=member.type,
        line=member.line,
    )


def _inherited(record: ClassRecord, error: ModelBuildError) -> ModelBuildError:
    """Re-home an error found on an inherited member onto the subclass."""
    inherited = ModelBuildError(
        record.qualified_name,
        f"inherited from {error.class_name}: {error.detail}",
        error.member,
    )
    inherited.kind = error.kind
    return inherited


def _line_of(error: ModelBuildError, result: _Result) -> int | None:
    if error.member is None:
        return result.record.line
    for slot in result.slots:
        if slot.member.name == error.member and slot.level.qualified_name == error.class_name:
            return slot.member.line
    return None
