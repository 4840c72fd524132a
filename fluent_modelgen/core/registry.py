"""Model registry - the batch-scoped lookup of resolved models.

Entries are keyed by qualified class name and written exactly once. A key
is reserved (placeholder) before its model is built so references to a
class still under construction resolve to the key instead of recursing.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from fluent_modelgen.core.exceptions import DuplicateModelError, ModelNotFoundError

if TYPE_CHECKING:
    from fluent_modelgen.model.entity import EntityModel


class ModelRegistry:
    """Write-once lookup of EntityModels for one generation batch.

    A registry is created per batch and never shared between batches.
    """

    def __init__(self) -> None:
        self._models: dict[str, EntityModel] = {}
        self._reserved: set[str] = set()
        self._failed: set[str] = set()

    def reserve(self, qualified_name: str) -> bool:
        """Reserve a placeholder for a model about to be built.

        Returns:
            False if the key is already reserved, built or failed.
        """
        if qualified_name in self._reserved or qualified_name in self._models:
            return False
        if qualified_name in self._failed:
            return False
        self._reserved.add(qualified_name)
        return True

    def is_pending(self, qualified_name: str) -> bool:
        """True while a reserved model has not been registered or failed."""
        return qualified_name in self._reserved

    def register(self, model: EntityModel) -> None:
        """Store a built model.

        Raises:
            DuplicateModelError: If the key already holds a model.
        """
        if model.qualified_name in self._models or model.qualified_name in self._failed:
            raise DuplicateModelError(model.qualified_name)
        self._reserved.discard(model.qualified_name)
        self._models[model.qualified_name] = model

    def mark_failed(self, qualified_name: str) -> None:
        """Record that a class could not be built in this batch."""
        if qualified_name in self._models:
            raise DuplicateModelError(qualified_name)
        self._reserved.discard(qualified_name)
        self._failed.add(qualified_name)

    def get(self, qualified_name: str) -> EntityModel:
        """Look up a built model.

        Raises:
            ModelNotFoundError: If no model was built for the name.
        """
        try:
            return self._models[qualified_name]
        except KeyError:
            raise ModelNotFoundError(qualified_name) from None

    def has(self, qualified_name: str) -> bool:
        return qualified_name in self._models

    def is_failed(self, qualified_name: str) -> bool:
        return qualified_name in self._failed

    def super_of(self, model: EntityModel) -> EntityModel | None:
        """Nearest mapped superclass model, if any."""
        if model.super_name is None or model.super_name not in self._models:
            return None
        return self._models[model.super_name]

    def entities(self) -> list[EntityModel]:
        """Built entity models, sorted by qualified name."""
        return [m for _, m in sorted(self._models.items()) if m.is_entity]

    @property
    def names(self) -> list[str]:
        """Qualified names of all built models, sorted alphabetically."""
        return sorted(self._models)

    @property
    def failed_names(self) -> list[str]:
        return sorted(self._failed)

    def __iter__(self) -> Iterator[EntityModel]:
        return iter(self._models[name] for name in self.names)

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, qualified_name: object) -> bool:
        return qualified_name in self._models
