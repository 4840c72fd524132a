"""Processor options.

ProcessorOptions is a Pydantic model for the small, closed set of options a
generation batch accepts: ``skip`` and ``debug``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from fluent_modelgen.core.exceptions import OptionsError

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ProcessorOptions(BaseModel):
    """Options recognized by ModelProcessor."""

    skip: list[str] = []
    debug: bool = False

    @field_validator("skip", mode="before")
    @classmethod
    def _split_skip(cls, value: Any) -> Any:
        # "a.B, C" -> ["a.B", "C"]
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("debug", mode="before")
    @classmethod
    def _parse_debug(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
        return value

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> tuple[ProcessorOptions, list[str]]:
        """Build options from processor-style key/value strings.

        Args:
            raw: Option mapping, e.g. ``{"skip": "a.Book,Tag", "debug": "true"}``.

        Returns:
            The parsed options and the sorted list of unrecognized keys.

        Raises:
            OptionsError: If a recognized option has an invalid value.
        """
        known = {k: v for k, v in raw.items() if k in cls.model_fields}
        unknown = sorted(k for k in raw if k not in cls.model_fields)
        try:
            return cls.model_validate(known), unknown
        except ValidationError as e:
            raise OptionsError(f"Invalid processor options: {e}") from e

    def is_skipped(self, qualified_name: str, simple_name: str) -> bool:
        """Return True if the class is listed in ``skip`` by qualified or simple name."""
        return qualified_name in self.skip or simple_name in self.skip
