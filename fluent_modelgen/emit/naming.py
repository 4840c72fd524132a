"""Naming convention for generated accessor modules.

    library.models.Book        -> module library.book_model, class BookModel
    library.models.Address     -> class AddressEmbeddable (inline)
    Paperback (subclass)       -> method as_paperback()
"""

from __future__ import annotations

import re

MODEL_SUFFIX = "Model"
EMBEDDABLE_SUFFIX = "Embeddable"
MODULE_SUFFIX = "_model"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """``ISBNCode`` -> ``isbn_code``, ``BookV2`` -> ``book_v2``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def accessor_class_name(simple_name: str) -> str:
    return f"{simple_name}{MODEL_SUFFIX}"


def embeddable_class_name(simple_name: str, index: int = 0) -> str:
    """Inline embeddable accessor name; ``index`` > 0 disambiguates clashes."""
    suffix = str(index + 1) if index else ""
    return f"{simple_name}{EMBEDDABLE_SUFFIX}{suffix}"


def accessor_module(qualified_name: str, is_package: bool = False) -> str:
    """Generated module for the class ``qualified_name``.

    The module sits in the package of the entity's module, so
    ``library.models.Book`` maps to ``library.book_model``. A class declared
    in a package ``__init__`` has that package as its own, so
    ``library.Book`` maps to ``library.book_model`` too.
    """
    module, _, simple = qualified_name.rpartition(".")
    package = module if is_package else module.rpartition(".")[0]
    leaf = f"{snake_case(simple)}{MODULE_SUFFIX}"
    return f"{package}.{leaf}" if package else leaf


def narrowing_method_name(simple_name: str) -> str:
    return f"as_{snake_case(simple_name)}"
