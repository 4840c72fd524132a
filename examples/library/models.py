"""Entity classes used by the examples."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Annotated, Optional

from fluent_modelgen.markers import (
    Embedded,
    Id,
    ManyToMany,
    ManyToOne,
    OneToMany,
    Transient,
    Version,
    embeddable,
    entity,
    mapped_superclass,
)


@embeddable
class Address:
    street: str
    city: str
    postcode: str


@mapped_superclass
class Auditable:
    created: datetime.datetime
    revision: Annotated[int, Version]


@entity
class Author(Auditable):
    id: Annotated[int, Id]
    name: str
    address: Annotated[Address, Embedded]
    books: Annotated[list["Book"], OneToMany]


@entity
class Tag:
    id: Annotated[int, Id]
    label: str


@entity
class Publication(Auditable):
    id: Annotated[int, Id]
    title: str
    published: Optional[datetime.date]
    price: Decimal


@entity
class Book(Publication):
    isbn: str
    pages: int
    author: Annotated[Author, ManyToOne]
    tags: Annotated[set[Tag], ManyToMany]
    keywords: list[str]
    cover_url: Annotated[str, Transient]


@entity
class Magazine(Publication):
    issue: int
