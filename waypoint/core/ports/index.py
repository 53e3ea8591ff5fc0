"""
Search index interface and query filters.

The index is a secondary, eventually consistent copy of the store. A read
straight after a write may not see that write yet.

Filters are small value objects combined with AND semantics:

    index.query(
        InCollection(bucket_id),
        HasTemplate(template_id),
        FieldEquals("site_name", "website"),
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from waypoint.core.entities import IndexDocument


@dataclass(frozen=True)
class InCollection:
    """Document lives anywhere below the given item."""

    collection_id: UUID


@dataclass(frozen=True)
class HasTemplate:
    """Document was created from the given template."""

    template_id: UUID


@dataclass(frozen=True)
class FieldEquals:
    """Exact, case-sensitive field match."""

    name: str
    value: str


IndexFilter = InCollection | HasTemplate | FieldEquals


class IndexPort(Protocol):
    """Queryable search index."""

    def query(self, *filters: IndexFilter) -> list[IndexDocument]:
        """Return documents matching every filter. Order is unspecified."""
        ...
