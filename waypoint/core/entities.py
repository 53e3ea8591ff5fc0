"""
Shared entities for waypoint.

Item and IndexDocument are snapshots handed out by the store and the search
index. SiteConfig is the resolved form of a named site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

# Upper bound on stored item names, including any collision suffix
MAX_ITEM_NAME_LENGTH = 100


@dataclass(frozen=True)
class Item:
    """Content item as held by the store."""

    id: UUID
    parent_id: UUID | None
    name: str
    template_id: UUID | None
    fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexDocument:
    """
    Item snapshot as held by the search index.

    `paths` lists every ancestor id plus the item's own id, root first.
    """

    item_id: UUID
    template_id: UUID | None
    paths: tuple[UUID, ...]
    fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SiteConfig:
    """Named site definition."""

    name: str
    hostname: str | None = None
    scheme: str = "https"
    sitemap_cache_timeout_minutes: int | None = None

    @property
    def base_url(self) -> str | None:
        if not self.hostname:
            return None
        return f"{self.scheme}://{self.hostname}"
