"""
Sitemap component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from waypoint.core.entities import SiteConfig
from waypoint.core.ports import ClockPort

from .models import SitemapPage


class CachePort(Protocol):
    """Time-based cache."""

    def get(self, key: str) -> str | None:
        """Get a live entry, or None if missing or expired."""
        ...

    def add(self, key: str, value: str, expires_at: datetime) -> None:
        """Store an entry until the given UTC time."""
        ...


class SitemapGeneratorPort(Protocol):
    """Builds a sitemap.xml document for a site."""

    def generate(self, site: SiteConfig) -> str:
        """Return the complete XML document."""
        ...


class PageSourcePort(Protocol):
    """Lists the crawlable pages of a site."""

    def list_pages(self, site: SiteConfig) -> list[SitemapPage]:
        """Return pages with site-relative paths."""
        ...


__all__ = [
    "CachePort",
    "ClockPort",
    "PageSourcePort",
    "SitemapGeneratorPort",
]
