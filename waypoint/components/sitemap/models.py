"""
Sitemap component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from waypoint.core.entities import SiteConfig


@dataclass(frozen=True)
class SitemapError:
    """Sitemap request error."""

    code: str
    message: str


@dataclass(frozen=True)
class SitemapPage:
    """One crawlable page of a site."""

    path: str
    lastmod: datetime | None = None
    changefreq: str | None = None
    priority: float | None = None


# --- Input Models ---


@dataclass(frozen=True)
class GetSitemapInput:
    """Input for fetching a site's sitemap.xml."""

    site: SiteConfig
    force_regenerate: bool = False


# --- Output Models ---


@dataclass(frozen=True)
class SitemapOutput:
    """Output containing a sitemap document."""

    xml: str | None
    errors: list[SitemapError] = field(default_factory=list)
    success: bool = True
