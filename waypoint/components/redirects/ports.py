"""
Redirects component port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from waypoint.core.entities import SiteConfig
from waypoint.core.ports import IndexPort, StorePort

from .models import ProbeStatus


class SiteDirectoryPort(Protocol):
    """Resolves site names to site definitions."""

    def resolve(self, site_name: str) -> SiteConfig | None:
        """Get site by name, or None if unknown."""
        ...


class LinkProberPort(Protocol):
    """Outbound HTTP link check."""

    def check(self, url: str) -> ProbeStatus:
        """Request the URL and report the outcome. Must not raise."""
        ...


class RulesPort(Protocol):
    """Port for redirect rules configuration."""

    def get_bucket_id(self) -> UUID:
        """Get ID of the item that holds all redirects."""
        ...

    def get_template_id(self) -> UUID:
        """Get ID of the redirect item template."""
        ...

    def is_recycle_bin_enabled(self) -> bool:
        """Check if deletes go to the recycle bin."""
        ...


__all__ = [
    "IndexPort",
    "LinkProberPort",
    "RulesPort",
    "SiteDirectoryPort",
    "StorePort",
]
