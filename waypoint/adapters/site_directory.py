from __future__ import annotations

from collections.abc import Iterable

from waypoint.core.entities import SiteConfig
from waypoint.rules.models import Rules, SiteRules


class RulesSiteDirectory:
    """Site directory built from the `sites:` rules section. Names are exact keys."""

    def __init__(self, sites: Iterable[SiteRules]) -> None:
        self._sites = {
            s.name: SiteConfig(
                name=s.name,
                hostname=s.hostname,
                scheme=s.scheme,
                sitemap_cache_timeout_minutes=s.sitemap_cache_timeout_minutes,
            )
            for s in sites
        }

    @classmethod
    def from_rules(cls, rules: Rules) -> RulesSiteDirectory:
        return cls(rules.sites)

    def resolve(self, site_name: str) -> SiteConfig | None:
        return self._sites.get(site_name)
