from __future__ import annotations

from waypoint.components.sitemap import SitemapPage
from waypoint.core.entities import SiteConfig
from waypoint.rules.models import Rules


class RulesPageSource:
    """Page source backed by the `sitemap.pages` rules section."""

    def __init__(self, pages: dict[str, list[str]]) -> None:
        self._pages = pages

    @classmethod
    def from_rules(cls, rules: Rules) -> RulesPageSource:
        return cls(rules.sitemap.pages)

    def list_pages(self, site: SiteConfig) -> list[SitemapPage]:
        return [SitemapPage(path=p) for p in self._pages.get(site.name, [])]
