from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from waypoint.adapters.cache import TimedMemoryCache
from waypoint.adapters.clock import SystemClock
from waypoint.adapters.http_prober import HttpxLinkProber
from waypoint.adapters.page_source import RulesPageSource
from waypoint.adapters.site_directory import RulesSiteDirectory
from waypoint.adapters.sqlite.index import SQLiteSearchIndex
from waypoint.adapters.sqlite.migrator import SQLiteMigrator
from waypoint.adapters.sqlite.store import SQLiteItemStore
from waypoint.components.sitemap import (
    SitemapConfig,
    SitemapRepository,
    create_sitemap_repository,
)
from waypoint.rules.models import Rules

REDIRECT_BUCKET_NAME = "redirects"


@dataclass
class ServiceContext:
    store: SQLiteItemStore
    index: SQLiteSearchIndex
    site_directory: RulesSiteDirectory
    link_prober: HttpxLinkProber
    sitemaps: SitemapRepository
    rules: Rules

    @classmethod
    def create(
        cls,
        db_path: str,
        rules: Rules,
        link_prober: HttpxLinkProber | None = None,
    ) -> ServiceContext:
        SQLiteMigrator(db_path).run_migrations()

        store = SQLiteItemStore(db_path)
        index = SQLiteSearchIndex(db_path)
        site_directory = RulesSiteDirectory.from_rules(rules)
        prober = link_prober or HttpxLinkProber.from_rules(rules.link_probe)

        store.ensure_root(rules.redirects.bucket_id, REDIRECT_BUCKET_NAME)

        clock = SystemClock()
        sitemaps = create_sitemap_repository(
            page_source=RulesPageSource.from_rules(rules),
            cache=TimedMemoryCache(clock),
            clock=clock,
            config=SitemapConfig(
                cache_enabled=rules.sitemap.cache_enabled,
                sites_to_ignore=frozenset(rules.sitemap.sites_to_ignore),
                default_cache_timeout_minutes=rules.sitemap.default_cache_timeout_minutes,
            ),
        )

        return cls(
            store=store,
            index=index,
            site_directory=site_directory,
            link_prober=prober,
            sitemaps=sitemaps,
            rules=rules,
        )

    def sync_index(self) -> int:
        return self.index.sync(self.store)

    def redirect_ports(self) -> dict[str, Any]:
        """Keyword ports for the redirects component entry points."""
        return {
            "store": self.store,
            "index": self.index,
            "site_directory": self.site_directory,
            "link_prober": self.link_prober,
            "rules": self.rules.redirects,
        }
