"""
SitemapRepository - cached sitemap.xml documents per site.

Key behaviors:
- Cached documents are reused until they expire or regeneration is forced
- Cache lifetime is the site's own timeout, else the configured default
- Sites on the ignore list should never be crawled
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from xml.etree.ElementTree import Element, SubElement, tostring

from waypoint.core.entities import SiteConfig

from .ports import CachePort, ClockPort, PageSourcePort, SitemapGeneratorPort

logger = logging.getLogger(__name__)

# XML namespace for sitemaps
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


# --- Configuration ---


@dataclass(frozen=True)
class SitemapConfig:
    """Sitemap configuration from rules."""

    cache_enabled: bool = True
    sites_to_ignore: frozenset[str] = field(default_factory=frozenset)
    default_cache_timeout_minutes: int = 30


DEFAULT_CONFIG = SitemapConfig()


# --- Generation ---


class UrlsetSitemapGenerator:
    """Renders a sitemaps.org <urlset> from the pages a source lists."""

    def __init__(self, page_source: PageSourcePort) -> None:
        self._page_source = page_source

    def generate(self, site: SiteConfig) -> str:
        base = (site.base_url or "").rstrip("/")

        urlset = Element("urlset")
        urlset.set("xmlns", SITEMAP_NS)

        for page in self._page_source.list_pages(site):
            url_el = SubElement(urlset, "url")

            path = page.path if page.path.startswith("/") else "/" + page.path
            SubElement(url_el, "loc").text = base + path

            if page.lastmod is not None:
                SubElement(url_el, "lastmod").text = page.lastmod.strftime("%Y-%m-%d")
            if page.changefreq:
                SubElement(url_el, "changefreq").text = page.changefreq
            if page.priority is not None:
                SubElement(url_el, "priority").text = f"{page.priority:.1f}"

        xml = tostring(urlset, encoding="unicode", xml_declaration=False)
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"


# --- Repository ---


class SitemapRepository:
    """Serves sitemap.xml documents, from cache where possible."""

    def __init__(
        self,
        generator: SitemapGeneratorPort,
        cache: CachePort,
        clock: ClockPort,
        config: SitemapConfig | None = None,
    ) -> None:
        self._generator = generator
        self._cache = cache
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

    def is_on_ignore_list(self, site: SiteConfig) -> bool:
        """Check if the site is configured to never get a sitemap."""
        return site.name in self._config.sites_to_ignore

    def cache_key(self, site: SiteConfig) -> str:
        return f"{type(self).__module__}.{type(self).__qualname__}{site.name}"

    def cache_timeout(self, site: SiteConfig) -> timedelta:
        minutes = site.sitemap_cache_timeout_minutes
        if minutes is None:
            minutes = self._config.default_cache_timeout_minutes
        return timedelta(minutes=minutes)

    def get_sitemap(self, site: SiteConfig, force_regenerate: bool = False) -> str:
        """
        Get the sitemap.xml document for a site.

        Args:
            site: The site to describe.
            force_regenerate: Skip the cache and build a fresh document.

        Returns:
            Complete XML document.
        """
        key = self.cache_key(site)

        document: str | None = None
        if self._config.cache_enabled and not force_regenerate:
            document = self._cache.get(key)
            if document is not None:
                logger.debug("Sitemap cache hit for %s", site.name)
                return document

        logger.info("Generating sitemap for %s", site.name)
        document = self._generator.generate(site)

        if self._config.cache_enabled:
            self._cache.add(key, document, self._clock.now_utc() + self.cache_timeout(site))

        return document


# --- Factory ---


def create_sitemap_repository(
    page_source: PageSourcePort,
    cache: CachePort,
    clock: ClockPort,
    config: SitemapConfig | None = None,
) -> SitemapRepository:
    """Create a SitemapRepository that renders pages from a page source."""
    return SitemapRepository(
        generator=UrlsetSitemapGenerator(page_source),
        cache=cache,
        clock=clock,
        config=config,
    )
