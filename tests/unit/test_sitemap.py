"""
Tests for the sitemap component.

Covers urlset rendering, per-site caching with expiry, forced regeneration
and the ignore list.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from xml.etree import ElementTree

import pytest

from waypoint.adapters.cache import TimedMemoryCache
from waypoint.components.sitemap import (
    SITEMAP_NS,
    GetSitemapInput,
    SitemapConfig,
    SitemapPage,
    SitemapRepository,
    UrlsetSitemapGenerator,
    create_sitemap_repository,
    run_get_sitemap,
)
from waypoint.core.entities import SiteConfig

# --- Mock Ports ---


class MockClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class MockPageSource:
    def __init__(self, pages: dict[str, list[SitemapPage]]) -> None:
        self.pages = pages

    def list_pages(self, site: SiteConfig) -> list[SitemapPage]:
        return self.pages.get(site.name, [])


class CountingGenerator:
    """Generator that returns a new document on every call."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def generate(self, site: SiteConfig) -> str:
        self.calls.append(site.name)
        return f"<urlset site='{site.name}' n='{len(self.calls)}'/>"


WEBSITE = SiteConfig(name="website", hostname="www.example.com")
SHOP = SiteConfig(name="shop", hostname="shop.example.com", sitemap_cache_timeout_minutes=5)


# --- Fixtures ---


@pytest.fixture
def clock() -> MockClock:
    return MockClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def cache(clock: MockClock) -> TimedMemoryCache:
    return TimedMemoryCache(clock)


@pytest.fixture
def generator() -> CountingGenerator:
    return CountingGenerator()


@pytest.fixture
def repository(
    generator: CountingGenerator, cache: TimedMemoryCache, clock: MockClock
) -> SitemapRepository:
    return SitemapRepository(
        generator=generator,
        cache=cache,
        clock=clock,
        config=SitemapConfig(sites_to_ignore=frozenset({"shell"})),
    )


# --- Generator ---


class TestUrlsetSitemapGenerator:
    """Test sitemap document rendering."""

    def test_renders_locations_against_site_base_url(self) -> None:
        source = MockPageSource({"website": [SitemapPage("/"), SitemapPage("about")]})

        xml = UrlsetSitemapGenerator(source).generate(WEBSITE)

        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
        root = ElementTree.fromstring(xml.split("\n", 1)[1])
        locs = [el.text for el in root.iter(f"{{{SITEMAP_NS}}}loc")]
        assert locs == ["https://www.example.com/", "https://www.example.com/about"]

    def test_optional_elements(self) -> None:
        page = SitemapPage(
            "/news",
            lastmod=datetime(2026, 3, 4, 10, 30, tzinfo=UTC),
            changefreq="daily",
            priority=0.8,
        )
        source = MockPageSource({"website": [page]})

        xml = UrlsetSitemapGenerator(source).generate(WEBSITE)

        assert "<lastmod>2026-03-04</lastmod>" in xml
        assert "<changefreq>daily</changefreq>" in xml
        assert "<priority>0.8</priority>" in xml

    def test_optional_elements_omitted(self) -> None:
        source = MockPageSource({"website": [SitemapPage("/")]})

        xml = UrlsetSitemapGenerator(source).generate(WEBSITE)

        assert "lastmod" not in xml
        assert "changefreq" not in xml
        assert "priority" not in xml

    def test_site_without_pages(self) -> None:
        xml = UrlsetSitemapGenerator(MockPageSource({})).generate(WEBSITE)

        root = ElementTree.fromstring(xml.split("\n", 1)[1])
        assert root.tag == f"{{{SITEMAP_NS}}}urlset"
        assert list(root) == []


# --- Repository ---


class TestSitemapRepositoryCaching:
    """Test cached document reuse."""

    def test_second_call_is_served_from_cache(
        self, repository: SitemapRepository, generator: CountingGenerator
    ) -> None:
        first = repository.get_sitemap(WEBSITE)
        second = repository.get_sitemap(WEBSITE)

        assert first == second
        assert generator.calls == ["website"]

    def test_force_regenerate_bypasses_cache(
        self, repository: SitemapRepository, generator: CountingGenerator
    ) -> None:
        first = repository.get_sitemap(WEBSITE)
        forced = repository.get_sitemap(WEBSITE, force_regenerate=True)
        after = repository.get_sitemap(WEBSITE)

        assert forced != first
        assert after == forced
        assert len(generator.calls) == 2

    def test_entries_expire_after_default_timeout(
        self, repository: SitemapRepository, generator: CountingGenerator, clock: MockClock
    ) -> None:
        repository.get_sitemap(WEBSITE)

        clock.advance(minutes=29)
        repository.get_sitemap(WEBSITE)
        assert len(generator.calls) == 1

        clock.advance(minutes=1)
        repository.get_sitemap(WEBSITE)
        assert len(generator.calls) == 2

    def test_site_timeout_overrides_default(
        self, repository: SitemapRepository, generator: CountingGenerator, clock: MockClock
    ) -> None:
        repository.get_sitemap(SHOP)

        clock.advance(minutes=5)
        repository.get_sitemap(SHOP)

        assert generator.calls == ["shop", "shop"]

    def test_sites_are_cached_separately(
        self, repository: SitemapRepository, generator: CountingGenerator
    ) -> None:
        website = repository.get_sitemap(WEBSITE)
        shop = repository.get_sitemap(SHOP)

        assert website != shop
        assert repository.cache_key(WEBSITE) != repository.cache_key(SHOP)
        assert generator.calls == ["website", "shop"]

    def test_cache_disabled_always_generates(
        self, generator: CountingGenerator, cache: TimedMemoryCache, clock: MockClock
    ) -> None:
        repository = SitemapRepository(
            generator=generator, cache=cache, clock=clock, config=SitemapConfig(cache_enabled=False)
        )

        repository.get_sitemap(WEBSITE)
        repository.get_sitemap(WEBSITE)

        assert len(generator.calls) == 2
        assert len(cache) == 0

    def test_cache_key_includes_site_name(self, repository: SitemapRepository) -> None:
        key = repository.cache_key(WEBSITE)

        assert key.endswith("SitemapRepositorywebsite")

    def test_cache_timeout(self, repository: SitemapRepository) -> None:
        assert repository.cache_timeout(WEBSITE) == timedelta(minutes=30)
        assert repository.cache_timeout(SHOP) == timedelta(minutes=5)


class TestIgnoreList:
    def test_ignored_site(self, repository: SitemapRepository) -> None:
        assert repository.is_on_ignore_list(SiteConfig(name="shell")) is True

    def test_regular_site(self, repository: SitemapRepository) -> None:
        assert repository.is_on_ignore_list(WEBSITE) is False


# --- Component ---


class TestRunGetSitemap:
    def test_returns_document(self, cache: TimedMemoryCache, clock: MockClock) -> None:
        repository = create_sitemap_repository(
            page_source=MockPageSource({"website": [SitemapPage("/")]}),
            cache=cache,
            clock=clock,
        )

        out = run_get_sitemap(GetSitemapInput(site=WEBSITE), repository=repository)

        assert out.success is True
        assert out.errors == []
        assert "<loc>https://www.example.com/</loc>" in out.xml

    def test_ignored_site_is_an_error(
        self, repository: SitemapRepository, generator: CountingGenerator
    ) -> None:
        out = run_get_sitemap(GetSitemapInput(site=SiteConfig(name="shell")), repository=repository)

        assert out.success is False
        assert out.xml is None
        assert out.errors[0].code == "ignored_site"
        assert generator.calls == []

    def test_force_regenerate_is_passed_through(
        self, repository: SitemapRepository, generator: CountingGenerator
    ) -> None:
        run_get_sitemap(GetSitemapInput(site=WEBSITE), repository=repository)
        run_get_sitemap(GetSitemapInput(site=WEBSITE, force_regenerate=True), repository=repository)

        assert len(generator.calls) == 2


# --- Cache adapter ---


class TestTimedMemoryCache:
    def test_get_missing(self, cache: TimedMemoryCache) -> None:
        assert cache.get("nope") is None

    def test_add_then_get(self, cache: TimedMemoryCache, clock: MockClock) -> None:
        cache.add("k", "v", clock.now + timedelta(minutes=1))

        assert cache.get("k") == "v"

    def test_expired_entry_is_dropped(self, cache: TimedMemoryCache, clock: MockClock) -> None:
        cache.add("k", "v", clock.now + timedelta(minutes=1))

        clock.advance(minutes=1)

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_add_replaces(self, cache: TimedMemoryCache, clock: MockClock) -> None:
        cache.add("k", "old", clock.now + timedelta(minutes=1))
        cache.add("k", "new", clock.now + timedelta(minutes=1))

        assert cache.get("k") == "new"

    def test_remove_and_clear(self, cache: TimedMemoryCache, clock: MockClock) -> None:
        cache.add("a", "1", clock.now + timedelta(minutes=1))
        cache.add("b", "2", clock.now + timedelta(minutes=1))

        cache.remove("a")
        cache.remove("missing")
        assert cache.get("a") is None
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0
