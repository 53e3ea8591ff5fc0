"""
Sitemap component - cached sitemap.xml documents per site.
"""

from ._impl import (
    SITEMAP_NS,
    SitemapConfig,
    SitemapRepository,
    UrlsetSitemapGenerator,
    create_sitemap_repository,
)
from .component import run_get_sitemap
from .models import GetSitemapInput, SitemapError, SitemapOutput, SitemapPage
from .ports import CachePort, PageSourcePort, SitemapGeneratorPort

__all__ = [
    # Entry points
    "run_get_sitemap",
    # Models
    "GetSitemapInput",
    "SitemapError",
    "SitemapOutput",
    "SitemapPage",
    # Ports
    "CachePort",
    "PageSourcePort",
    "SitemapGeneratorPort",
    # _impl re-exports
    "SITEMAP_NS",
    "SitemapConfig",
    "SitemapRepository",
    "UrlsetSitemapGenerator",
    "create_sitemap_repository",
]
