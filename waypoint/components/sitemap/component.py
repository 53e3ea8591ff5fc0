"""
Sitemap component - cached sitemap.xml per site.
"""

from __future__ import annotations

from ._impl import SitemapRepository
from .models import GetSitemapInput, SitemapError, SitemapOutput


def run_get_sitemap(
    inp: GetSitemapInput,
    *,
    repository: SitemapRepository,
) -> SitemapOutput:
    """
    Get the sitemap.xml for a site.

    Returns:
        SitemapOutput with the XML document, or an ignored_site error when
        the site is on the ignore list.
    """
    if repository.is_on_ignore_list(inp.site):
        return SitemapOutput(
            xml=None,
            errors=[
                SitemapError(
                    code="ignored_site",
                    message=f"Site '{inp.site.name}' does not publish a sitemap",
                )
            ],
            success=False,
        )

    xml = repository.get_sitemap(inp.site, force_regenerate=inp.force_regenerate)
    return SitemapOutput(xml=xml)
