from uuid import UUID

from pydantic import BaseModel, Field

from waypoint.components.redirects import DEFAULT_BUCKET_ID, DEFAULT_TEMPLATE_ID


class RedirectRules(BaseModel):
    bucket_id: UUID = DEFAULT_BUCKET_ID
    template_id: UUID = DEFAULT_TEMPLATE_ID
    # true: delete() recycles (recoverable); false: delete() removes permanently
    recycle_bin_enabled: bool = True

    def get_bucket_id(self) -> UUID:
        return self.bucket_id

    def get_template_id(self) -> UUID:
        return self.template_id

    def is_recycle_bin_enabled(self) -> bool:
        return self.recycle_bin_enabled


class SiteRules(BaseModel):
    name: str = Field(min_length=1)
    hostname: str | None = None
    scheme: str = "https"
    sitemap_cache_timeout_minutes: int | None = Field(default=None, ge=0)


class SitemapRules(BaseModel):
    cache_enabled: bool = True
    sites_to_ignore: list[str] = []
    default_cache_timeout_minutes: int = Field(default=30, ge=0)
    # Site name -> site-relative page paths
    pages: dict[str, list[str]] = {}


class LinkProbeRules(BaseModel):
    timeout_seconds: float = Field(default=10.0, gt=0)
    follow_redirects: bool = True
    user_agent: str = "waypoint-link-probe/1.0"


class Rules(BaseModel):
    redirects: RedirectRules = Field(default_factory=RedirectRules)
    sites: list[SiteRules] = []
    sitemap: SitemapRules = Field(default_factory=SitemapRules)
    link_probe: LinkProbeRules = Field(default_factory=LinkProbeRules)
