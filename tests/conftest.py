from pathlib import Path

import httpx
import pytest

from waypoint.adapters.http_prober import HttpxLinkProber
from waypoint.app_shell.context import ServiceContext
from waypoint.rules.loader import load_rules

RULES_YAML = """\
redirects:
  recycle_bin_enabled: true

sites:
  - name: website
    hostname: www.example.com
    sitemap_cache_timeout_minutes: 60
  - name: shop
    hostname: shop.example.com
    scheme: http
  - name: shell

sitemap:
  cache_enabled: true
  sites_to_ignore: [shell]
  default_cache_timeout_minutes: 30
  pages:
    website: [/, /about, /contact]
    shop: [/]
"""


def _answer(request: httpx.Request) -> httpx.Response:
    if request.url.path.startswith("/missing"):
        return httpx.Response(404)
    return httpx.Response(200)


@pytest.fixture
def rules_path(tmp_path) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(RULES_YAML)
    return path


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "waypoint.db")


@pytest.fixture
def offline_prober() -> HttpxLinkProber:
    """Prober answering 404 for /missing* and 200 otherwise, without network."""
    return HttpxLinkProber(client=httpx.Client(transport=httpx.MockTransport(_answer)))


@pytest.fixture
def test_ctx(db_path, rules_path, offline_prober):
    """
    Creates a full ServiceContext backed by a temporary SQLite DB.
    """
    rules = load_rules(rules_path)
    ctx = ServiceContext.create(db_path=db_path, rules=rules, link_prober=offline_prober)
    yield ctx
    offline_prober.close()
