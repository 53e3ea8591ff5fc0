"""
Link prober backed by httpx.

Any 2xx answer counts as success. Transport errors, timeouts and invalid
URLs are reported as failed statuses rather than raised.
"""

from __future__ import annotations

import logging

import httpx

from waypoint.components.redirects import ProbeStatus
from waypoint.rules.models import LinkProbeRules

logger = logging.getLogger(__name__)


class HttpxLinkProber:
    def __init__(
        self,
        timeout_seconds: float = 10.0,
        follow_redirects: bool = True,
        user_agent: str = "waypoint-link-probe/1.0",
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=follow_redirects,
            headers={"User-Agent": user_agent},
        )

    @classmethod
    def from_rules(cls, rules: LinkProbeRules) -> HttpxLinkProber:
        return cls(
            timeout_seconds=rules.timeout_seconds,
            follow_redirects=rules.follow_redirects,
            user_agent=rules.user_agent,
        )

    def check(self, url: str) -> ProbeStatus:
        try:
            response = self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Link probe for %s failed: %s", url, e)
            return ProbeStatus(url=url, successful=False, message=f"{type(e).__name__}: {e}")

        return ProbeStatus(
            url=url,
            successful=response.is_success,
            status_code=response.status_code,
            message=response.reason_phrase,
        )

    def close(self) -> None:
        self._client.close()
