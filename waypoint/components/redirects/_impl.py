"""
RedirectRegistry - site-scoped URL redirect storage, validation and lookup.

Redirect records live as items under a single bucket item in the store.
Reads that must reflect the latest write (get_by_id, delete, update) go to
the store; everything else (listing, uniqueness and chain checks, the
request-time lookup) goes through the search index, which may lag behind.

Key behaviors:
- Blank site name, old URL or new URL on write raises RedirectArgumentError
- Missing ids make delete/update no-ops and get_by_id return None
- A missing bucket makes insert return None (provisioning problem)
- Deletes honour the recycle-bin setting
- Lookups are exact, case-sensitive matches on old URL within a site
- Link probe failures are reported in ProbeStatus, never raised
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse
from uuid import UUID

from waypoint.core.entities import MAX_ITEM_NAME_LENGTH, IndexDocument, Item, SiteConfig
from waypoint.core.ports import (
    FieldEquals,
    HasTemplate,
    InCollection,
    IndexFilter,
    IndexPort,
    StorePort,
)

from .models import ProbeStatus, RedirectRecord, RedirectValidationError
from .ports import LinkProberPort, SiteDirectoryPort

logger = logging.getLogger(__name__)

# --- Configuration ---

DEFAULT_BUCKET_ID = UUID("b3f1f8a4-52d1-4c41-9d4b-6a2f0b6e7d10")
DEFAULT_TEMPLATE_ID = UUID("4d0e6c2a-1f7b-4a8e-8c55-2e9b7d3f6a21")


@dataclass(frozen=True)
class RedirectConfig:
    """Redirect configuration from rules."""

    bucket_id: UUID = DEFAULT_BUCKET_ID
    template_id: UUID = DEFAULT_TEMPLATE_ID

    # Soft delete (recoverable) when enabled, hard delete otherwise
    recycle_bin_enabled: bool = True


DEFAULT_CONFIG = RedirectConfig()

# --- Field names ---

SITE_NAME_FIELD = "site_name"
OLD_URL_FIELD = "old_url"
NEW_URL_FIELD = "new_url"
IS_PERMANENT_FIELD = "is_permanent"

HOSTNAME_PATTERN = re.compile(r"^([a-zA-Z]+://)?([^/]+)/.*?$")
_NON_WORD = re.compile(r"\W")


# --- Errors ---


class RedirectArgumentError(ValueError):
    """A required redirect field is blank."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required")
        self.field = field


# --- Functional core ---


def require_value(value: str | None, field: str) -> str:
    """Return value, or raise if it is missing or whitespace."""
    if value is None or not value.strip():
        raise RedirectArgumentError(field)
    return value


def derive_item_name(site_name: str, old_url: str) -> str:
    """Storage-safe item name: non-word characters become '-', max 100 chars."""
    return _NON_WORD.sub("-", site_name + old_url)[:MAX_ITEM_NAME_LENGTH]


def old_url_contains_hostname(old_url: str) -> bool:
    """Check if the value looks like an absolute URL rather than a path."""
    return HOSTNAME_PATTERN.match(old_url or "") is not None


def record_to_fields(
    site_name: str, old_url: str, new_url: str, is_permanent: bool
) -> dict[str, str]:
    return {
        SITE_NAME_FIELD: site_name,
        OLD_URL_FIELD: old_url,
        NEW_URL_FIELD: new_url,
        IS_PERMANENT_FIELD: "1" if is_permanent else "0",
    }


def fields_to_record(item_id: UUID, fields: dict[str, str]) -> RedirectRecord:
    return RedirectRecord(
        id=item_id,
        site_name=fields.get(SITE_NAME_FIELD, ""),
        old_url=fields.get(OLD_URL_FIELD, ""),
        new_url=fields.get(NEW_URL_FIELD, ""),
        is_permanent=fields.get(IS_PERMANENT_FIELD, "0") == "1",
    )


# --- Registry ---


class RedirectRegistry:
    """
    Redirect registry.

    Stateless facade over the store, the search index, the site directory
    and the link prober.
    """

    def __init__(
        self,
        store: StorePort,
        index: IndexPort,
        site_directory: SiteDirectoryPort,
        link_prober: LinkProberPort | None = None,
        config: RedirectConfig | None = None,
    ) -> None:
        """Initialize registry."""
        self._store = store
        self._index = index
        self._site_directory = site_directory
        self._link_prober = link_prober
        self._config = config or DEFAULT_CONFIG

    @property
    def config(self) -> RedirectConfig:
        return self._config

    # --- Queries ---

    def _redirect_filters(self, *extra: IndexFilter) -> tuple[IndexFilter, ...]:
        return (
            InCollection(self._config.bucket_id),
            HasTemplate(self._config.template_id),
            *extra,
        )

    def _query(self, *extra: IndexFilter) -> list[RedirectRecord]:
        documents = self._index.query(*self._redirect_filters(*extra))
        return [self._from_document(doc) for doc in documents]

    @staticmethod
    def _from_document(document: IndexDocument) -> RedirectRecord:
        return fields_to_record(document.item_id, document.fields)

    def _get_redirect_item(self, redirect_id: UUID | None) -> Item | None:
        if redirect_id is None:
            return None
        item = self._store.get(redirect_id)
        if item is None or item.template_id != self._config.template_id:
            return None
        return item

    def get_all(self) -> list[RedirectRecord]:
        """Get all redirects known to the index."""
        return self._query()

    def get_by_id(self, redirect_id: UUID | None) -> RedirectRecord | None:
        """Get redirect by ID straight from the store."""
        item = self._get_redirect_item(redirect_id)
        if item is None:
            return None
        return fields_to_record(item.id, item.fields)

    # --- Commands ---

    def delete(self, redirect_id: UUID | None) -> None:
        """Delete a redirect; recycled when the recycle bin is enabled."""
        item = self._get_redirect_item(redirect_id)
        if item is None:
            return

        if self._config.recycle_bin_enabled:
            self._store.soft_delete(item.id)
            logger.info("Recycled redirect %s (%s)", item.id, item.name)
        else:
            self._store.hard_delete(item.id)
            logger.info("Deleted redirect %s (%s)", item.id, item.name)

    def delete_all(self) -> None:
        """Delete every redirect under the bucket."""
        if self._store.get(self._config.bucket_id) is None:
            return
        self._store.delete_children(self._config.bucket_id)
        logger.info("Deleted all redirects under %s", self._config.bucket_id)

    def insert(self, record: RedirectRecord) -> UUID | None:
        """Insert a new redirect from a record."""
        return self.insert_fields(
            record.site_name, record.old_url, record.new_url, record.is_permanent
        )

    def insert_fields(
        self,
        site_name: str,
        old_url: str,
        new_url: str,
        is_permanent: bool,
    ) -> UUID | None:
        """
        Insert a new redirect.

        Returns:
            The new redirect ID, or None if the redirect bucket is missing.

        Raises:
            RedirectArgumentError: if a required field is blank.
        """
        require_value(site_name, SITE_NAME_FIELD)
        require_value(old_url, OLD_URL_FIELD)
        require_value(new_url, NEW_URL_FIELD)

        if self._store.get(self._config.bucket_id) is None:
            logger.warning(
                "Redirect bucket %s not found; redirect for %s%s not created",
                self._config.bucket_id,
                site_name,
                old_url,
            )
            return None

        return self._store.create(
            self._config.bucket_id,
            derive_item_name(site_name, old_url),
            self._config.template_id,
            record_to_fields(site_name, old_url, new_url, is_permanent),
        )

    def update_record(self, changes: RedirectRecord) -> None:
        """Update an existing redirect from a record."""
        self.update(
            changes.id,
            changes.site_name,
            changes.old_url,
            changes.new_url,
            changes.is_permanent,
        )

    def update(
        self,
        redirect_id: UUID | None,
        site_name: str,
        old_url: str,
        new_url: str,
        is_permanent: bool,
    ) -> None:
        """
        Replace all four fields of an existing redirect in one edit.

        Raises:
            RedirectArgumentError: if a required field is blank.
        """
        require_value(old_url, OLD_URL_FIELD)
        require_value(new_url, NEW_URL_FIELD)
        require_value(site_name, SITE_NAME_FIELD)

        item = self._get_redirect_item(redirect_id)
        if item is None:
            return

        self._store.update(
            item.id, record_to_fields(site_name, old_url, new_url, is_permanent)
        )

    # --- Candidate validation ---

    def candidate_has_valid_site_name(self, candidate: RedirectRecord) -> bool:
        """Check if the site name names a known site."""
        if not candidate.site_name:
            return False
        return self._site_directory.resolve(candidate.site_name) is not None

    def candidate_old_url_contains_hostname(self, candidate: RedirectRecord) -> bool:
        """Check if the old URL is an absolute URL instead of a path."""
        return old_url_contains_hostname(candidate.old_url)

    def candidate_is_unique(self, candidate: RedirectRecord) -> bool:
        """Check that no other redirect in the site uses the same old URL."""
        matches = self._query(
            FieldEquals(SITE_NAME_FIELD, candidate.site_name),
            FieldEquals(OLD_URL_FIELD, candidate.old_url),
        )
        if candidate.id is None:
            return not matches
        return not any(r.id != candidate.id for r in matches)

    def candidate_target_is_redirect(self, candidate: RedirectRecord) -> bool:
        """Check if the new URL is the old URL of another redirect in the site."""
        matches = self._query(
            FieldEquals(SITE_NAME_FIELD, candidate.site_name),
            FieldEquals(OLD_URL_FIELD, candidate.new_url),
        )
        return any(candidate.id is None or r.id != candidate.id for r in matches)

    def _target_url(self, candidate: RedirectRecord) -> str:
        if urlparse(candidate.new_url).scheme:
            return candidate.new_url
        site = self._site_directory.resolve(candidate.site_name) if candidate.site_name else None
        base_url = site.base_url if site else None
        if base_url is None:
            return candidate.new_url
        return urljoin(base_url + "/", candidate.new_url)

    def candidate_target_returns_http_success_response(
        self, candidate: RedirectRecord
    ) -> tuple[bool, ProbeStatus]:
        """
        Request the new URL and report whether it answered successfully.

        Relative targets are resolved against the candidate site's base URL.
        """
        url = self._target_url(candidate)

        if self._link_prober is None:
            status = ProbeStatus(url=url, successful=False, message="No link prober configured")
            return status.successful, status

        try:
            status = self._link_prober.check(url)
        except Exception as e:
            logger.exception("Link probe for %s raised", url)
            status = ProbeStatus(url=url, successful=False, message=str(e))

        if not status.successful:
            logger.info("Redirect target %s failed probe: %s", url, status.message)

        return status.successful, status

    def validate_candidate(
        self,
        candidate: RedirectRecord,
        check_target: bool = False,
    ) -> tuple[list[RedirectValidationError], ProbeStatus | None]:
        """
        Run every candidate check.

        Returns:
            Tuple of (errors, probe status). The probe status is None unless
            check_target is set. Warnings are flagged with warning=True.
        """
        errors: list[RedirectValidationError] = []

        if not self.candidate_has_valid_site_name(candidate):
            errors.append(
                RedirectValidationError(
                    code="invalid_site_name",
                    message=f"'{candidate.site_name}' is not a known site",
                    field=SITE_NAME_FIELD,
                )
            )

        if self.candidate_old_url_contains_hostname(candidate):
            errors.append(
                RedirectValidationError(
                    code="old_url_contains_hostname",
                    message="Old URL should be a path, not a full URL",
                    field=OLD_URL_FIELD,
                    warning=True,
                )
            )

        if not self.candidate_is_unique(candidate):
            errors.append(
                RedirectValidationError(
                    code="not_unique",
                    message=(
                        f"A redirect for '{candidate.old_url}' already exists "
                        f"in site '{candidate.site_name}'"
                    ),
                    field=OLD_URL_FIELD,
                )
            )

        if self.candidate_target_is_redirect(candidate):
            errors.append(
                RedirectValidationError(
                    code="target_is_redirect",
                    message=f"'{candidate.new_url}' is itself redirected",
                    field=NEW_URL_FIELD,
                )
            )

        probe: ProbeStatus | None = None
        if check_target:
            ok, probe = self.candidate_target_returns_http_success_response(candidate)
            if not ok:
                errors.append(
                    RedirectValidationError(
                        code="target_unreachable",
                        message=f"'{probe.url}' did not respond successfully: {probe.message}",
                        field=NEW_URL_FIELD,
                    )
                )

        return errors, probe

    # --- Request-time lookup ---

    def get_new_url(self, site: SiteConfig | None, request_url: str) -> RedirectRecord | None:
        """
        Get the redirect whose old URL is exactly the request URL.

        Raises:
            ValueError: if site is None or request_url is empty.
        """
        if site is None:
            raise ValueError("site is required")
        if not request_url:
            raise ValueError("request_url is required")

        matches = self._query(
            FieldEquals(SITE_NAME_FIELD, site.name),
            FieldEquals(OLD_URL_FIELD, request_url),
        )
        return matches[0] if matches else None


# --- Factory ---


def create_redirect_registry(
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    config: RedirectConfig | None = None,
) -> RedirectRegistry:
    """Create a RedirectRegistry."""
    return RedirectRegistry(
        store=store,
        index=index,
        site_directory=site_directory,
        link_prober=link_prober,
        config=config,
    )
