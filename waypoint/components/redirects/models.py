"""
Redirects component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from waypoint.core.entities import SiteConfig

# --- Validation Error ---


@dataclass(frozen=True)
class RedirectValidationError:
    """Redirect validation error."""

    code: str
    message: str
    field: str | None = None
    warning: bool = False


# --- Redirect Model ---


@dataclass(frozen=True)
class RedirectRecord:
    """Site-scoped URL redirect mapping."""

    site_name: str
    old_url: str
    new_url: str
    is_permanent: bool = True
    id: UUID | None = None


@dataclass(frozen=True)
class ProbeStatus:
    """Outcome of an outbound link check."""

    url: str
    successful: bool
    status_code: int | None = None
    message: str = ""


# --- Input Models ---


@dataclass(frozen=True)
class CreateRedirectInput:
    """Input for creating a new redirect."""

    site_name: str
    old_url: str
    new_url: str
    is_permanent: bool = True


@dataclass(frozen=True)
class UpdateRedirectInput:
    """Input for replacing an existing redirect's fields."""

    redirect_id: UUID
    site_name: str
    old_url: str
    new_url: str
    is_permanent: bool = True


@dataclass(frozen=True)
class DeleteRedirectInput:
    """Input for deleting a redirect."""

    redirect_id: UUID


@dataclass(frozen=True)
class DeleteAllRedirectsInput:
    """Input for clearing every redirect."""

    pass


@dataclass(frozen=True)
class GetRedirectInput:
    """Input for getting a redirect."""

    redirect_id: UUID


@dataclass(frozen=True)
class ListRedirectsInput:
    """Input for listing all redirects."""

    pass


@dataclass(frozen=True)
class ValidateRedirectInput:
    """Input for checking a candidate before it is saved."""

    candidate: RedirectRecord
    check_target: bool = False


@dataclass(frozen=True)
class ResolveRedirectInput:
    """Input for resolving an inbound request URL."""

    site: SiteConfig
    request_url: str


# --- Output Models ---


@dataclass(frozen=True)
class RedirectOutput:
    """Output containing a single redirect."""

    redirect: RedirectRecord | None
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RedirectListOutput:
    """Output containing a list of redirects."""

    redirects: tuple[RedirectRecord, ...]
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RedirectOperationOutput:
    """Output for redirect operations (create, update, delete)."""

    redirect_id: UUID | None = None
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ValidationOutput:
    """Output for candidate validation."""

    errors: list[RedirectValidationError] = field(default_factory=list)
    probe: ProbeStatus | None = None
    success: bool = True


@dataclass(frozen=True)
class ResolveOutput:
    """Output for resolve operation."""

    new_url: str | None
    status_code: int | None
    redirect: RedirectRecord | None = None
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True
