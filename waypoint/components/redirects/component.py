"""
Redirects component - site-scoped URL redirect management.

Handles redirect CRUD, candidate validation and request-time resolution.

Rules:
- Old URL should be unique per site
- New URL should not be another redirect's old URL (no chains)
- Old URL should be a path, not an absolute URL (warning only)
- Site name, old URL and new URL are required on write
"""

from __future__ import annotations

from ._impl import (
    RedirectArgumentError,
    RedirectConfig,
    RedirectRegistry,
)
from .models import (
    CreateRedirectInput,
    DeleteAllRedirectsInput,
    DeleteRedirectInput,
    GetRedirectInput,
    ListRedirectsInput,
    RedirectListOutput,
    RedirectOperationOutput,
    RedirectOutput,
    RedirectValidationError,
    ResolveOutput,
    ResolveRedirectInput,
    UpdateRedirectInput,
    ValidateRedirectInput,
    ValidationOutput,
)
from .ports import (
    IndexPort,
    LinkProberPort,
    RulesPort,
    SiteDirectoryPort,
    StorePort,
)

PERMANENT_STATUS_CODE = 301
TEMPORARY_STATUS_CODE = 302


def _argument_error(e: RedirectArgumentError) -> RedirectValidationError:
    """Convert a blank-field error to a component error."""
    return RedirectValidationError(
        code=f"{e.field}_required",
        message=str(e),
        field=e.field,
    )


def _build_config(rules: RulesPort | None) -> RedirectConfig:
    """Build redirect config from rules port."""
    if rules is None:
        return RedirectConfig()

    return RedirectConfig(
        bucket_id=rules.get_bucket_id(),
        template_id=rules.get_template_id(),
        recycle_bin_enabled=rules.is_recycle_bin_enabled(),
    )


def _create_registry(
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None,
    rules: RulesPort | None,
) -> RedirectRegistry:
    """Create redirect registry from ports."""
    return RedirectRegistry(
        store=store,
        index=index,
        site_directory=site_directory,
        link_prober=link_prober,
        config=_build_config(rules),
    )


# --- Component Entry Points ---


def run_create(
    inp: CreateRedirectInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> RedirectOperationOutput:
    """
    Create a new redirect.

    Candidate validation is not applied here; call run_validate first when
    the caller wants the uniqueness and chain checks.

    Returns:
        RedirectOperationOutput with the new redirect ID or errors.
    """
    registry = _create_registry(store, index, site_directory, link_prober, rules)

    try:
        redirect_id = registry.insert_fields(
            inp.site_name, inp.old_url, inp.new_url, inp.is_permanent
        )
    except RedirectArgumentError as e:
        return RedirectOperationOutput(errors=[_argument_error(e)], success=False)

    if redirect_id is None:
        return RedirectOperationOutput(
            errors=[
                RedirectValidationError(
                    code="bucket_missing",
                    message="Redirect storage has not been provisioned",
                )
            ],
            success=False,
        )

    return RedirectOperationOutput(redirect_id=redirect_id)


def run_update(
    inp: UpdateRedirectInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> RedirectOperationOutput:
    """
    Replace the fields of an existing redirect.

    Updating an unknown ID is a no-op and still reports success.
    """
    registry = _create_registry(store, index, site_directory, link_prober, rules)

    try:
        registry.update(
            inp.redirect_id,
            inp.site_name,
            inp.old_url,
            inp.new_url,
            inp.is_permanent,
        )
    except RedirectArgumentError as e:
        return RedirectOperationOutput(
            redirect_id=inp.redirect_id, errors=[_argument_error(e)], success=False
        )

    return RedirectOperationOutput(redirect_id=inp.redirect_id)


def run_delete(
    inp: DeleteRedirectInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> RedirectOperationOutput:
    """Delete a redirect. Unknown IDs are a no-op."""
    registry = _create_registry(store, index, site_directory, link_prober, rules)
    registry.delete(inp.redirect_id)
    return RedirectOperationOutput(redirect_id=inp.redirect_id)


def run_delete_all(
    inp: DeleteAllRedirectsInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> RedirectOperationOutput:
    """Delete every redirect."""
    registry = _create_registry(store, index, site_directory, link_prober, rules)
    registry.delete_all()
    return RedirectOperationOutput()


def run_get(
    inp: GetRedirectInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> RedirectOutput:
    """Get a redirect by ID."""
    registry = _create_registry(store, index, site_directory, link_prober, rules)

    redirect = registry.get_by_id(inp.redirect_id)

    if redirect is None:
        return RedirectOutput(
            redirect=None,
            errors=[
                RedirectValidationError(
                    code="not_found",
                    message=f"Redirect {inp.redirect_id} not found",
                )
            ],
            success=False,
        )

    return RedirectOutput(redirect=redirect)


def run_list(
    inp: ListRedirectsInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> RedirectListOutput:
    """List all redirects."""
    registry = _create_registry(store, index, site_directory, link_prober, rules)
    return RedirectListOutput(redirects=tuple(registry.get_all()))


def run_validate(
    inp: ValidateRedirectInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> ValidationOutput:
    """
    Check a candidate redirect before it is saved.

    Warnings are returned alongside errors but do not fail validation.
    """
    registry = _create_registry(store, index, site_directory, link_prober, rules)

    errors, probe = registry.validate_candidate(inp.candidate, check_target=inp.check_target)

    return ValidationOutput(
        errors=errors,
        probe=probe,
        success=not any(not e.warning for e in errors),
    )


def run_resolve(
    inp: ResolveRedirectInput,
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> ResolveOutput:
    """
    Resolve an inbound request URL to its redirect target.

    Returns:
        ResolveOutput with the new URL and 301/302 status, or empty fields
        when no redirect matches.
    """
    registry = _create_registry(store, index, site_directory, link_prober, rules)

    try:
        redirect = registry.get_new_url(inp.site, inp.request_url)
    except ValueError as e:
        return ResolveOutput(
            new_url=None,
            status_code=None,
            errors=[RedirectValidationError(code="invalid_input", message=str(e))],
            success=False,
        )

    if redirect is None:
        return ResolveOutput(new_url=None, status_code=None)

    status_code = PERMANENT_STATUS_CODE if redirect.is_permanent else TEMPORARY_STATUS_CODE

    return ResolveOutput(
        new_url=redirect.new_url,
        status_code=status_code,
        redirect=redirect,
    )


def run(
    inp: (
        CreateRedirectInput
        | UpdateRedirectInput
        | DeleteRedirectInput
        | DeleteAllRedirectsInput
        | GetRedirectInput
        | ListRedirectsInput
        | ValidateRedirectInput
        | ResolveRedirectInput
    ),
    *,
    store: StorePort,
    index: IndexPort,
    site_directory: SiteDirectoryPort,
    link_prober: LinkProberPort | None = None,
    rules: RulesPort | None = None,
) -> (
    RedirectOutput | RedirectListOutput | RedirectOperationOutput | ValidationOutput | ResolveOutput
):
    """
    Main entry point for the redirects component.

    Dispatches to appropriate handler based on input type.
    """
    ports = {
        "store": store,
        "index": index,
        "site_directory": site_directory,
        "link_prober": link_prober,
        "rules": rules,
    }

    if isinstance(inp, CreateRedirectInput):
        return run_create(inp, **ports)
    elif isinstance(inp, UpdateRedirectInput):
        return run_update(inp, **ports)
    elif isinstance(inp, DeleteRedirectInput):
        return run_delete(inp, **ports)
    elif isinstance(inp, DeleteAllRedirectsInput):
        return run_delete_all(inp, **ports)
    elif isinstance(inp, GetRedirectInput):
        return run_get(inp, **ports)
    elif isinstance(inp, ListRedirectsInput):
        return run_list(inp, **ports)
    elif isinstance(inp, ValidateRedirectInput):
        return run_validate(inp, **ports)
    elif isinstance(inp, ResolveRedirectInput):
        return run_resolve(inp, **ports)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
