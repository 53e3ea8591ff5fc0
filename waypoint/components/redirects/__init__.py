"""
Redirects component - site-scoped URL redirect management.
"""

from ._impl import (
    DEFAULT_BUCKET_ID,
    DEFAULT_TEMPLATE_ID,
    IS_PERMANENT_FIELD,
    NEW_URL_FIELD,
    OLD_URL_FIELD,
    SITE_NAME_FIELD,
    RedirectArgumentError,
    RedirectConfig,
    RedirectRegistry,
    create_redirect_registry,
    derive_item_name,
    fields_to_record,
    old_url_contains_hostname,
    record_to_fields,
    require_value,
)
from .component import (
    run,
    run_create,
    run_delete,
    run_delete_all,
    run_get,
    run_list,
    run_resolve,
    run_update,
    run_validate,
)
from .models import (
    CreateRedirectInput,
    DeleteAllRedirectsInput,
    DeleteRedirectInput,
    GetRedirectInput,
    ListRedirectsInput,
    ProbeStatus,
    RedirectListOutput,
    RedirectOperationOutput,
    RedirectOutput,
    RedirectRecord,
    RedirectValidationError,
    ResolveOutput,
    ResolveRedirectInput,
    UpdateRedirectInput,
    ValidateRedirectInput,
    ValidationOutput,
)
from .ports import LinkProberPort, RulesPort, SiteDirectoryPort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_delete_all",
    "run_get",
    "run_list",
    "run_resolve",
    "run_update",
    "run_validate",
    # Input models
    "CreateRedirectInput",
    "DeleteAllRedirectsInput",
    "DeleteRedirectInput",
    "GetRedirectInput",
    "ListRedirectsInput",
    "ResolveRedirectInput",
    "UpdateRedirectInput",
    "ValidateRedirectInput",
    # Output models
    "ProbeStatus",
    "RedirectListOutput",
    "RedirectOperationOutput",
    "RedirectOutput",
    "RedirectRecord",
    "RedirectValidationError",
    "ResolveOutput",
    "ValidationOutput",
    # Ports
    "LinkProberPort",
    "RulesPort",
    "SiteDirectoryPort",
    # _impl re-exports
    "DEFAULT_BUCKET_ID",
    "DEFAULT_TEMPLATE_ID",
    "IS_PERMANENT_FIELD",
    "NEW_URL_FIELD",
    "OLD_URL_FIELD",
    "SITE_NAME_FIELD",
    "RedirectArgumentError",
    "RedirectConfig",
    "RedirectRegistry",
    "create_redirect_registry",
    "derive_item_name",
    "fields_to_record",
    "old_url_contains_hostname",
    "record_to_fields",
    "require_value",
]
