"""Error handling framework for InvoiceHub.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions mapped to HTTP status codes
- The two failure kinds site scripts raise
- Error formatting and grouping utilities

Error categories:
- E-1xxx: Document errors
- E-2xxx: Validation errors
- E-3xxx: Site fetch errors
- E-4xxx: System/orchestration errors
- E-5xxx: Authentication errors
"""

from invoicehub.errors.domain import (
    ArtifactNotAvailableError,
    ConflictError,
    DomainError,
    NotFoundError,
    SecretNotFoundError,
    ValidationError,
)
from invoicehub.errors.fetch import (
    AuthenticationFailed,
    CodeRequestSuperseded,
    CodeRequestTimeout,
    FetchFailed,
    SiteScriptError,
    UnsupportedProviderError,
)
from invoicehub.errors.formatter import (
    InvoiceHubError,
    format_error,
    format_error_summary,
    group_errors,
)
from invoicehub.errors.registry import (
    ERROR_REGISTRY,
    ErrorCategory,
    ErrorCode,
    get_error,
    get_errors_by_category,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    # Domain
    "DomainError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "ArtifactNotAvailableError",
    "SecretNotFoundError",
    # Fetch
    "SiteScriptError",
    "AuthenticationFailed",
    "CodeRequestTimeout",
    "CodeRequestSuperseded",
    "FetchFailed",
    "UnsupportedProviderError",
    # Formatter
    "InvoiceHubError",
    "format_error",
    "group_errors",
    "format_error_summary",
]
