"""Error code registry with E-XXXX format codes.

Categories:
- E-1xxx: Document errors
- E-2xxx: Validation errors
- E-3xxx: Site fetch errors
- E-4xxx: System/orchestration errors
- E-5xxx: Authentication errors

Each error carries a code, title, message template, the message key the
caller uses for localisation, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    DOCUMENT = "document"  # E-1xxx
    VALIDATION = "validation"  # E-2xxx
    FETCH = "fetch"  # E-3xxx
    SYSTEM = "system"  # E-4xxx
    AUTH = "auth"  # E-5xxx


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        title: Short title for display.
        message_key: Stable key the UI translates.
        message_template: Message with {placeholders} for context.
        remediation: Action user should take to resolve.
        is_retryable: Whether re-running the fetch may succeed unchanged.
    """

    code: str
    category: ErrorCategory
    title: str
    message_key: str
    message_template: str
    remediation: str
    is_retryable: bool = False


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Document errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.DOCUMENT,
        title="Download Not Available",
        message_key="downloadIsNotAvailable",
        message_template="The file for document '{document_id}' is no longer available.",
        remediation="Fetch documents for the account again, then retry.",
    ),
    "E-1002": ErrorCode(
        code="E-1002",
        category=ErrorCategory.DOCUMENT,
        title="Output Directory Unavailable",
        message_key="failedToCreateOutputDir",
        message_template="Could not create output directory '{path}'.",
        remediation="Check that the folder is writable or choose another output directory.",
    ),
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        title="Unknown Credential Field",
        message_key="unknownCredentialField",
        message_template="Unknown credential field(s): {fields}.",
        remediation="Use only username, password, account_id and business_id.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        title="Unknown Setting",
        message_key="unknownSetting",
        message_template="Unknown setting field(s): {fields}.",
        remediation="Check the setting name and retry.",
    ),
    # Fetch errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.FETCH,
        title="Fetch Failed",
        message_key="fetchFailed",
        message_template="Failed to fetch documents from {account_name}.",
        remediation="Check the account on the provider's website and fetch again.",
        is_retryable=True,
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        title="Provider Not Supported",
        message_key="providerNotSupported",
        message_template="No site script is installed for provider '{provider}'.",
        remediation="Install the site script package for this provider or pick another provider.",
    ),
    "E-4002": ErrorCode(
        code="E-4002",
        category=ErrorCategory.SYSTEM,
        title="Account Not Found",
        message_key="accountNotFound",
        message_template="Account '{account_id}' does not exist.",
        remediation="Refresh the account list and retry.",
    ),
    "E-4003": ErrorCode(
        code="E-4003",
        category=ErrorCategory.SYSTEM,
        title="Datastore Error",
        message_key="datastoreError",
        message_template="Datastore error. Something went wrong.",
        remediation="Retry; if the problem persists check the debug log.",
        is_retryable=True,
    ),
    # Auth errors (E-5xxx)
    "E-5001": ErrorCode(
        code="E-5001",
        category=ErrorCategory.AUTH,
        title="Authentication Failed",
        message_key="authenticationFailed",
        message_template="{account_name} authentication failed.",
        remediation="Update the account credentials and fetch again.",
    ),
    "E-5002": ErrorCode(
        code="E-5002",
        category=ErrorCategory.AUTH,
        title="Verification Code Timed Out",
        message_key="codeRequestTimedOut",
        message_template="No verification code was entered for {account_name} in time.",
        remediation="Fetch again and enter the code when prompted.",
        is_retryable=True,
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code."""
    return ERROR_REGISTRY.get(code)


def get_errors_by_category(category: ErrorCategory) -> list[ErrorCode]:
    """Get all errors in a category."""
    return [e for e in ERROR_REGISTRY.values() if e.category == category]
