"""Error formatting and grouping utilities.

This module provides:
- InvoiceHubError exception class for application errors
- Error formatting for user display
- Error grouping to combine the same failure across accounts
"""

from dataclasses import dataclass, field

from invoicehub.errors.registry import get_error


@dataclass
class InvoiceHubError(Exception):
    """Application error with code, message, and context.

    Attributes:
        code: Error code in E-XXXX format.
        message: Human-readable error message.
        message_key: Stable key the UI translates.
        remediation: Action user should take to resolve.
        accounts: Names of the affected accounts.
        is_retryable: Whether re-running may succeed without user action.
        details: Additional context dictionary.
    """

    code: str
    message: str
    message_key: str
    remediation: str
    accounts: list[str] = field(default_factory=list)
    is_retryable: bool = False
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @classmethod
    def from_code(cls, code: str, **kwargs: object) -> "InvoiceHubError":
        """Create error from registry code with context substitution.

        Args:
            code: Error code in E-XXXX format.
            **kwargs: Template values. ``account_name`` also populates
                ``accounts``; ``details`` is passed through.

        Returns:
            InvoiceHubError with the formatted message.
        """
        details = kwargs.get("details", {})
        if not isinstance(details, dict):
            details = {}
        account_name = kwargs.get("account_name")
        accounts = [account_name] if isinstance(account_name, str) else []

        error_def = get_error(code)
        if not error_def:
            return cls(
                code=code,
                message=f"Unknown error: {code}",
                message_key="unknownError",
                remediation="Check the debug log.",
                accounts=accounts,
                details=details,
            )

        message = error_def.message_template
        try:
            message = message.format(**{k: v for k, v in kwargs.items() if k != "details"})
        except KeyError:
            # Keep template if some placeholders are missing
            pass

        return cls(
            code=error_def.code,
            message=message,
            message_key=error_def.message_key,
            remediation=error_def.remediation,
            accounts=accounts,
            is_retryable=error_def.is_retryable,
            details=details,
        )


def format_error(error: InvoiceHubError, include_remediation: bool = True) -> str:
    """Format error for display to user."""
    lines = [f"{error.code}: {error.message}"]
    if len(error.accounts) > 1:
        lines.append(f"  Affected accounts: {', '.join(error.accounts)}")
    if include_remediation:
        lines.append(f"  Action: {error.remediation}")
    return "\n".join(lines)


def group_errors(errors: list[InvoiceHubError]) -> list[InvoiceHubError]:
    """Group errors by code, combining the affected account names.

    Example:
        3 "authentication failed" errors for three accounts
        -> 1 error with accounts=[a, b, c]
    """
    groups: dict[str, InvoiceHubError] = {}
    for error in errors:
        if error.code in groups:
            groups[error.code].accounts.extend(error.accounts)
        else:
            groups[error.code] = InvoiceHubError(
                code=error.code,
                message=error.message,
                message_key=error.message_key,
                remediation=error.remediation,
                accounts=list(error.accounts),
                is_retryable=error.is_retryable,
                details=error.details.copy(),
            )

    result = list(groups.values())
    for error in result:
        error.accounts = sorted(set(error.accounts))
        error_def = get_error(error.code)
        if len(error.accounts) > 1 and error_def is not None:
            # Per-account messages name one account; the group uses the title.
            error.message = error_def.title
    return result


def format_error_summary(errors: list[InvoiceHubError]) -> str:
    """Format a list of errors for display, grouping duplicates."""
    if not errors:
        return "No errors."

    grouped = group_errors(errors)
    if len(grouped) == 1:
        return format_error(grouped[0])

    lines = [f"{len(grouped)} error type(s) found:\n"]
    for i, error in enumerate(grouped, 1):
        lines.append(f"{i}. {format_error(error)}")
        lines.append("")
    return "\n".join(lines)
