"""Failure kinds raised by site scripts and the fetch orchestrator.

Site scripts raise exactly one of two kinds: :class:`AuthenticationFailed`
before the account is authenticated and :class:`FetchFailed` afterwards.
The orchestrator maps each to the matching account flag.
"""

from invoicehub.errors.domain import DomainError


class SiteScriptError(Exception):
    """Base class for unrecoverable site script failures."""

    code = "E-3001"
    message_key = "fetchFailed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message_key)


class AuthenticationFailed(SiteScriptError):
    """Login, second factor or security answer was rejected."""

    code = "E-5001"
    message_key = "authenticationFailed"


class FetchFailed(SiteScriptError):
    """Listing or downloading documents failed after authentication."""

    code = "E-3001"
    message_key = "fetchFailed"


class UnsupportedProviderError(DomainError):
    """No site script is registered for an account's provider key."""

    code = "E-4001"
    message_key = "providerNotSupported"

    def __init__(self, provider: str) -> None:
        super().__init__(f"No site script registered for provider '{provider}'")
        self.provider = provider


class CodeRequestTimeout(AuthenticationFailed):
    """No code or answer was submitted for a pending request in time."""

    code = "E-5002"
    message_key = "codeRequestTimedOut"


class CodeRequestSuperseded(AuthenticationFailed):
    """A newer code request for the same account replaced this one."""

    message_key = "codeRequestSuperseded"
