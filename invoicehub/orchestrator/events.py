"""Observer pattern for fetch session lifecycle events.

Provides the FetchEventObserver protocol and FetchEventEmitter class
for notifying observers of fetch progress and pending code requests.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class FetchEventObserver(Protocol):
    """Observer protocol for fetch lifecycle events.

    Implementations subscribe via FetchEventEmitter to drive a UI, prompt
    for verification codes, or log activity. An observer may implement only
    the callbacks it cares about; missing callbacks are skipped.
    """

    async def on_session_started(self, session_id: str, account_ids: list[str]) -> None:
        """Called when a fetch session begins.

        Args:
            session_id: Unique identifier for the fetch session.
            account_ids: Accounts to process, in processing order.
        """
        ...

    async def on_account_started(
        self, session_id: str, account_id: str, account_name: str
    ) -> None:
        """Called before an account is fetched."""
        ...

    async def on_account_completed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        status: str,
        document_count: int,
    ) -> None:
        """Called after an account is done, whatever the outcome.

        Args:
            session_id: Unique identifier for the fetch session.
            account_id: Account that was processed.
            account_name: Display name of the account.
            status: AccountFetchStatus value.
            document_count: Number of documents stored for the account.
        """
        ...

    async def on_account_failed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        error_code: str,
        message_key: str,
    ) -> None:
        """Called when an account fails.

        Args:
            session_id: Unique identifier for the fetch session.
            account_id: Account that failed.
            account_name: Display name of the account.
            error_code: Error code from the error registry.
            message_key: Key the UI translates into a notification.
        """
        ...

    async def on_code_requested(
        self, account_id: str, account_name: str, question: str | None
    ) -> None:
        """Called when a verification code or security answer is needed.

        Args:
            account_id: Account waiting for input.
            account_name: Display name of the account.
            question: Security question text, or None for a one-time code.
        """
        ...

    async def on_session_completed(
        self, session_id: str, succeeded: int, failed: int
    ) -> None:
        """Called when every account of the session has been processed."""
        ...


class FetchEventEmitter:
    """Emits fetch lifecycle events to registered observers.

    Exceptions from individual observers are caught and logged to prevent
    one broken observer from stopping event delivery to others.
    """

    def __init__(self) -> None:
        self._observers: list[FetchEventObserver] = []

    def add_observer(self, observer: FetchEventObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: FetchEventObserver) -> None:
        self._observers.remove(observer)

    async def _dispatch(self, callback: str, *args: Any) -> None:
        for observer in list(self._observers):
            handler = getattr(observer, callback, None)
            if handler is None:
                continue
            try:
                await handler(*args)
            except Exception as e:
                logger.error(
                    "Observer %s failed %s: %s",
                    type(observer).__name__,
                    callback,
                    e,
                )

    async def emit_session_started(self, session_id: str, account_ids: list[str]) -> None:
        await self._dispatch("on_session_started", session_id, list(account_ids))

    async def emit_account_started(
        self, session_id: str, account_id: str, account_name: str
    ) -> None:
        await self._dispatch("on_account_started", session_id, account_id, account_name)

    async def emit_account_completed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        status: str,
        document_count: int,
    ) -> None:
        await self._dispatch(
            "on_account_completed",
            session_id,
            account_id,
            account_name,
            status,
            document_count,
        )

    async def emit_account_failed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        error_code: str,
        message_key: str,
    ) -> None:
        await self._dispatch(
            "on_account_failed",
            session_id,
            account_id,
            account_name,
            error_code,
            message_key,
        )

    async def emit_code_requested(
        self, account_id: str, account_name: str, question: str | None
    ) -> None:
        await self._dispatch("on_code_requested", account_id, account_name, question)

    async def emit_session_completed(
        self, session_id: str, succeeded: int, failed: int
    ) -> None:
        await self._dispatch("on_session_completed", session_id, succeeded, failed)
