"""Out-of-band relay for verification codes and security answers.

When a site script needs a one-time code, the orchestrator asks the relay
for one. The relay registers a pending request keyed by account id,
notifies observers, and hands back a future. Whoever talks to the user
(HTTP client, terminal prompt) calls :meth:`CodeRelay.submit_code`, which
resolves the future and lets the suspended fetch continue.

At most one request is pending per account: a new request for the same
account fails the previous future with CodeRequestSuperseded. An
unanswered request fails with CodeRequestTimeout once the timeout expires.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from invoicehub.errors import CodeRequestSuperseded, CodeRequestTimeout
from invoicehub.orchestrator.events import FetchEventEmitter

logger = logging.getLogger(__name__)

DEFAULT_CODE_TIMEOUT_SECONDS = 600.0


@dataclass(frozen=True)
class CodeRequestInfo:
    """Public view of a pending request."""

    account_id: str
    account_name: str
    question: str | None
    requested_at: str


@dataclass(eq=False)
class _PendingRequest:
    info: CodeRequestInfo
    future: asyncio.Future
    loop: asyncio.AbstractEventLoop
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)


class CodeRelay:
    """Pending code requests keyed by account id."""

    def __init__(
        self,
        emitter: FetchEventEmitter | None = None,
        timeout: float | None = DEFAULT_CODE_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the relay.

        Args:
            emitter: Receives a code_requested event for every request.
            timeout: Seconds to wait for a code; None waits forever.
        """
        self._emitter = emitter
        self._timeout = timeout
        self._pending: dict[str, _PendingRequest] = {}
        self._lock = threading.Lock()
        self._notify_tasks: set[asyncio.Task[Any]] = set()

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def request_code(
        self, account_id: str, account_name: str, question: str | None = None
    ) -> "asyncio.Future[str]":
        """Register a request and return the future its answer resolves.

        Must be called from a running event loop. The request is registered
        before this returns, so a second call for the same account
        supersedes the first immediately.

        Args:
            account_id: Account waiting for input.
            account_name: Display name shown to the user.
            question: Security question, or None for a one-time code.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()
        entry = _PendingRequest(
            info=CodeRequestInfo(
                account_id=account_id,
                account_name=account_name,
                question=question,
                requested_at=datetime.now(UTC).isoformat(),
            ),
            future=future,
            loop=loop,
        )

        with self._lock:
            previous = self._pending.get(account_id)
            self._pending[account_id] = entry

        if previous is not None:
            logger.info("Code request for %s superseded", account_name)
            self._settle(previous, error=CodeRequestSuperseded())

        if self._timeout is not None:
            entry.timer = loop.call_later(self._timeout, self._expire, account_id, entry)
        future.add_done_callback(lambda _f: self._forget(account_id, entry))

        logger.info(
            "Waiting for %s from user for %s",
            "security answer" if question else "verification code",
            account_name,
        )
        if self._emitter is not None:
            task = loop.create_task(
                self._emitter.emit_code_requested(account_id, account_name, question)
            )
            self._notify_tasks.add(task)
            task.add_done_callback(self._notify_tasks.discard)
        return future

    def submit_code(self, account_id: str, code: str) -> bool:
        """Resolve the pending request for an account.

        Safe to call from any thread.

        Returns:
            True if a request was pending, False otherwise.
        """
        with self._lock:
            entry = self._pending.pop(account_id, None)
        if entry is None:
            logger.debug("No pending code request for %s", account_id)
            return False
        self._settle(entry, result=code)
        logger.info("Code submitted for %s", entry.info.account_name)
        return True

    def pending_requests(self) -> list[CodeRequestInfo]:
        with self._lock:
            return [entry.info for entry in self._pending.values()]

    def has_pending(self, account_id: str) -> bool:
        with self._lock:
            return account_id in self._pending

    def cancel_all(self) -> int:
        """Cancel every pending request. Returns how many were pending."""
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for entry in entries:
            self._settle(entry, cancel=True)
        return len(entries)

    def _expire(self, account_id: str, entry: _PendingRequest) -> None:
        with self._lock:
            if self._pending.get(account_id) is entry:
                del self._pending[account_id]
        logger.warning("Code request for %s timed out", entry.info.account_name)
        self._settle(entry, error=CodeRequestTimeout())

    def _forget(self, account_id: str, entry: _PendingRequest) -> None:
        with self._lock:
            if self._pending.get(account_id) is entry:
                del self._pending[account_id]
        if entry.timer is not None:
            entry.timer.cancel()

    def _settle(
        self,
        entry: _PendingRequest,
        result: str | None = None,
        error: BaseException | None = None,
        cancel: bool = False,
    ) -> None:
        """Complete an entry's future on the loop that owns it."""

        def apply() -> None:
            if entry.timer is not None:
                entry.timer.cancel()
            if entry.future.done():
                return
            if cancel:
                entry.future.cancel()
            elif error is not None:
                entry.future.set_exception(error)
            else:
                entry.future.set_result(result or "")

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is entry.loop:
            apply()
        elif not entry.loop.is_closed():
            entry.loop.call_soon_threadsafe(apply)
