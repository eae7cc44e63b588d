"""Fetch orchestrator: runs site scripts for a set of accounts.

A fetch session replaces the previous result set. It truncates the document
table, evicts every held artifact, then processes the requested accounts
strictly one at a time, in the order given. Each account runs through a
small state machine:

    start -> no_auth_needed -> fetching
    start -> auth_in_progress -> authenticated -> fetching
    start -> auth_in_progress -> awaiting_code -> fetching
    start -> auth_in_progress -> awaiting_security_answer -> fetching
    fetching -> success

Any non-terminal state may end in auth_failed or fetch_failed. A failure is
recorded on the account and the session moves on to the next account.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from invoicehub.db.connection import SessionFactory, session_scope
from invoicehub.errors import (
    AuthenticationFailed,
    FetchFailed,
    InvoiceHubError,
    SiteScriptError,
    UnsupportedProviderError,
)
from invoicehub.orchestrator.artifacts import ArtifactTable
from invoicehub.orchestrator.code_relay import CodeRelay
from invoicehub.orchestrator.events import FetchEventEmitter
from invoicehub.scripts.base import (
    DateRange,
    FetchedDocument,
    ScriptContext,
    SiteScript,
)
from invoicehub.scripts.registry import ScriptRegistry
from invoicehub.services.account_service import AccountService, ResolvedAccount
from invoicehub.services.document_service import DocumentService
from invoicehub.services.keyring_store import KeyringVault
from invoicehub.services.settings_service import SettingsService, SettingsSnapshot
from invoicehub.utils.redaction import sanitize_error_message

logger = logging.getLogger(__name__)

PageFactory = Callable[[], Awaitable[Any]]


class FetchState(str, Enum):
    """States of the per-account fetch state machine."""

    start = "start"
    no_auth_needed = "no_auth_needed"
    auth_in_progress = "auth_in_progress"
    authenticated = "authenticated"
    awaiting_code = "awaiting_code"
    awaiting_security_answer = "awaiting_security_answer"
    fetching = "fetching"
    success = "success"
    auth_failed = "auth_failed"
    fetch_failed = "fetch_failed"


_FAILED = [FetchState.auth_failed, FetchState.fetch_failed]

TRANSITIONS: dict[FetchState, list[FetchState]] = {
    FetchState.start: [FetchState.no_auth_needed, FetchState.auth_in_progress, *_FAILED],
    FetchState.no_auth_needed: [FetchState.fetching, *_FAILED],
    FetchState.auth_in_progress: [
        FetchState.authenticated,
        FetchState.awaiting_code,
        FetchState.awaiting_security_answer,
        *_FAILED,
    ],
    FetchState.authenticated: [FetchState.fetching, *_FAILED],
    FetchState.awaiting_code: [FetchState.fetching, *_FAILED],
    FetchState.awaiting_security_answer: [FetchState.fetching, *_FAILED],
    FetchState.fetching: [FetchState.success, *_FAILED],
    FetchState.success: [],  # terminal
    FetchState.auth_failed: [],  # terminal
    FetchState.fetch_failed: [],  # terminal
}


class InvalidStateTransition(Exception):
    """Raised when the fetch state machine is driven into an illegal state.

    Attributes:
        current_state: State the machine was in.
        attempted_state: State that was attempted.
        allowed_transitions: Valid targets from the current state.
    """

    def __init__(
        self,
        current_state: FetchState,
        attempted_state: FetchState,
        allowed_transitions: list[FetchState],
    ) -> None:
        self.current_state = current_state
        self.attempted_state = attempted_state
        self.allowed_transitions = allowed_transitions
        allowed = ", ".join(s.value for s in allowed_transitions) or "none (terminal)"
        super().__init__(
            f"Cannot transition from '{current_state.value}' to "
            f"'{attempted_state.value}'. Allowed: {allowed}"
        )


class AccountFetchStatus(str, Enum):
    """Outcome of one account within a session."""

    success = "success"
    auth_failed = "auth_failed"
    fetch_failed = "fetch_failed"
    unsupported = "unsupported"
    not_found = "not_found"


@dataclass
class AccountResult:
    """Result for one requested account id."""

    account_id: str
    status: AccountFetchStatus
    account_name: str | None = None
    document_ids: list[str] = field(default_factory=list)
    error_code: str | None = None
    message_key: str | None = None
    error_message: str | None = None

    @property
    def document_count(self) -> int:
        return len(self.document_ids)


@dataclass
class FetchSession:
    """One run of the orchestrator."""

    id: str
    date_range: DateRange
    account_ids: list[str]
    started_at: str
    finished_at: str | None = None
    results: list[AccountResult] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.finished_at is not None


class AccountStateMachine:
    """Tracks and validates the state of one account fetch."""

    def __init__(self) -> None:
        self.state = FetchState.start
        self.reached_authenticated = False

    def advance(self, target: FetchState) -> None:
        allowed = TRANSITIONS.get(self.state, [])
        if target not in allowed:
            raise InvalidStateTransition(self.state, target, allowed)
        logger.debug("Fetch state %s -> %s", self.state.value, target.value)
        if target in (FetchState.authenticated, FetchState.no_auth_needed):
            self.reached_authenticated = True
        self.state = target


class FetchOrchestrator:
    """Runs fetch sessions one at a time.

    The artifact table and code relay are injected so the API, the CLI and
    tests each own their instances.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        vault: KeyringVault,
        registry: ScriptRegistry,
        code_relay: CodeRelay,
        artifacts: ArtifactTable,
        emitter: FetchEventEmitter | None = None,
        page_factory: PageFactory | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._vault = vault
        self._registry = registry
        self._relay = code_relay
        self._artifacts = artifacts
        self._emitter = emitter or FetchEventEmitter()
        self._page_factory = page_factory
        self._lock = asyncio.Lock()
        self._current: FetchSession | None = None
        self._last: FetchSession | None = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def current_session(self) -> FetchSession | None:
        return self._current

    @property
    def last_session(self) -> FetchSession | None:
        return self._last

    async def run_fetch(
        self,
        date_range: DateRange,
        account_ids: list[str],
        session_id: str | None = None,
    ) -> list[AccountResult]:
        """Run a fetch session.

        Concurrent calls wait for the running session to finish first.

        Args:
            date_range: Date filter handed to every site script.
            account_ids: Accounts to fetch, in processing order.
            session_id: Optional id for the session (generated if omitted).

        Returns:
            One AccountResult per requested id, in the same order.
        """
        async with self._lock:
            session = FetchSession(
                id=session_id or str(uuid4()),
                date_range=date_range,
                account_ids=list(account_ids),
                started_at=datetime.now(UTC).isoformat(),
            )
            self._current = session
            try:
                await self._run_session(session)
            finally:
                session.finished_at = datetime.now(UTC).isoformat()
                self._current = None
                self._last = session
            return session.results

    async def _run_session(self, session: FetchSession) -> None:
        with session_scope(self._session_factory) as db:
            removed = DocumentService(db).delete_all()
            resolved = AccountService(db, self._vault).read_many(session.account_ids)
            settings = SettingsService(db).snapshot()
        evicted = self._artifacts.clear()
        logger.info(
            "Fetch session %s started for %d account(s); cleared %d document(s), %d artifact(s)",
            session.id,
            len(session.account_ids),
            removed,
            evicted,
        )
        await self._emitter.emit_session_started(session.id, session.account_ids)

        by_id = {account.id: account for account in resolved}
        for account_id in session.account_ids:
            account = by_id.get(account_id)
            if account is None:
                logger.warning("Account %s not found, skipping", account_id)
                session.results.append(
                    AccountResult(account_id=account_id, status=AccountFetchStatus.not_found)
                )
                continue
            result = await self._run_account(session, account, settings)
            session.results.append(result)

        succeeded = sum(1 for r in session.results if r.status == AccountFetchStatus.success)
        failed = len(session.results) - succeeded
        logger.info(
            "Fetch session %s completed: %d succeeded, %d failed",
            session.id,
            succeeded,
            failed,
        )
        await self._emitter.emit_session_completed(session.id, succeeded, failed)

    async def _run_account(
        self,
        session: FetchSession,
        account: ResolvedAccount,
        settings: SettingsSnapshot,
    ) -> AccountResult:
        await self._emitter.emit_account_started(session.id, account.id, account.name)
        logger.info("Fetching documents for %s (%s)", account.name, account.provider)

        try:
            script_cls = self._registry.get(account.provider)
        except UnsupportedProviderError as e:
            logger.warning("Account %s: %s", account.name, e)
            result = AccountResult(
                account_id=account.id,
                account_name=account.name,
                status=AccountFetchStatus.unsupported,
                error_code=e.code,
                message_key=e.message_key,
                error_message=str(e),
            )
            await self._emitter.emit_account_failed(
                session.id, account.id, account.name, e.code, e.message_key
            )
            await self._emit_completed(session, result)
            return result

        page = None
        machine = AccountStateMachine()
        script: SiteScript | None = None
        try:
            if self._page_factory is not None:
                page = await self._page_factory()
            context = ScriptContext(
                account=account,
                settings=settings,
                date_range=session.date_range,
                page=page,
                logger=logging.LoggerAdapter(
                    logging.getLogger(f"invoicehub.scripts.{account.provider}"),
                    {"account": account.name},
                ),
            )
            script = script_cls(context)
            documents = await self._drive(script, account, machine)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            status = self._classify(e, machine, script)
            result = await self._record_failure(session, account, status, e)
        else:
            # Rows for this account are rolled back if any document is unusable.
            try:
                result = self._record_success(account, documents)
            except Exception as e:
                result = await self._record_failure(session, account, FetchState.fetch_failed, e)
            else:
                machine.advance(FetchState.success)
                logger.info("Fetched %d document(s) for %s", result.document_count, account.name)
        finally:
            await _close_page(page)

        await self._emit_completed(session, result)
        return result

    async def _drive(
        self,
        script: SiteScript,
        account: ResolvedAccount,
        machine: AccountStateMachine,
    ) -> list[FetchedDocument]:
        """Move one script through the state machine and return its documents."""
        if not script.requires_two_factor:
            machine.advance(FetchState.no_auth_needed)
            machine.advance(FetchState.fetching)
            return await script.fetch("")

        machine.advance(FetchState.auth_in_progress)
        continuation = await script.authenticate()

        if script.authenticated:
            machine.advance(FetchState.authenticated)
            machine.advance(FetchState.fetching)
            return await continuation("")

        if script.requires_security_question:
            machine.advance(FetchState.awaiting_security_answer)
            answer = await self._relay.request_code(
                account.id, account.name, script.security_question or ""
            )
        else:
            machine.advance(FetchState.awaiting_code)
            answer = await self._relay.request_code(account.id, account.name)

        machine.advance(FetchState.fetching)
        return await continuation(answer)

    @staticmethod
    def _classify(
        error: Exception, machine: AccountStateMachine, script: SiteScript | None
    ) -> FetchState:
        """Map a failure to auth_failed or fetch_failed."""
        if isinstance(error, AuthenticationFailed):
            return FetchState.auth_failed
        if isinstance(error, FetchFailed):
            return FetchState.fetch_failed
        if machine.reached_authenticated or (script is not None and script.authenticated):
            return FetchState.fetch_failed
        return FetchState.auth_failed

    def _record_success(
        self, account: ResolvedAccount, documents: list[FetchedDocument]
    ) -> AccountResult:
        stored: list[tuple[str, Any]] = []
        with session_scope(self._session_factory) as db:
            doc_service = DocumentService(db)
            for document in documents:
                record = doc_service.create(
                    account_name=document.account_name or account.name,
                    file_name=document.file_name,
                    description=document.description,
                    issued_on=document.issued_on,
                    account_id=account.id,
                )
                stored.append((record.id, document.artifact))
            AccountService(db, self._vault).clear_failures(account.id)

        for document_id, artifact in stored:
            self._artifacts.put(document_id, artifact)

        return AccountResult(
            account_id=account.id,
            account_name=account.name,
            status=AccountFetchStatus.success,
            document_ids=[document_id for document_id, _ in stored],
        )

    async def _record_failure(
        self,
        session: FetchSession,
        account: ResolvedAccount,
        state: FetchState,
        error: Exception,
    ) -> AccountResult:
        if state == FetchState.auth_failed:
            status = AccountFetchStatus.auth_failed
            default = AuthenticationFailed()
        else:
            status = AccountFetchStatus.fetch_failed
            default = FetchFailed()
        code = error.code if isinstance(error, SiteScriptError) else default.code
        app_error = InvoiceHubError.from_code(code, account_name=account.name)

        if isinstance(error, SiteScriptError):
            logger.error("Fetch for %s failed (%s): %s", account.name, status.value, error)
        else:
            logger.exception("Fetch for %s failed (%s)", account.name, status.value)

        with session_scope(self._session_factory) as db:
            accounts = AccountService(db, self._vault)
            if status == AccountFetchStatus.auth_failed:
                accounts.mark_auth_failed(account.id)
            else:
                accounts.mark_fetch_failed(account.id)

        await self._emitter.emit_account_failed(
            session.id, account.id, account.name, app_error.code, app_error.message_key
        )
        return AccountResult(
            account_id=account.id,
            account_name=account.name,
            status=status,
            error_code=app_error.code,
            message_key=app_error.message_key,
            error_message=sanitize_error_message(str(error)),
        )

    async def _emit_completed(self, session: FetchSession, result: AccountResult) -> None:
        await self._emitter.emit_account_completed(
            session.id,
            result.account_id,
            result.account_name or "",
            result.status.value,
            result.document_count,
        )


async def _close_page(page: Any) -> None:
    if page is None:
        return
    close = getattr(page, "close", None)
    if close is None:
        return
    try:
        outcome = close()
        if inspect.isawaitable(outcome):
            await outcome
    except Exception as e:
        logger.warning("Failed to close page: %s", e)
