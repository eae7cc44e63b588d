"""Wiring of the fetch components for one process.

The API lifespan and the CLI each build one FetchRuntime; tests build their
own with an in-memory session factory.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

from invoicehub.db.connection import SessionFactory
from invoicehub.errors import ConflictError
from invoicehub.orchestrator.artifacts import ArtifactTable
from invoicehub.orchestrator.code_relay import DEFAULT_CODE_TIMEOUT_SECONDS, CodeRelay
from invoicehub.orchestrator.events import FetchEventEmitter
from invoicehub.orchestrator.fetch import AccountResult, FetchOrchestrator, PageFactory
from invoicehub.orchestrator.sse_observer import SSEFetchObserver
from invoicehub.scripts.base import DateRange
from invoicehub.scripts.registry import ScriptRegistry
from invoicehub.services.keyring_store import SERVICE_NAME, KeyringVault
from invoicehub.utils.paths import get_default_output_dir

logger = logging.getLogger(__name__)


@dataclass
class FetchRuntime:
    """Every long-lived component a process needs to run fetches."""

    session_factory: SessionFactory
    vault: KeyringVault
    registry: ScriptRegistry
    emitter: FetchEventEmitter
    relay: CodeRelay
    artifacts: ArtifactTable
    sse: SSEFetchObserver
    orchestrator: FetchOrchestrator
    output_dir: Path
    log_dir: Path | None = None
    _task: "asyncio.Task[list[AccountResult]] | None" = field(default=None, init=False, repr=False)

    def start_fetch(
        self, date_range: DateRange, account_ids: list[str], session_id: str
    ) -> "asyncio.Task[list[AccountResult]]":
        """Run a fetch session in the background.

        Raises:
            ConflictError: If a session is already running.
        """
        if self.orchestrator.is_running or (self._task is not None and not self._task.done()):
            raise ConflictError("A fetch session is already running")
        self._task = asyncio.create_task(
            self.orchestrator.run_fetch(date_range, account_ids, session_id=session_id)
        )
        self._task.add_done_callback(_log_task_failure)
        return self._task

    async def shutdown(self) -> None:
        """Cancel a running session and any pending code requests."""
        self.relay.cancel_all()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass


def _log_task_failure(task: "asyncio.Task[list[AccountResult]]") -> None:
    if task.cancelled():
        logger.info("Background fetch session cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.error("Background fetch session failed: %s", error, exc_info=error)


def build_runtime(
    session_factory: SessionFactory,
    *,
    registry: ScriptRegistry | None = None,
    vault: KeyringVault | None = None,
    code_timeout: float | None = DEFAULT_CODE_TIMEOUT_SECONDS,
    output_dir: Path | None = None,
    log_dir: Path | None = None,
    page_factory: PageFactory | None = None,
    load_entry_points: bool = True,
) -> FetchRuntime:
    """Create and wire the fetch components.

    Args:
        session_factory: Factory for database sessions.
        registry: Script registry (a new one is created if omitted).
        vault: Credential vault (defaults to the keyring service).
        code_timeout: Seconds to wait for a code; None waits forever.
        output_dir: Folder exported documents are written to.
        log_dir: Folder for the debug log.
        page_factory: Creates a browser page per account.
        load_entry_points: Register installed site script plugins.
    """
    if registry is None:
        registry = ScriptRegistry()
        if load_entry_points:
            registry.load_entry_points()

    emitter = FetchEventEmitter()
    sse = SSEFetchObserver()
    emitter.add_observer(sse)

    relay = CodeRelay(emitter=emitter, timeout=code_timeout)
    artifacts = ArtifactTable()
    vault = vault or KeyringVault(SERVICE_NAME)

    orchestrator = FetchOrchestrator(
        session_factory=session_factory,
        vault=vault,
        registry=registry,
        code_relay=relay,
        artifacts=artifacts,
        emitter=emitter,
        page_factory=page_factory,
    )
    return FetchRuntime(
        session_factory=session_factory,
        vault=vault,
        registry=registry,
        emitter=emitter,
        relay=relay,
        artifacts=artifacts,
        sse=sse,
        orchestrator=orchestrator,
        output_dir=Path(output_dir) if output_dir else get_default_output_dir(),
        log_dir=log_dir,
    )
