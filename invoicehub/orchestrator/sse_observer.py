"""SSE observer for real-time fetch event streaming.

Provides a FetchEventObserver implementation that fans fetch events out to
Server-Sent Events (SSE) connections for web clients.
"""

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)


class SSEFetchObserver:
    """Observer that bridges fetch events to SSE connections.

    Every connected client gets its own asyncio.Queue; each event is put on
    all of them. Sessions run one at a time, so there is a single stream.
    """

    def __init__(self) -> None:
        self._queues: list[asyncio.Queue[dict[str, Any]]] = []

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        """Create a queue receiving every subsequent event."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._queues.append(queue)
        logger.debug("SSE subscriber added (%d active)", len(self._queues))
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """Remove a queue when its client disconnects. No-op if unknown."""
        if queue in self._queues:
            self._queues.remove(queue)
            logger.debug("SSE subscriber removed (%d active)", len(self._queues))

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    async def _emit(self, event: str, data: dict[str, Any]) -> None:
        for queue in list(self._queues):
            await queue.put({"event": event, "data": data})

    # FetchEventObserver protocol implementation

    async def on_session_started(self, session_id: str, account_ids: list[str]) -> None:
        await self._emit(
            "session_started",
            {"session_id": session_id, "account_ids": account_ids},
        )

    async def on_account_started(
        self, session_id: str, account_id: str, account_name: str
    ) -> None:
        await self._emit(
            "account_started",
            {
                "session_id": session_id,
                "account_id": account_id,
                "account_name": account_name,
            },
        )

    async def on_account_completed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        status: str,
        document_count: int,
    ) -> None:
        await self._emit(
            "account_completed",
            {
                "session_id": session_id,
                "account_id": account_id,
                "account_name": account_name,
                "status": status,
                "document_count": document_count,
            },
        )

    async def on_account_failed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        error_code: str,
        message_key: str,
    ) -> None:
        await self._emit(
            "account_failed",
            {
                "session_id": session_id,
                "account_id": account_id,
                "account_name": account_name,
                "error_code": error_code,
                "message_key": message_key,
            },
        )

    async def on_code_requested(
        self, account_id: str, account_name: str, question: str | None
    ) -> None:
        await self._emit(
            "code_requested",
            {"account_id": account_id, "account_name": account_name, "question": question},
        )

    async def on_session_completed(
        self, session_id: str, succeeded: int, failed: int
    ) -> None:
        await self._emit(
            "session_completed",
            {"session_id": session_id, "succeeded": succeeded, "failed": failed},
        )
