"""API routes for fetch sessions, code relay and live events.

Provides:
- POST /fetch: start a session (background, or awaited with ?wait=true)
- GET /fetch: state of the running or last session
- GET /fetch/codes: pending verification code requests
- POST /fetch/codes/{account_id}: answer a pending request
- GET /fetch/events: Server-Sent Events stream of fetch progress
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from uuid import uuid4

from fastapi import APIRouter, Depends, Request, Response
from sse_starlette.sse import EventSourceResponse

from invoicehub.api.deps import get_runtime
from invoicehub.api.schemas import (
    AccountResultResponse,
    CodeRequestResponse,
    CodeSubmit,
    FetchRequest,
    FetchSessionResponse,
)
from invoicehub.errors import NotFoundError
from invoicehub.orchestrator.fetch import FetchSession
from invoicehub.orchestrator.runtime import FetchRuntime
from invoicehub.orchestrator.sse_observer import SSEFetchObserver
from invoicehub.scripts.base import DateRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/fetch", tags=["fetch"])

_PING_INTERVAL_SECONDS = 15.0


def _session_response(session: FetchSession, running: bool) -> FetchSessionResponse:
    return FetchSessionResponse(
        session_id=session.id,
        running=running,
        account_ids=session.account_ids,
        started_at=session.started_at,
        finished_at=session.finished_at,
        results=[AccountResultResponse.model_validate(r) for r in session.results],
    )


@router.post("", response_model=FetchSessionResponse, status_code=202)
async def start_fetch(
    data: FetchRequest,
    response: Response,
    wait: bool = False,
    runtime: FetchRuntime = Depends(get_runtime),
) -> FetchSessionResponse:
    """Start a fetch session for the given accounts.

    By default the session runs in the background and progress is reported
    on /fetch/events. With ``wait=true`` the request returns the results.
    """
    session_id = str(uuid4())
    date_range = DateRange(start=data.start, end=data.end)

    if wait:
        await runtime.orchestrator.run_fetch(date_range, data.account_ids, session_id=session_id)
        response.status_code = 200
        return _session_response(runtime.orchestrator.last_session, running=False)

    runtime.start_fetch(date_range, data.account_ids, session_id)
    return FetchSessionResponse(
        session_id=session_id,
        running=True,
        account_ids=data.account_ids,
    )


@router.get("", response_model=FetchSessionResponse)
def get_fetch_status(runtime: FetchRuntime = Depends(get_runtime)) -> FetchSessionResponse:
    """Return the running session, or the last finished one."""
    current = runtime.orchestrator.current_session
    if current is not None:
        return _session_response(current, running=True)
    last = runtime.orchestrator.last_session
    if last is None:
        raise NotFoundError("Fetch session", "last")
    return _session_response(last, running=False)


@router.get("/codes", response_model=list[CodeRequestResponse])
def list_code_requests(runtime: FetchRuntime = Depends(get_runtime)) -> list[CodeRequestResponse]:
    """List pending code requests so a reconnecting client can re-prompt."""
    return [CodeRequestResponse.model_validate(r) for r in runtime.relay.pending_requests()]


@router.post("/codes/{account_id}")
def submit_code(
    account_id: str,
    data: CodeSubmit,
    runtime: FetchRuntime = Depends(get_runtime),
) -> dict:
    """Answer the pending code request of an account."""
    if not runtime.relay.submit_code(account_id, data.code):
        raise NotFoundError("Code request", account_id)
    return {"status": "submitted", "account_id": account_id}


async def _event_generator(
    request: Request,
    observer: SSEFetchObserver,
    queue: asyncio.Queue,
) -> AsyncGenerator[dict, None]:
    """Generate SSE events from a subscriber queue, pinging when idle."""
    try:
        while True:
            if await request.is_disconnected():
                break
            try:
                event = await asyncio.wait_for(queue.get(), timeout=_PING_INTERVAL_SECONDS)
                yield {
                    "data": json.dumps({"event": event["event"], "data": event["data"]}),
                }
            except asyncio.TimeoutError:
                yield {"data": json.dumps({"event": "ping"})}
    finally:
        observer.unsubscribe(queue)


@router.get("/events")
async def stream_events(
    request: Request,
    runtime: FetchRuntime = Depends(get_runtime),
) -> EventSourceResponse:
    """Stream fetch progress and code requests via Server-Sent Events."""
    queue = runtime.sse.subscribe()
    return EventSourceResponse(
        _event_generator(request, runtime.sse, queue),
        media_type="text/event-stream",
    )
