"""Tests for the verification code relay."""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest

from invoicehub.errors import CodeRequestSuperseded, CodeRequestTimeout
from invoicehub.orchestrator.code_relay import CodeRelay


@pytest.mark.asyncio
async def test_submit_resolves_pending_request():
    relay = CodeRelay()
    future = relay.request_code("acc-1", "Ben")

    assert relay.has_pending("acc-1")
    assert relay.submit_code("acc-1", "123456") is True
    assert await future == "123456"
    assert not relay.has_pending("acc-1")


@pytest.mark.asyncio
async def test_submit_without_request_returns_false():
    assert CodeRelay().submit_code("acc-1", "123456") is False


@pytest.mark.asyncio
async def test_pending_requests_lists_question():
    relay = CodeRelay()
    relay.request_code("acc-1", "Ben")
    relay.request_code("acc-2", "Bol", "Name of your first pet?")

    pending = {r.account_id: r for r in relay.pending_requests()}

    assert pending["acc-1"].question is None
    assert pending["acc-2"].question == "Name of your first pet?"
    assert pending["acc-2"].account_name == "Bol"
    relay.cancel_all()


@pytest.mark.asyncio
async def test_new_request_supersedes_previous():
    relay = CodeRelay()
    first = relay.request_code("acc-1", "Ben")
    second = relay.request_code("acc-1", "Ben")

    with pytest.raises(CodeRequestSuperseded):
        await first

    relay.submit_code("acc-1", "42")
    assert await second == "42"


@pytest.mark.asyncio
async def test_request_times_out():
    relay = CodeRelay(timeout=0.01)
    future = relay.request_code("acc-1", "Ben")

    with pytest.raises(CodeRequestTimeout):
        await future
    assert not relay.has_pending("acc-1")
    assert relay.submit_code("acc-1", "late") is False


@pytest.mark.asyncio
async def test_no_timeout_waits():
    relay = CodeRelay(timeout=None)
    future = relay.request_code("acc-1", "Ben")
    await asyncio.sleep(0.02)
    assert not future.done()
    relay.submit_code("acc-1", "ok")
    assert await future == "ok"


@pytest.mark.asyncio
async def test_submit_from_another_thread():
    relay = CodeRelay()
    future = relay.request_code("acc-1", "Ben")

    thread = threading.Thread(target=relay.submit_code, args=("acc-1", "999"))
    thread.start()
    thread.join()

    assert await asyncio.wait_for(future, timeout=1) == "999"


@pytest.mark.asyncio
async def test_cancel_all():
    relay = CodeRelay()
    futures = [relay.request_code("acc-1", "Ben"), relay.request_code("acc-2", "Bol")]

    assert relay.cancel_all() == 2
    await asyncio.sleep(0)
    assert all(f.cancelled() for f in futures)
    assert relay.pending_requests() == []


@pytest.mark.asyncio
async def test_request_notifies_emitter():
    emitter = MagicMock()
    emitter.emit_code_requested = AsyncMock()
    relay = CodeRelay(emitter=emitter)

    relay.request_code("acc-1", "Ben", "Question?")
    await asyncio.sleep(0)

    emitter.emit_code_requested.assert_awaited_once_with("acc-1", "Ben", "Question?")
    relay.cancel_all()
