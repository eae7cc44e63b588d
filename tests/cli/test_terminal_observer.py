"""Tests for the terminal prompt that answers code requests."""

import asyncio
import io
import queue

import pytest
from rich.console import Console

from invoicehub.cli.main import TerminalObserver
from invoicehub.errors import CodeRequestTimeout
from invoicehub.orchestrator.code_relay import CodeRelay
from invoicehub.orchestrator.events import FetchEventEmitter


class ScriptedInput:
    """Stands in for stdin: blocks until a line is fed, None means EOF."""

    def __init__(self):
        self.lines: queue.Queue = queue.Queue()

    def __call__(self) -> str:
        line = self.lines.get()
        if line is None:
            raise EOFError
        return line


def _relay_with_prompt(timeout: float | None) -> tuple[CodeRelay, ScriptedInput, io.StringIO]:
    emitter = FetchEventEmitter()
    relay = CodeRelay(emitter, timeout=timeout)
    stdin = ScriptedInput()
    out = io.StringIO()
    emitter.add_observer(
        TerminalObserver(relay, out=Console(file=out), read_line=stdin)
    )
    return relay, stdin, out


def test_typed_code_resolves_request():
    relay, stdin, out = _relay_with_prompt(timeout=5)

    async def scenario():
        future = relay.request_code("acc-1", "Bol")
        stdin.lines.put(" 123456 \n")
        return await future

    try:
        assert asyncio.run(scenario()) == "123456"
        assert "Verification code for Bol" in out.getvalue()
    finally:
        stdin.lines.put(None)


def test_security_question_is_shown():
    relay, stdin, out = _relay_with_prompt(timeout=5)

    async def scenario():
        future = relay.request_code("acc-1", "Bank", "Name of your first pet?")
        stdin.lines.put("Rex")
        return await future

    try:
        assert asyncio.run(scenario()) == "Rex"
        assert "Name of your first pet?" in out.getvalue()
    finally:
        stdin.lines.put(None)


def test_expired_request_leaves_no_blocking_prompt():
    relay, stdin, _ = _relay_with_prompt(timeout=0.05)

    async def scenario():
        with pytest.raises(CodeRequestTimeout):
            await relay.request_code("acc-1", "Bol")

    # Returns although the reader is still waiting for a line.
    asyncio.run(scenario())
    stdin.lines.put(None)


def test_unanswered_request_does_not_swallow_next_answer():
    relay, stdin, _ = _relay_with_prompt(timeout=5)

    async def scenario():
        abandoned = relay.request_code("acc-1", "Bol")
        await asyncio.sleep(0.01)
        relay.cancel_all()
        with pytest.raises(asyncio.CancelledError):
            await abandoned
        future = relay.request_code("acc-2", "Ziggo")
        stdin.lines.put("654321")
        return await future

    try:
        assert asyncio.run(scenario()) == "654321"
    finally:
        stdin.lines.put(None)


def test_input_without_pending_request_is_ignored():
    relay, stdin, out = _relay_with_prompt(timeout=5)

    async def scenario():
        future = relay.request_code("acc-1", "Bol")
        relay.submit_code("acc-1", "from-elsewhere")
        await future
        stdin.lines.put("stray")
        for _ in range(100):
            if "input ignored" in out.getvalue():
                return
            await asyncio.sleep(0.01)

    try:
        asyncio.run(scenario())
        assert "No code request is waiting; input ignored." in out.getvalue()
    finally:
        stdin.lines.put(None)
