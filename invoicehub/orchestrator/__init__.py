"""Fetch orchestration for InvoiceHub.

Main Entry Points:
    FetchOrchestrator: Runs site scripts for a set of accounts, one at a time.
    build_runtime: Wires orchestrator, code relay, artifact table and events.

Supporting Components:
    CodeRelay: Out-of-band verification code requests.
    ArtifactTable: Document id -> fetched content.
    FetchEventEmitter / SSEFetchObserver: Progress notifications.
"""

from invoicehub.orchestrator.artifacts import ArtifactTable
from invoicehub.orchestrator.code_relay import CodeRelay, CodeRequestInfo
from invoicehub.orchestrator.events import FetchEventEmitter, FetchEventObserver
from invoicehub.orchestrator.fetch import (
    TRANSITIONS,
    AccountFetchStatus,
    AccountResult,
    AccountStateMachine,
    FetchOrchestrator,
    FetchSession,
    FetchState,
    InvalidStateTransition,
)
from invoicehub.orchestrator.runtime import FetchRuntime, build_runtime
from invoicehub.orchestrator.sse_observer import SSEFetchObserver

__all__ = [
    "ArtifactTable",
    "CodeRelay",
    "CodeRequestInfo",
    "FetchEventEmitter",
    "FetchEventObserver",
    "SSEFetchObserver",
    "TRANSITIONS",
    "AccountFetchStatus",
    "AccountResult",
    "AccountStateMachine",
    "FetchOrchestrator",
    "FetchSession",
    "FetchState",
    "InvalidStateTransition",
    "FetchRuntime",
    "build_runtime",
]
