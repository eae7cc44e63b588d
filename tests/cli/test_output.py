"""Tests for CLI output formatters."""

import json

from rich.table import Table

from invoicehub.cli.output import (
    format_account_table,
    format_document_table,
    format_failure_summary,
    format_provider_table,
    format_results_table,
)
from invoicehub.db.models import Account, DocumentRecord
from invoicehub.orchestrator.fetch import AccountFetchStatus, AccountResult
from invoicehub.scripts.catalog import get_provider


def _account(**overrides) -> Account:
    values = dict(id="acc-1", name="Ben", provider="ben", auth_failed=False, fetch_failed=False)
    values.update(overrides)
    return Account(**values)


def test_account_json_never_contains_references():
    account = _account(username_ref="ref-1", auth_failed=True)
    (row,) = json.loads(format_account_table([account], as_json=True))
    assert row == {
        "id": "acc-1",
        "name": "Ben",
        "provider": "ben",
        "auth_failed": True,
        "fetch_failed": False,
    }


def test_account_table():
    assert isinstance(format_account_table([_account()]), Table)
    assert format_account_table([]) == "No accounts configured."


def test_provider_json_marks_supported():
    providers = [get_provider("ben"), get_provider("canva")]
    rows = json.loads(format_provider_table(providers, {"ben"}, as_json=True))
    assert [(r["key"], r["supported"]) for r in rows] == [("ben", True), ("canva", False)]


def test_document_json_marks_available():
    doc = DocumentRecord(
        id="doc-1", account_name="Ben", description="March", issued_on="2024-03-05", file_name="a.pdf"
    )
    (row,) = json.loads(format_document_table([doc], {"doc-1"}, as_json=True))
    assert row["available"] is True
    assert row["issued_on"] == "2024-03-05"


def test_results_json():
    results = [
        AccountResult(account_id="a", status=AccountFetchStatus.success, account_name="A", document_ids=["d"]),
        AccountResult(
            account_id="b",
            status=AccountFetchStatus.auth_failed,
            error_code="E-5001",
            message_key="authenticationFailed",
        ),
    ]
    rows = json.loads(format_results_table(results, as_json=True))
    assert rows[0]["status"] == "success"
    assert rows[0]["document_ids"] == ["d"]
    assert rows[1]["error_code"] == "E-5001"
    assert isinstance(format_results_table(results), Table)


def test_failure_summary_groups_by_code():
    results = [
        AccountResult(account_id="a", status=AccountFetchStatus.success, account_name="A"),
        AccountResult(
            account_id="b", status=AccountFetchStatus.auth_failed, account_name="B", error_code="E-5001"
        ),
        AccountResult(
            account_id="c", status=AccountFetchStatus.auth_failed, account_name="C", error_code="E-5001"
        ),
        AccountResult(
            account_id="d", status=AccountFetchStatus.fetch_failed, account_name="D", error_code="E-3001"
        ),
    ]

    summary = format_failure_summary(results)

    assert summary.startswith("2 error type(s) found:")
    assert "Affected accounts: B, C" in summary
    assert "E-3001: Failed to fetch documents from D." in summary


def test_failure_summary_none_when_all_succeed():
    results = [AccountResult(account_id="a", status=AccountFetchStatus.success, account_name="A")]
    assert format_failure_summary(results) is None
