"""CLI output formatters for Rich tables and JSON.

Provides human-readable Rich tables (default) and machine-parseable JSON
output (--json flag). All formatting goes through these functions so the
CLI commands stay clean.
"""

import json
from typing import Any

from rich.table import Table

from invoicehub.db.models import Account, DocumentRecord
from invoicehub.errors import InvoiceHubError, format_error_summary
from invoicehub.orchestrator.fetch import AccountResult
from invoicehub.scripts.catalog import ProviderInfo

# Status color map
STATUS_COLORS = {
    "success": "green",
    "auth_failed": "red",
    "fetch_failed": "red",
    "unsupported": "yellow",
    "not_found": "dim",
}


def _account_flags(account: Account) -> str:
    flags = []
    if account.auth_failed:
        flags.append("[red]auth failed[/red]")
    if account.fetch_failed:
        flags.append("[red]fetch failed[/red]")
    return ", ".join(flags) or "[green]ok[/green]"


def format_account_table(accounts: list[Account], as_json: bool = False) -> Table | str:
    """Format accounts as a Rich table or JSON. Credentials are never shown."""
    if as_json:
        return json.dumps(
            [
                {
                    "id": a.id,
                    "name": a.name,
                    "provider": a.provider,
                    "auth_failed": a.auth_failed,
                    "fetch_failed": a.fetch_failed,
                }
                for a in accounts
            ],
            indent=2,
        )
    if not accounts:
        return "No accounts configured."

    table = Table(title="Accounts")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Provider")
    table.add_column("Status")
    for account in accounts:
        table.add_row(account.id, account.name, account.provider, _account_flags(account))
    return table


def format_provider_table(
    providers: list[ProviderInfo], supported: set[str], as_json: bool = False
) -> Table | str:
    """Format the provider catalog."""
    if as_json:
        return json.dumps(
            [
                {
                    "key": p.key,
                    "label": p.label,
                    "url": p.url,
                    "credentials": p.credentials,
                    "supported": p.key in supported,
                }
                for p in providers
            ],
            indent=2,
        )
    table = Table(title="Providers")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Credentials")
    table.add_column("Script", justify="center")
    for p in providers:
        table.add_row(
            p.key,
            p.label,
            ", ".join(f"{k}={v}" for k, v in p.credentials.items()),
            "[green]yes[/green]" if p.key in supported else "[dim]no[/dim]",
        )
    return table


def format_document_table(
    documents: list[DocumentRecord], available: set[str] | None = None, as_json: bool = False
) -> Table | str:
    """Format document metadata rows."""
    available = available or set()
    if as_json:
        return json.dumps(
            [
                {
                    "id": d.id,
                    "account_name": d.account_name,
                    "description": d.description,
                    "issued_on": d.issued_on,
                    "file_name": d.file_name,
                    "available": d.id in available,
                }
                for d in documents
            ],
            indent=2,
        )
    if not documents:
        return "No documents."

    table = Table(title="Documents")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Account")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("File")
    for d in documents:
        table.add_row(d.id, d.account_name, d.issued_on or "-", d.description, d.file_name)
    return table


def format_results_table(results: list[AccountResult], as_json: bool = False) -> Table | str:
    """Format the per-account results of a fetch session."""
    if as_json:
        return json.dumps([_result_dict(r) for r in results], indent=2)

    table = Table(title="Fetch results")
    table.add_column("Account")
    table.add_column("Status")
    table.add_column("Documents", justify="right")
    table.add_column("Error")
    for r in results:
        color = STATUS_COLORS.get(r.status.value, "white")
        table.add_row(
            r.account_name or r.account_id,
            f"[{color}]{r.status.value}[/{color}]",
            str(r.document_count),
            f"{r.error_code}: {r.message_key}" if r.error_code else "",
        )
    return table


def _result_dict(result: AccountResult) -> dict[str, Any]:
    return {
        "account_id": result.account_id,
        "account_name": result.account_name,
        "status": result.status.value,
        "document_ids": result.document_ids,
        "error_code": result.error_code,
        "message_key": result.message_key,
    }


def format_failure_summary(results: list[AccountResult]) -> str | None:
    """Summarize failed accounts grouped by error code, or None if none failed."""
    errors = [
        InvoiceHubError.from_code(r.error_code, account_name=r.account_name or r.account_id)
        for r in results
        if r.error_code
    ]
    if not errors:
        return None
    return format_error_summary(errors)
