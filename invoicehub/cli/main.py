"""InvoiceHub CLI.

Unified entry point for the API server, account management, fetch
sessions, documents and settings.

Usage:
    invoicehub serve                 Start the API server
    invoicehub accounts list         List configured accounts
    invoicehub fetch --all           Fetch documents for every account
    invoicehub documents list        List documents of the last fetch
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.prompt import Prompt

from invoicehub.cli.config import InvoiceHubConfig, load_config_or_default
from invoicehub.cli.http_client import HttpClient, InvoiceHubClientError
from invoicehub.cli.output import (
    format_account_table,
    format_document_table,
    format_failure_summary,
    format_provider_table,
    format_results_table,
)

_log = logging.getLogger(__name__)

app = typer.Typer(
    name="invoicehub",
    help="Collect billing documents from online accounts",
    no_args_is_help=True,
)
accounts_app = typer.Typer(help="Manage accounts")
documents_app = typer.Typer(help="Documents of the last fetch session")
deliveries_app = typer.Typer(help="Emailed and downloaded records")
settings_app = typer.Typer(help="Application settings")
config_app = typer.Typer(help="Configuration management")

app.add_typer(accounts_app, name="accounts")
app.add_typer(documents_app, name="documents")
app.add_typer(deliveries_app, name="deliveries")
app.add_typer(settings_app, name="settings")
app.add_typer(config_app, name="config")

console = Console()
err_console = Console(stderr=True)

# --- Global state ---
_config_path: str | None = None


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to invoicehub.yaml config file"
    ),
):
    """InvoiceHub: collect billing documents from online accounts."""
    global _config_path
    _config_path = config


def _load_config() -> InvoiceHubConfig:
    try:
        return load_config_or_default(_config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None


def _session_factory(cfg: InvoiceHubConfig):
    from invoicehub.db.connection import init_db, make_session_factory

    factory = make_session_factory(cfg.storage.database_url)
    init_db(bind=factory.kw["bind"])
    return factory


def _vault(cfg: InvoiceHubConfig):
    from invoicehub.services.keyring_store import KeyringVault

    return KeyringVault(cfg.vault.service_name)


def _print(rendered: Any) -> None:
    if isinstance(rendered, str) and rendered.lstrip().startswith(("[", "{")):
        console.print_json(rendered)
    else:
        console.print(rendered)


def _parse_date(value: str | None, name: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"{name} must be YYYY-MM-DD", param_hint=f"--{name}") from None


# --- Server ---


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
):
    """Start the API server."""
    import uvicorn

    cfg = _load_config()
    uvicorn.run(
        "invoicehub.api.main:app",
        host=host or cfg.server.host,
        port=port or cfg.server.port,
        workers=1,
        log_level=cfg.server.log_level,
    )


@app.command()
def version():
    """Show InvoiceHub version."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as pkg_version

    from invoicehub import __version__

    try:
        v = pkg_version("invoicehub")
    except PackageNotFoundError:
        v = __version__
    console.print(f"[bold]InvoiceHub[/bold] v{v}")


# --- Providers ---


@app.command()
def providers(as_json: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List supported providers and their credential fields."""
    from invoicehub.scripts.catalog import get_providers
    from invoicehub.scripts.registry import ScriptRegistry

    registry = ScriptRegistry()
    registry.load_entry_points()
    _print(format_provider_table(get_providers(), set(registry.keys()), as_json=as_json))


# --- Accounts ---


def _collect_credentials(
    username: str | None,
    password: str | None,
    account_id: str | None,
    business_id: str | None,
) -> dict[str, str]:
    values = {
        "username": username,
        "password": password,
        "account_id": account_id,
        "business_id": business_id,
    }
    return {k: v for k, v in values.items() if v is not None}


@accounts_app.command("list")
def accounts_list(as_json: bool = typer.Option(False, "--json", help="Output as JSON")):
    """List configured accounts and their failure flags."""
    from invoicehub.db.connection import session_scope
    from invoicehub.services.account_service import AccountService

    cfg = _load_config()
    with session_scope(_session_factory(cfg)) as db:
        accounts = AccountService(db, _vault(cfg)).list_all()
        _print(format_account_table(accounts, as_json=as_json))


@accounts_app.command("add")
def accounts_add(
    name: str = typer.Argument(..., help="Display name"),
    provider: str = typer.Argument(..., help="Provider key (see `invoicehub providers`)"),
    username: Optional[str] = typer.Option(None, "--username"),
    password: Optional[str] = typer.Option(None, "--password"),
    account_id: Optional[str] = typer.Option(None, "--account-id"),
    business_id: Optional[str] = typer.Option(None, "--business-id"),
):
    """Add an account. Credentials go straight into the system keychain."""
    from invoicehub.db.connection import session_scope
    from invoicehub.scripts.catalog import get_provider
    from invoicehub.services.account_service import AccountService

    info = get_provider(provider)
    if info is None:
        console.print(f"[yellow]Provider '{provider}' is not in the catalog.[/yellow]")
    elif password is None and "password" in info.credentials:
        password = Prompt.ask(info.credentials["password"], password=True, console=console)

    cfg = _load_config()
    credentials = _collect_credentials(username, password, account_id, business_id)
    with session_scope(_session_factory(cfg)) as db:
        account = AccountService(db, _vault(cfg)).create(name, provider, credentials)
        console.print(f"[green]Added account[/green] {account.name} ({account.id})")


@accounts_app.command("update")
def accounts_update(
    account: str = typer.Argument(..., help="Account ID"),
    name: Optional[str] = typer.Option(None, "--name"),
    provider: Optional[str] = typer.Option(None, "--provider"),
    username: Optional[str] = typer.Option(None, "--username"),
    password: Optional[str] = typer.Option(None, "--password"),
    account_id: Optional[str] = typer.Option(None, "--account-id"),
    business_id: Optional[str] = typer.Option(None, "--business-id"),
):
    """Update an account. Omitted options keep their current value."""
    from invoicehub.db.connection import session_scope
    from invoicehub.errors import DomainError
    from invoicehub.services.account_service import AccountService

    cfg = _load_config()
    credentials = _collect_credentials(username, password, account_id, business_id)
    try:
        with session_scope(_session_factory(cfg)) as db:
            updated = AccountService(db, _vault(cfg)).update(
                account, name=name, provider=provider, credentials=credentials or None
            )
            console.print(f"[green]Updated account[/green] {updated.name}")
    except DomainError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


@accounts_app.command("remove")
def accounts_remove(
    account: str = typer.Argument(..., help="Account ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Remove an account and its keychain entries."""
    from invoicehub.db.connection import session_scope
    from invoicehub.errors import DomainError
    from invoicehub.services.account_service import AccountService

    if not yes and not typer.confirm(f"Remove account {account}?"):
        raise typer.Exit(0)
    cfg = _load_config()
    try:
        with session_scope(_session_factory(cfg)) as db:
            AccountService(db, _vault(cfg)).delete(account)
    except DomainError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    console.print(f"[green]Removed account[/green] {account}")


# --- Fetch ---


class TerminalObserver:
    """Prints progress and prompts for verification codes on the terminal.

    Answers are read by a single daemon thread and handed to whichever
    request is pending when a line arrives. A request that times out leaves
    no blocked reader behind that would keep the process alive.
    """

    def __init__(
        self,
        relay,
        out: Console | None = None,
        show_progress: bool = True,
        read_line: Callable[[], str] | None = None,
    ) -> None:
        self._relay = relay
        self._console = out or console
        self._show_progress = show_progress
        self._read_line = read_line or self._console.input
        self._reader: threading.Thread | None = None

    async def on_account_started(self, session_id: str, account_id: str, account_name: str) -> None:
        if self._show_progress:
            self._console.print(f"[blue]Fetching[/blue] {account_name}...")

    async def on_account_failed(
        self,
        session_id: str,
        account_id: str,
        account_name: str,
        error_code: str,
        message_key: str,
    ) -> None:
        if self._show_progress:
            self._console.print(f"[red]{account_name}: {message_key} ({error_code})[/red]")

    async def on_code_requested(
        self, account_id: str, account_name: str, question: str | None
    ) -> None:
        label = question or f"Verification code for {account_name}"
        self._console.print(f"[bold]{label}[/bold]: ", end="")
        if self._reader is None or not self._reader.is_alive():
            self._reader = threading.Thread(
                target=self._read_answers, name="code-prompt", daemon=True
            )
            self._reader.start()

    def _read_answers(self) -> None:
        while True:
            try:
                line = self._read_line()
            except EOFError:
                return
            pending = self._relay.pending_requests()
            if not pending:
                self._console.print("[yellow]No code request is waiting; input ignored.[/yellow]")
                continue
            self._relay.submit_code(pending[0].account_id, line.strip())


@app.command()
def fetch(
    account_ids: Optional[list[str]] = typer.Argument(None, help="Account IDs to fetch"),
    all_accounts: bool = typer.Option(False, "--all", help="Fetch every account"),
    start: Optional[str] = typer.Option(None, "--start", help="Earliest issue date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Latest issue date (YYYY-MM-DD)"),
    export: bool = typer.Option(False, "--export", help="Save fetched documents to the output dir"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Fetch documents, prompting for verification codes when asked."""
    from invoicehub.db.connection import session_scope
    from invoicehub.orchestrator.runtime import build_runtime
    from invoicehub.scripts.base import DateRange
    from invoicehub.services.account_service import AccountService
    from invoicehub.services.document_export import DocumentExporter

    date_range = DateRange(start=_parse_date(start, "start"), end=_parse_date(end, "end"))
    cfg = _load_config()
    factory = _session_factory(cfg)
    runtime = build_runtime(
        factory,
        vault=_vault(cfg),
        code_timeout=cfg.fetch.code_timeout_seconds,
        output_dir=Path(cfg.storage.output_dir) if cfg.storage.output_dir else None,
    )

    ids = list(account_ids or [])
    if all_accounts:
        with session_scope(factory) as db:
            ids = [a.id for a in AccountService(db, runtime.vault).list_all()]
    if not ids:
        console.print("[yellow]No accounts selected. Pass IDs or --all.[/yellow]")
        raise typer.Exit(1)

    # Prompts go to stderr with --json so stdout stays parseable.
    runtime.emitter.add_observer(
        TerminalObserver(
            runtime.relay,
            out=err_console if as_json else console,
            show_progress=not as_json,
        )
    )

    async def _run():
        results = await runtime.orchestrator.run_fetch(date_range, ids)
        saved: list[Path] = []
        if export:
            with session_scope(factory) as db:
                exporter = DocumentExporter(db, runtime.artifacts, runtime.output_dir)
                for result in results:
                    for document_id in result.document_ids:
                        saved.append(await exporter.save_to_disk(document_id))
        return results, saved

    results, saved = asyncio.run(_run())
    _print(format_results_table(results, as_json=as_json))
    if as_json:
        return
    summary = format_failure_summary(results)
    if summary:
        console.print(summary, markup=False)
    if saved:
        console.print(f"Saved {len(saved)} document(s) to {runtime.output_dir}")


@app.command()
def code(
    account_id: str = typer.Argument(..., help="Account waiting for a code"),
    value: str = typer.Argument(..., help="Verification code or security answer"),
    server: str = typer.Option("http://127.0.0.1:8000", "--server", help="Server base URL"),
):
    """Answer a pending code request on a running server."""

    async def _run():
        async with HttpClient(server) as client:
            await client.submit_code(account_id, value)

    try:
        asyncio.run(_run())
    except InvoiceHubClientError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from None
    console.print(f"[green]Code submitted for[/green] {account_id}")


# --- Documents ---


@documents_app.command("list")
def documents_list(
    account_name: Optional[str] = typer.Option(None, "--account", help="Filter by account name"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List documents of the last fetch session."""
    from invoicehub.db.connection import session_scope
    from invoicehub.services.document_service import DocumentService

    cfg = _load_config()
    with session_scope(_session_factory(cfg)) as db:
        documents = DocumentService(db).list_all(account_name=account_name)
        _print(format_document_table(documents, as_json=as_json))


@documents_app.command("export")
def documents_export(
    document_ids: list[str] = typer.Argument(..., help="Document IDs"),
    server: str = typer.Option("http://127.0.0.1:8000", "--server", help="Server base URL"),
):
    """Save documents to disk through the server that fetched them."""

    async def _run() -> list[str]:
        async with HttpClient(server) as client:
            return [await client.export_document(d) for d in document_ids]

    try:
        paths = asyncio.run(_run())
    except InvoiceHubClientError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from None
    for path in paths:
        console.print(f"[green]Saved[/green] {path}")


@documents_app.command("reset")
def documents_reset(yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")):
    """Delete every document row."""
    from invoicehub.db.connection import session_scope
    from invoicehub.services.document_service import DocumentService

    if not yes and not typer.confirm("Delete all documents?"):
        raise typer.Exit(0)
    cfg = _load_config()
    with session_scope(_session_factory(cfg)) as db:
        count = DocumentService(db).delete_all()
    console.print(f"Deleted {count} document(s)")


# --- Deliveries ---


@deliveries_app.command("list")
def deliveries_list(kind: str = typer.Argument(..., help="emailed or downloaded")):
    """List delivery records of one kind."""
    from invoicehub.db.connection import session_scope
    from invoicehub.services.delivery_service import DeliveryKind, DeliveryService

    try:
        delivery_kind = DeliveryKind(kind)
    except ValueError:
        raise typer.BadParameter("kind must be 'emailed' or 'downloaded'") from None
    cfg = _load_config()
    with session_scope(_session_factory(cfg)) as db:
        for record in DeliveryService(db).list_records(delivery_kind):
            console.print(f"{record.delivered_at}  {record.account_name} - {record.file_name}")


@deliveries_app.command("reset")
def deliveries_reset(kind: str = typer.Argument(..., help="emailed or downloaded")):
    """Remove every delivery record of one kind."""
    from invoicehub.db.connection import session_scope
    from invoicehub.services.delivery_service import DeliveryKind, DeliveryService

    try:
        delivery_kind = DeliveryKind(kind)
    except ValueError:
        raise typer.BadParameter("kind must be 'emailed' or 'downloaded'") from None
    cfg = _load_config()
    with session_scope(_session_factory(cfg)) as db:
        count = DeliveryService(db).reset(delivery_kind)
    console.print(f"Removed {count} {delivery_kind.value} record(s)")


# --- Settings ---


@settings_app.command("show")
def settings_show():
    """Show application settings."""
    from invoicehub.db.connection import session_scope
    from invoicehub.services.settings_service import SettingsService

    cfg = _load_config()
    with session_scope(_session_factory(cfg)) as db:
        snapshot = SettingsService(db).snapshot()
    console.print(f"  file_name_format: {snapshot.file_name_format}")
    console.print(f"  date_format: {snapshot.date_format}")
    console.print(f"  debug_mode: {snapshot.debug_mode}")
    console.print(f"  license_key: {'set' if snapshot.license_key else 'not set'}")


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help="Setting name"),
    value: str = typer.Argument(..., help="New value"),
):
    """Change one setting."""
    from invoicehub.db.connection import session_scope
    from invoicehub.errors import ValidationError
    from invoicehub.services.settings_service import SettingsService

    parsed: Any = value
    if key == "debug_mode":
        parsed = value.lower() in ("1", "true", "yes", "on")
    cfg = _load_config()
    try:
        with session_scope(_session_factory(cfg)) as db:
            SettingsService(db).update({key: parsed})
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    console.print(f"[green]{key}[/green] updated")


# --- Config ---


@config_app.command("show")
def config_show():
    """Display resolved configuration."""
    cfg = _load_config()

    console.print("[bold]Server:[/bold]")
    console.print(f"  host: {cfg.server.host}")
    console.print(f"  port: {cfg.server.port}")
    console.print(f"  log_level: {cfg.server.log_level}")
    console.print(f"  log_format: {cfg.server.log_format}")

    console.print("\n[bold]Fetch:[/bold]")
    timeout = cfg.fetch.code_timeout_seconds
    console.print(f"  code_timeout_seconds: {timeout if timeout is not None else 'none'}")

    console.print("\n[bold]Storage:[/bold]")
    console.print(f"  database_url: {cfg.storage.database_url or 'default'}")
    console.print(f"  output_dir: {cfg.storage.output_dir or 'default'}")

    console.print("\n[bold]Vault:[/bold]")
    console.print(f"  service_name: {cfg.vault.service_name}")


if __name__ == "__main__":
    app()
