"""Tests for the Typer CLI against a file-backed SQLite database."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from invoicehub.cli.main import app
from invoicehub.utils.logging_config import set_debug_mode

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path) -> str:
    path = tmp_path / "invoicehub.yaml"
    path.write_text(
        yaml.dump(
            {
                "storage": {
                    "database_url": f"sqlite:///{tmp_path / 'cli.db'}",
                    "output_dir": str(tmp_path / "exports"),
                },
                "vault": {"service_name": "com.invoicehub.cli-test"},
                "fetch": {"code_timeout_seconds": 5},
            }
        )
    )
    return str(path)


def invoke(config_path: str, *args: str, **kwargs):
    return runner.invoke(app, ["--config", config_path, *args], **kwargs)


def add_account(config_path: str, name: str, provider: str) -> str:
    result = invoke(
        config_path, "accounts", "add", name, provider, "--username", "me", "--password", "pw"
    )
    assert result.exit_code == 0, result.output
    listed = json.loads(invoke(config_path, "accounts", "list", "--json").stdout)
    return next(a["id"] for a in listed if a["name"] == name)


def test_providers_json():
    result = runner.invoke(app, ["providers", "--json"])
    assert result.exit_code == 0
    keys = {p["key"] for p in json.loads(result.stdout)}
    assert {"ben", "bol-retailer", "ziggo"} <= keys


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "config", "show"])
    assert result.exit_code == 1


def test_config_show(config_path):
    result = invoke(config_path, "config", "show")
    assert result.exit_code == 0
    assert "com.invoicehub.cli-test" in result.stdout
    assert "code_timeout_seconds: 5" in result.stdout


def test_account_lifecycle(config_path, memory_keyring):
    account_id = add_account(config_path, "Ben", "ben")
    assert "pw" in memory_keyring.store.values()

    result = invoke(config_path, "accounts", "update", account_id, "--name", "Ben 2")
    assert result.exit_code == 0, result.output
    listed = json.loads(invoke(config_path, "accounts", "list", "--json").stdout)
    assert listed[0]["name"] == "Ben 2"

    result = invoke(config_path, "accounts", "remove", account_id, "--yes")
    assert result.exit_code == 0
    assert memory_keyring.store == {}
    assert json.loads(invoke(config_path, "accounts", "list", "--json").stdout) == []


def test_add_prompts_for_password(config_path, memory_keyring, monkeypatch):
    monkeypatch.setattr("invoicehub.cli.main.Prompt.ask", lambda *args, **kwargs: "typed-pw")
    result = invoke(config_path, "accounts", "add", "Ben", "ben", "--username", "me")
    assert result.exit_code == 0, result.output
    assert "typed-pw" in memory_keyring.store.values()


def test_remove_unknown_account(config_path):
    result = invoke(config_path, "accounts", "remove", "missing", "--yes")
    assert result.exit_code == 1


def test_fetch_and_export(config_path, registry, monkeypatch, tmp_path):
    monkeypatch.setattr("invoicehub.orchestrator.runtime.ScriptRegistry", lambda: registry)
    account_id = add_account(config_path, "Ben", "static")
    unknown_id = add_account(config_path, "Mystery", "no-such-provider")

    result = invoke(config_path, "fetch", "--all", "--export", "--json")

    assert result.exit_code == 0, result.output
    rows = {r["account_id"]: r for r in json.loads(result.stdout)}
    assert rows[account_id]["status"] == "success"
    assert len(rows[account_id]["document_ids"]) == 2
    assert rows[unknown_id]["status"] == "unsupported"
    assert sorted(p.name for p in (tmp_path / "exports").iterdir()) == [
        "invoice-1.pdf",
        "invoice-2.pdf",
    ]

    documents = json.loads(invoke(config_path, "documents", "list", "--json").stdout)
    assert len(documents) == 2

    result = invoke(config_path, "deliveries", "reset", "downloaded")
    assert "Removed 2 downloaded record(s)" in result.stdout


def test_fetch_without_accounts(config_path):
    result = invoke(config_path, "fetch")
    assert result.exit_code == 1


def test_fetch_rejects_bad_date(config_path):
    result = invoke(config_path, "fetch", "--all", "--start", "01-01-2024")
    assert result.exit_code != 0


def test_settings_set_and_show(config_path, tmp_path):
    result = invoke(config_path, "settings", "set", "date_format", "yyyy-MM-dd")
    assert result.exit_code == 0
    assert "date_format: yyyy-MM-dd" in invoke(config_path, "settings", "show").stdout


def test_settings_debug_mode_coerced(config_path, monkeypatch, tmp_path):
    monkeypatch.setattr("invoicehub.utils.logging_config.get_log_dir", lambda: tmp_path)
    try:
        invoke(config_path, "settings", "set", "debug_mode", "true")
        assert "debug_mode: True" in invoke(config_path, "settings", "show").stdout
    finally:
        set_debug_mode(False)


def test_settings_unknown_key(config_path):
    result = invoke(config_path, "settings", "set", "theme", "dark")
    assert result.exit_code == 1


def test_deliveries_unknown_kind(config_path):
    result = invoke(config_path, "deliveries", "list", "printed")
    assert result.exit_code != 0


def test_fetch_json_still_prompts_for_codes(config_path, registry, monkeypatch):
    monkeypatch.setattr("invoicehub.orchestrator.runtime.ScriptRegistry", lambda: registry)
    account_id = add_account(config_path, "Bol", "two-factor")

    result = invoke(config_path, "fetch", account_id, "--json", input="123456\n")

    assert result.exit_code == 0, result.output
    (row,) = json.loads(result.stdout)
    assert row["status"] == "success"
    assert "Verification code for Bol" in result.stderr


def test_fetch_prints_grouped_failures(config_path, registry, monkeypatch):
    monkeypatch.setattr("invoicehub.orchestrator.runtime.ScriptRegistry", lambda: registry)
    first = add_account(config_path, "Ben", "bad-password")
    second = add_account(config_path, "Bol", "bad-password")

    result = invoke(config_path, "fetch", first, second)

    assert result.exit_code == 0, result.output
    assert "E-5001: Authentication Failed" in result.stdout
    assert "Affected accounts: Ben, Bol" in result.stdout
