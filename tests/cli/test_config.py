"""Tests for CLI configuration loading and validation."""

import pydantic
import pytest
import yaml

from invoicehub.cli.config import (
    FetchConfig,
    InvoiceHubConfig,
    ServerConfig,
    load_config,
    load_config_or_default,
    resolve_env_vars,
)


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep the search path and env overrides away from the developer's setup."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("INVOICEHUB_CONFIG_PATH", raising=False)


class TestDefaults:
    """Tests for config model defaults."""

    def test_server_defaults(self):
        cfg = ServerConfig()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 8000
        assert cfg.log_level == "info"
        assert cfg.log_format == "text"
        assert cfg.log_file is None

    def test_code_timeout_default(self):
        assert FetchConfig().code_timeout_seconds == 600.0

    def test_code_timeout_may_be_disabled(self):
        assert FetchConfig(code_timeout_seconds=None).code_timeout_seconds is None

    def test_code_timeout_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            FetchConfig(code_timeout_seconds=0)

    def test_log_format_is_restricted(self):
        with pytest.raises(pydantic.ValidationError):
            ServerConfig(log_format="xml")


class TestLoadConfig:
    """Tests for YAML loading, env resolution and overrides."""

    def test_no_file_returns_none(self):
        assert load_config() is None

    def test_explicit_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_loads_working_directory_file(self, tmp_path):
        (tmp_path / "invoicehub.yaml").write_text(
            yaml.dump({"server": {"port": 9001}, "vault": {"service_name": "com.example"}})
        )
        cfg = load_config()
        assert cfg.server.port == 9001
        assert cfg.vault.service_name == "com.example"

    def test_resolves_env_references(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EXPORT_ROOT", "/srv/invoices")
        path = tmp_path / "cfg.yaml"
        path.write_text(yaml.dump({"storage": {"output_dir": "${EXPORT_ROOT}/out"}}))

        assert load_config(str(path)).storage.output_dir == "/srv/invoices/out"

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "cfg.yaml"
        path.write_text(yaml.dump({"fetch": {"code_timeout_seconds": 30}}))
        monkeypatch.setenv("INVOICEHUB_FETCH_CODE_TIMEOUT_SECONDS", "90")
        monkeypatch.setenv("INVOICEHUB_SERVER_LOG_FORMAT", "json")

        cfg = load_config(str(path))

        assert cfg.fetch.code_timeout_seconds == 90
        assert cfg.server.log_format == "json"

    def test_null_override_disables_timeout(self, monkeypatch):
        monkeypatch.setenv("INVOICEHUB_FETCH_CODE_TIMEOUT_SECONDS", "null")
        assert load_config_or_default().fetch.code_timeout_seconds is None

    def test_default_without_file(self):
        assert load_config_or_default() == InvoiceHubConfig()

    def test_config_path_env(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.yml"
        path.write_text(yaml.dump({"server": {"host": "0.0.0.0"}}))
        monkeypatch.setenv("INVOICEHUB_CONFIG_PATH", str(path))

        assert load_config().server.host == "0.0.0.0"


def test_resolve_env_vars_missing_is_empty(monkeypatch):
    monkeypatch.delenv("NOT_SET_ANYWHERE", raising=False)
    assert resolve_env_vars("a${NOT_SET_ANYWHERE}b") == "ab"
