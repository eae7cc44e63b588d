"""Tests for logging setup, debug mode and error redaction."""

import json
import logging
from datetime import datetime

import pytest

from invoicehub.utils.logging_config import configure_logging, debug_log_path, set_debug_mode
from invoicehub.utils.redaction import redact_for_logging, sanitize_error_message


@pytest.fixture(autouse=True)
def _restore_logging(monkeypatch):
    monkeypatch.setattr("invoicehub.utils.logging_config._configured_level", logging.INFO)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    monkeypatch.undo()
    set_debug_mode(False)
    root.handlers[:] = handlers
    root.setLevel(level)


def test_debug_log_path_name(tmp_path):
    path = debug_log_path(tmp_path, datetime(2024, 3, 5))
    assert path == tmp_path / "Debug-log-05-03-2024.log"


def test_debug_mode_writes_app_records(tmp_path):
    path = set_debug_mode(True, tmp_path)

    logging.getLogger("invoicehub.test").debug("looking at page")

    assert path is not None
    assert "looking at page" in path.read_text()


def test_disabling_debug_mode_removes_handler(tmp_path):
    set_debug_mode(True, tmp_path)
    assert set_debug_mode(False, tmp_path) is None

    app_logger = logging.getLogger("invoicehub")
    assert app_logger.level == logging.INFO
    assert not [h for h in app_logger.handlers if h.get_name() == "invoicehub-debug-file"]


def test_disabling_debug_mode_restores_configured_level(tmp_path):
    configure_logging("warning")
    set_debug_mode(True, tmp_path)
    assert logging.getLogger("invoicehub").level == logging.DEBUG

    set_debug_mode(False, tmp_path)

    assert logging.getLogger("invoicehub").level == logging.WARNING


def test_enabling_twice_keeps_one_handler(tmp_path):
    set_debug_mode(True, tmp_path)
    set_debug_mode(True, tmp_path)
    handlers = [
        h for h in logging.getLogger("invoicehub").handlers if h.get_name() == "invoicehub-debug-file"
    ]
    assert len(handlers) == 1


def test_json_format_to_file(tmp_path):
    log_file = tmp_path / "app.log"
    configure_logging("info", "json", str(log_file))

    logging.getLogger("invoicehub.test").info("fetch started")
    for handler in logging.getLogger().handlers:
        handler.flush()

    record = json.loads(log_file.read_text().splitlines()[-1])
    assert record["message"] == "fetch started"
    assert record["name"] == "invoicehub.test"
    assert record["levelname"] == "INFO"


def test_sanitize_error_message_masks_secrets():
    text = sanitize_error_message("login failed: password=hunter2 token: abc123")
    assert "hunter2" not in text
    assert "abc123" not in text


def test_sanitize_error_message_truncates():
    assert len(sanitize_error_message("x" * 600)) == 500
    assert sanitize_error_message(None) is None


def test_redact_for_logging():
    redacted = redact_for_logging(
        {"name": "Ben", "password": "pw", "password_ref": "ref", "nested": {"token": "t"}}
    )
    assert redacted == {
        "name": "Ben",
        "password": "***REDACTED***",
        "password_ref": "***REDACTED***",
        "nested": {"token": "***REDACTED***"},
    }
