"""Tests for settings and delivery record endpoints."""

import pytest

from invoicehub.utils.logging_config import set_debug_mode


@pytest.fixture(autouse=True)
def _reset_debug_mode():
    yield
    set_debug_mode(False)


def test_get_settings_defaults(client):
    body = client.get("/api/v1/settings").json()
    assert body["file_name_format"] == "[suggested-filename]"
    assert body["date_format"] == "d-M-yyyy"
    assert body["debug_mode"] is False


def test_patch_settings(client):
    resp = client.patch("/api/v1/settings", json={"date_format": "yyyy-MM-dd"})
    assert resp.status_code == 200
    assert resp.json()["date_format"] == "yyyy-MM-dd"
    assert client.get("/api/v1/settings").json()["date_format"] == "yyyy-MM-dd"


def test_patch_without_fields(client):
    assert client.patch("/api/v1/settings", json={}).status_code == 400


def test_debug_mode_writes_log_file(client, runtime):
    client.patch("/api/v1/settings", json={"debug_mode": True})
    assert list(runtime.log_dir.glob("Debug-log-*.log"))


def test_mark_delivery_is_idempotent(client):
    payload = {"account_name": "Ben", "file_name": "invoice.pdf"}

    first = client.post("/api/v1/deliveries/emailed", json=payload)
    second = client.post("/api/v1/deliveries/emailed", json=payload)

    assert first.status_code == 201
    assert first.json()["created"] is True
    assert second.status_code == 200
    assert second.json()["created"] is False
    assert len(client.get("/api/v1/deliveries/emailed").json()) == 1
    assert client.get("/api/v1/deliveries/downloaded").json() == []


def test_reset_deliveries(client):
    client.post("/api/v1/deliveries/emailed", json={"account_name": "Ben", "file_name": "a.pdf"})

    resp = client.delete("/api/v1/deliveries/emailed")

    assert resp.json() == {"deleted": 1, "kind": "emailed"}
    assert client.get("/api/v1/deliveries/emailed").json() == []


def test_unknown_delivery_kind(client):
    assert client.get("/api/v1/deliveries/printed").status_code == 422
