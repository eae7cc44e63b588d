"""Tests for fetch session and code relay endpoints."""

from tests.helpers.polling import wait_for


def test_fetch_wait_returns_results(client, create_account):
    ok = create_account("Ben", "static")
    bad = create_account("Broken", "broken-listing")

    resp = client.post(
        "/api/v1/fetch?wait=true", json={"account_ids": [ok["id"], bad["id"]]}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["running"] is False
    statuses = [(r["account_id"], r["status"]) for r in body["results"]]
    assert statuses == [(ok["id"], "success"), (bad["id"], "fetch_failed")]
    assert body["results"][1]["error_code"] == "E-3001"
    assert body["results"][1]["message_key"] == "fetchFailed"

    accounts = {a["id"]: a for a in client.get("/api/v1/accounts").json()}
    assert accounts[bad["id"]]["fetch_failed"] is True
    assert accounts[ok["id"]]["fetch_failed"] is False


def test_fetch_date_range(client, create_account):
    account = create_account("Ben", "static")

    resp = client.post(
        "/api/v1/fetch?wait=true",
        json={"account_ids": [account["id"]], "start": "2024-01-02", "end": "2024-12-31"},
    )

    assert len(resp.json()["results"][0]["document_ids"]) == 1


def test_fetch_rejects_inverted_range(client, create_account):
    account = create_account("Ben", "static")
    resp = client.post(
        "/api/v1/fetch",
        json={"account_ids": [account["id"]], "start": "2024-02-01", "end": "2024-01-01"},
    )
    assert resp.status_code == 422


def test_fetch_requires_accounts(client):
    assert client.post("/api/v1/fetch", json={"account_ids": []}).status_code == 422


def test_status_before_any_session(client):
    assert client.get("/api/v1/fetch").status_code == 404


def test_background_fetch_with_code_relay(client, create_account):
    account = create_account("Bol", "two-factor")

    resp = client.post("/api/v1/fetch", json={"account_ids": [account["id"]]})
    assert resp.status_code == 202
    assert resp.json()["running"] is True

    wait_for(lambda: client.get("/api/v1/fetch/codes").json() != [])
    (pending,) = client.get("/api/v1/fetch/codes").json()
    assert pending["account_id"] == account["id"]
    assert pending["question"] is None

    conflict = client.post("/api/v1/fetch", json={"account_ids": [account["id"]]})
    assert conflict.status_code == 409

    submitted = client.post(f"/api/v1/fetch/codes/{account['id']}", json={"code": "123456"})
    assert submitted.status_code == 200

    wait_for(lambda: client.get("/api/v1/fetch").json()["running"] is False)
    (result,) = client.get("/api/v1/fetch").json()["results"]
    assert result["status"] == "success"


def test_submit_code_without_request(client):
    resp = client.post("/api/v1/fetch/codes/acc-1", json={"code": "1"})
    assert resp.status_code == 404
