"""Tests for AccountService: vault indirection, CRUD and failure flags."""

import pytest

from invoicehub.db.models import Account
from invoicehub.errors import NotFoundError, ValidationError
from invoicehub.services.account_service import AccountService


@pytest.fixture
def service(db, vault) -> AccountService:
    return AccountService(db, vault)


class TestCreate:
    def test_stores_only_references(self, service, vault, db):
        account = service.create("Spotify", "spotify", {"username": "me", "password": "pw"})
        db.commit()

        row = db.get(Account, account.id)
        assert row.secured is True
        assert row.username_ref not in (None, "me")
        assert row.password_ref not in (None, "pw")
        assert vault.get(row.username_ref) == "me"
        assert vault.get(row.password_ref) == "pw"
        assert row.account_id_ref is None

    def test_empty_values_are_not_stored(self, service):
        account = service.create("Ben", "ben", {"username": "me", "password": ""})
        assert account.password_ref is None

    def test_unknown_field_rejected(self, service, memory_keyring):
        with pytest.raises(ValidationError):
            service.create("X", "ben", {"pin": "1234"})
        assert memory_keyring.store == {}

    def test_failure_flags_start_cleared(self, service):
        account = service.create("Ben", "ben", {"username": "me"})
        assert account.auth_failed is False
        assert account.fetch_failed is False


class TestUpdate:
    def test_replaces_reference_and_releases_old(self, service, vault):
        account = service.create("Ben", "ben", {"username": "me", "password": "old"})
        old_ref = account.password_ref

        service.update(account.id, credentials={"password": "new"})

        assert account.password_ref != old_ref
        assert vault.get(account.password_ref) == "new"
        assert vault.find(old_ref) is None

    def test_omitted_fields_keep_value(self, service, vault):
        account = service.create("Ben", "ben", {"username": "me", "password": "pw"})
        username_ref = account.username_ref

        service.update(account.id, name="Ben mobiel")

        assert account.name == "Ben mobiel"
        assert account.username_ref == username_ref
        assert vault.get(username_ref) == "me"

    def test_empty_value_clears_field(self, service, vault):
        account = service.create("Ben", "ben", {"username": "me", "password": "pw"})
        old_ref = account.password_ref

        service.update(account.id, credentials={"password": ""})

        assert account.password_ref is None
        assert vault.find(old_ref) is None

    def test_missing_account(self, service):
        with pytest.raises(NotFoundError):
            service.update("missing", name="x")

    def test_secures_legacy_record(self, service, vault, db):
        legacy = Account(name="Old", provider="ben", username_ref="raw-user", password_ref="raw-pw")
        db.add(legacy)
        db.flush()

        service.update(legacy.id, credentials={"password": "new-pw"})

        assert legacy.secured is True
        assert vault.get(legacy.username_ref) == "raw-user"
        assert vault.get(legacy.password_ref) == "new-pw"


class TestDelete:
    def test_releases_vault_entries(self, service, memory_keyring, db):
        account = service.create("Ben", "ben", {"username": "me", "password": "pw"})
        assert len(memory_keyring.store) == 2

        service.delete(account.id)

        assert memory_keyring.store == {}
        assert db.get(Account, account.id) is None

    def test_missing_account(self, service):
        with pytest.raises(NotFoundError):
            service.delete("missing")


class TestReadMany:
    def test_resolves_plaintext_in_requested_order(self, service):
        a = service.create("A", "ben", {"username": "a", "password": "pa"})
        b = service.create("B", "ben", {"username": "b", "password": "pb"})

        resolved = service.read_many([b.id, "unknown", a.id])

        assert [r.name for r in resolved] == ["B", "A"]
        assert resolved[0].username == "b"
        assert resolved[0].password == "pb"

    def test_missing_vault_entry_resolves_empty(self, service, vault):
        account = service.create("A", "ben", {"username": "a", "password": "pa"})
        vault.delete(account.password_ref)

        (resolved,) = service.read_many([account.id])

        assert resolved.password == ""
        assert resolved.username == "a"

    def test_unsecured_record_uses_raw_values(self, service, db):
        legacy = Account(name="Old", provider="ben", username_ref="raw-user")
        db.add(legacy)
        db.flush()

        (resolved,) = service.read_many([legacy.id])

        assert resolved.username == "raw-user"

    def test_credentials_hidden_from_repr(self, service):
        account = service.create("A", "ben", {"password": "topsecret"})
        (resolved,) = service.read_many([account.id])
        assert "topsecret" not in repr(resolved)


class TestFlags:
    def test_mark_and_clear(self, service):
        account = service.create("A", "ben", {"username": "a"})

        service.mark_auth_failed(account.id)
        service.mark_fetch_failed(account.id)
        assert account.auth_failed and account.fetch_failed

        service.clear_failures(account.id)
        assert not account.auth_failed and not account.fetch_failed

    def test_missing_account_is_ignored(self, service):
        service.mark_auth_failed("missing")


def test_secure_legacy_records(service, vault, db):
    db.add(Account(name="Old", provider="ben", username_ref="raw", password_ref="rawpw"))
    db.add(Account(name="Empty", provider="ben"))
    service.create("New", "ben", {"username": "n"})
    db.flush()

    assert service.secure_legacy_records() == 2
    assert service.secure_legacy_records() == 0

    old = db.query(Account).filter_by(name="Old").one()
    assert old.secured is True
    assert vault.get(old.username_ref) == "raw"
    assert vault.get(old.password_ref) == "rawpw"
