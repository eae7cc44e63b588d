"""Service for account management with vault-indirected credentials.

The database never stores a plaintext credential for a secured account:
every credential field holds an opaque reference into the credential vault.
Plaintext is only materialised by :meth:`AccountService.read_many`, for the
duration of one fetch session.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from invoicehub.db.models import CREDENTIAL_FIELDS, Account, utc_now_iso
from invoicehub.errors import NotFoundError, SecretNotFoundError, ValidationError
from invoicehub.services.keyring_store import KeyringVault
from invoicehub.utils.redaction import redact_for_logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAccount:
    """An account with its credentials dereferenced from the vault.

    Attributes:
        id: Account id.
        name: Display name.
        provider: Provider key.
        credentials: Plaintext credential values keyed by field name.
    """

    id: str
    name: str
    provider: str
    credentials: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def username(self) -> str:
        return self.credentials.get("username", "")

    @property
    def password(self) -> str:
        return self.credentials.get("password", "")


def _check_fields(credentials: dict[str, str]) -> None:
    unknown = set(credentials) - set(CREDENTIAL_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown credential fields: {sorted(unknown)}")


class AccountService:
    """CRUD service for accounts."""

    def __init__(self, db: Session, vault: KeyringVault) -> None:
        self._db = db
        self._vault = vault

    def create(
        self, name: str, provider: str, credentials: dict[str, str] | None = None
    ) -> Account:
        """Create an account, moving every credential into the vault.

        Args:
            name: Display name.
            provider: Provider key selecting the site script.
            credentials: Plaintext credential values keyed by field name.

        Returns:
            The persisted Account.

        Raises:
            ValidationError: If credentials contain unknown field names.
        """
        credentials = credentials or {}
        _check_fields(credentials)
        logger.debug(
            "Creating account: %s",
            redact_for_logging({"name": name, "provider": provider, **credentials}),
        )

        account = Account(name=name, provider=provider, secured=True)
        for field_name, value in credentials.items():
            if value:
                setattr(account, f"{field_name}_ref", self._vault.put(value))
        self._db.add(account)
        self._db.flush()
        logger.info("Created account %s (%s)", account.id, provider)
        return account

    def update(
        self,
        account_id: str,
        name: str | None = None,
        provider: str | None = None,
        credentials: dict[str, str] | None = None,
    ) -> Account:
        """Update an account. Omitted fields keep their current value.

        Each supplied credential gets a fresh vault reference and the
        replaced reference is released. An empty value clears the field.

        Raises:
            NotFoundError: If the account does not exist.
            ValidationError: If credentials contain unknown field names.
        """
        credentials = credentials or {}
        _check_fields(credentials)
        account = self.get(account_id)
        if not account.secured:
            self._secure(account)

        if name is not None:
            account.name = name
        if provider is not None:
            account.provider = provider

        for field_name, value in credentials.items():
            column = f"{field_name}_ref"
            old_ref = getattr(account, column)
            setattr(account, column, self._vault.put(value) if value else None)
            if old_ref:
                self._vault.delete(old_ref)

        account.updated_at = utc_now_iso()
        self._db.flush()
        logger.info("Updated account %s", account.id)
        return account

    def delete(self, account_id: str) -> None:
        """Release every vault entry of the account, then delete it.

        Raises:
            NotFoundError: If the account does not exist.
        """
        account = self.get(account_id)
        if account.secured:
            for ref in account.credential_refs().values():
                if ref:
                    self._vault.delete(ref)
        self._db.delete(account)
        self._db.flush()
        logger.info("Deleted account %s", account_id)

    def get(self, account_id: str) -> Account:
        """Return an account by id.

        Raises:
            NotFoundError: If the account does not exist.
        """
        account = self._db.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def list_all(self) -> list[Account]:
        return self._db.query(Account).order_by(Account.created_at).all()

    def read_many(self, account_ids: list[str]) -> list[ResolvedAccount]:
        """Resolve accounts with plaintext credentials.

        The result follows the order of ``account_ids``; unknown ids are
        skipped. A reference the vault no longer holds resolves to "".
        """
        found = {
            a.id: a
            for a in self._db.query(Account).filter(Account.id.in_(account_ids)).all()
        }
        resolved = []
        for account_id in account_ids:
            account = found.get(account_id)
            if account is None:
                continue
            resolved.append(
                ResolvedAccount(
                    id=account.id,
                    name=account.name,
                    provider=account.provider,
                    credentials=self._dereference(account),
                )
            )
        return resolved

    def _dereference(self, account: Account) -> dict[str, str]:
        values: dict[str, str] = {}
        for field_name, ref in account.credential_refs().items():
            if not ref:
                continue
            if not account.secured:
                values[field_name] = ref
                continue
            try:
                values[field_name] = self._vault.get(ref)
            except SecretNotFoundError:
                logger.warning(
                    "Vault entry missing for %s of account %s", field_name, account.id
                )
                values[field_name] = ""
        return values

    def mark_auth_failed(self, account_id: str) -> None:
        self._set_flags(account_id, auth_failed=True)

    def mark_fetch_failed(self, account_id: str) -> None:
        self._set_flags(account_id, fetch_failed=True)

    def clear_failures(self, account_id: str) -> None:
        """Unset both failure flags after a successful fetch."""
        self._set_flags(account_id, auth_failed=False, fetch_failed=False)

    def _set_flags(self, account_id: str, **flags: bool) -> None:
        account = self._db.get(Account, account_id)
        if account is None:
            logger.warning("Cannot set flags on missing account %s", account_id)
            return
        for name, value in flags.items():
            setattr(account, name, value)
        account.updated_at = utc_now_iso()
        self._db.flush()

    def secure_legacy_records(self) -> int:
        """Move raw credential values of unsecured records into the vault.

        Returns:
            Number of records migrated.
        """
        legacy = self._db.query(Account).filter(Account.secured.is_(False)).all()
        for account in legacy:
            self._secure(account)
        if legacy:
            self._db.flush()
            logger.info("Secured credentials of %d legacy account(s)", len(legacy))
        return len(legacy)

    def _secure(self, account: Account) -> None:
        for field_name, raw in account.credential_refs().items():
            if raw:
                setattr(account, f"{field_name}_ref", self._vault.put(raw))
        account.secured = True
        account.updated_at = utc_now_iso()
