"""Credential vault backed by the system keychain.

Uses the `keyring` library which maps to:
  macOS: Keychain Access
  Windows: Windows Credential Manager
  Linux: Secret Service API

Secrets are stored under the service name 'com.invoicehub.app', each under a
freshly generated UUID reference. The database only ever stores the
reference; the vault is the only place the plaintext lives at rest.
"""

import logging
from uuid import uuid4

import keyring
import keyring.errors

from invoicehub.errors import SecretNotFoundError

logger = logging.getLogger(__name__)

SERVICE_NAME = "com.invoicehub.app"


class KeyringVault:
    """Opaque reference -> secret store on top of keyring."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        self._service = service_name

    @property
    def service_name(self) -> str:
        return self._service

    def put(self, secret: str) -> str:
        """Store a secret under a new reference and return the reference."""
        reference = str(uuid4())
        keyring.set_password(self._service, reference, secret)
        logger.debug("Stored secret under reference %s", reference)
        return reference

    def get(self, reference: str) -> str:
        """Return the secret for a reference.

        Raises:
            SecretNotFoundError: If nothing is stored under the reference.
        """
        value = self.find(reference)
        if value is None:
            raise SecretNotFoundError(reference)
        return value

    def find(self, reference: str) -> str | None:
        """Return the secret for a reference, or None when absent or unreadable."""
        try:
            return keyring.get_password(self._service, reference)
        except keyring.errors.KeyringError:
            logger.warning("Keyring read failed for %s", reference, exc_info=True)
            return None

    def delete(self, reference: str) -> bool:
        """Release a reference. Returns False if it was already gone."""
        try:
            keyring.delete_password(self._service, reference)
        except keyring.errors.PasswordDeleteError:
            logger.debug("Secret %s not found for deletion", reference)
            return False
        logger.debug("Deleted secret %s", reference)
        return True

    def has(self, reference: str) -> bool:
        """Check if a reference resolves to a secret."""
        return self.find(reference) is not None
