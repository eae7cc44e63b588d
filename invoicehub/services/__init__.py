"""Service layer for InvoiceHub.

Provides the account store with vault-indirected credentials, the
document metadata store, delivery records and settings.
"""

from invoicehub.services.account_service import AccountService, ResolvedAccount
from invoicehub.services.delivery_service import DeliveryKind, DeliveryService
from invoicehub.services.document_service import DocumentService
from invoicehub.services.keyring_store import KeyringVault
from invoicehub.services.settings_service import SettingsService, SettingsSnapshot

__all__ = [
    "AccountService",
    "ResolvedAccount",
    "DeliveryKind",
    "DeliveryService",
    "DocumentService",
    "KeyringVault",
    "SettingsService",
    "SettingsSnapshot",
]
