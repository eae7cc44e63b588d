"""Database module for InvoiceHub state management and persistence."""

from invoicehub.db.connection import (
    SessionFactory,
    SessionLocal,
    engine,
    get_db,
    init_db,
    make_session_factory,
    session_scope,
)
from invoicehub.db.models import (
    CREDENTIAL_FIELDS,
    Account,
    AppSettings,
    DocumentRecord,
    DownloadedDocument,
    EmailedDocument,
)

__all__ = [
    # Models
    "Account",
    "AppSettings",
    "DocumentRecord",
    "DownloadedDocument",
    "EmailedDocument",
    "CREDENTIAL_FIELDS",
    # Connection
    "engine",
    "SessionLocal",
    "SessionFactory",
    "get_db",
    "init_db",
    "make_session_factory",
    "session_scope",
]
