"""SQLAlchemy ORM models for the InvoiceHub state database.

Defines accounts (with vault-indirected credentials), the current fetch
session's document metadata, delivery records for emailed and downloaded
documents, and the settings singleton. Uses SQLAlchemy 2.0 style with
Mapped and mapped_column.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import Index, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def generate_uuid() -> str:
    """Generate a UUID4 string for primary keys."""
    return str(uuid4())


def utc_now_iso() -> str:
    """Generate current UTC timestamp in ISO8601 format."""
    return datetime.now(UTC).isoformat()


# Credential fields an account may carry. Each is persisted as "<field>_ref".
CREDENTIAL_FIELDS: tuple[str, ...] = ("username", "password", "account_id", "business_id")

DEFAULT_FILE_NAME_FORMAT = "[suggested-filename]"
DEFAULT_DATE_FORMAT = "d-M-yyyy"


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Account(Base):
    """A configured, credentialed source of billing documents.

    Credential columns never hold plaintext once ``secured`` is set: they
    contain opaque references into the credential vault.

    Attributes:
        id: UUID primary key
        name: Display name chosen by the user
        provider: Provider key selecting the site script
        username_ref: Vault reference for the username / e-mail / client id
        password_ref: Vault reference for the password / token / secret
        account_id_ref: Vault reference for an account-scoped identifier
        business_id_ref: Vault reference for a business-scoped identifier
        secured: True once all credential columns hold vault references
        auth_failed: Set when the last fetch failed during authentication
        fetch_failed: Set when the last fetch failed after authentication
        created_at: ISO8601 timestamp of creation
        updated_at: ISO8601 timestamp of last update
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    provider: Mapped[str] = mapped_column(String(255), nullable=False)

    username_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    password_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_id_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    business_id_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    secured: Mapped[bool] = mapped_column(nullable=False, default=False)

    auth_failed: Mapped[bool] = mapped_column(nullable=False, default=False)
    fetch_failed: Mapped[bool] = mapped_column(nullable=False, default=False)

    created_at: Mapped[str] = mapped_column(String(50), nullable=False, default=utc_now_iso)
    updated_at: Mapped[str] = mapped_column(String(50), nullable=False, default=utc_now_iso)

    def credential_refs(self) -> dict[str, str | None]:
        """Return the credential column values keyed by field name."""
        return {field: getattr(self, f"{field}_ref") for field in CREDENTIAL_FIELDS}

    def __repr__(self) -> str:
        return f"<Account(id={self.id!r}, name={self.name!r}, provider={self.provider!r})>"


class DocumentRecord(Base):
    """Metadata for one billing document discovered in the current session.

    The table holds at most one result set: it is truncated at the start of
    every fetch session. The binary content lives only in the in-process
    artifact table, keyed by ``id``.

    Attributes:
        id: UUID primary key (also the artifact table key)
        account_id: Account the document was fetched for
        account_name: Display name of the source account
        description: Human readable description from the source
        issued_on: ISO date the document was issued, when the source exposes it
        file_name: Suggested file name reported by the site script
        created_at: ISO8601 timestamp of creation
    """

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    account_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    issued_on: Mapped[str | None] = mapped_column(String(10), nullable=True)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[str] = mapped_column(String(50), nullable=False, default=utc_now_iso)

    __table_args__ = (Index("idx_documents_account_name", "account_name"),)

    def __repr__(self) -> str:
        return f"<DocumentRecord(id={self.id!r}, account_name={self.account_name!r}, file_name={self.file_name!r})>"


class EmailedDocument(Base):
    """Marker that a document (account name + file name) has been e-mailed."""

    __tablename__ = "emailed_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    delivered_at: Mapped[str] = mapped_column(String(50), nullable=False, default=utc_now_iso)

    __table_args__ = (
        UniqueConstraint("account_name", "file_name", name="uq_emailed_account_file"),
    )


class DownloadedDocument(Base):
    """Marker that a document (account name + file name) has been saved to disk."""

    __tablename__ = "downloaded_documents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    delivered_at: Mapped[str] = mapped_column(String(50), nullable=False, default=utc_now_iso)

    __table_args__ = (
        UniqueConstraint("account_name", "file_name", name="uq_downloaded_account_file"),
    )


class AppSettings(Base):
    """Application settings singleton.

    Attributes:
        file_name_format: Naming template for exported documents
        date_format: date-fns style pattern used for the [date] tag
        debug_mode: Whether verbose debug logging is written to disk
        license_key: License key entered by the user
    """

    __tablename__ = "app_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    file_name_format: Mapped[str] = mapped_column(
        String(255), nullable=False, default=DEFAULT_FILE_NAME_FORMAT
    )
    date_format: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_DATE_FORMAT
    )
    debug_mode: Mapped[bool] = mapped_column(nullable=False, default=False)
    license_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    updated_at: Mapped[str] = mapped_column(String(50), nullable=False, default=utc_now_iso)
