"""Pydantic schemas for API request/response validation.

This module defines the data contracts for the InvoiceHub REST API:
accounts, providers, fetch sessions, documents and delivery records.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Account schemas


class AccountCredentials(BaseModel):
    """Plaintext credentials; only ever accepted, never returned."""

    model_config = ConfigDict(extra="forbid")

    username: str | None = None
    password: str | None = None
    account_id: str | None = None
    business_id: str | None = None

    def supplied(self) -> dict[str, str]:
        """Fields that were explicitly sent, empty string clearing a field."""
        return {k: v or "" for k, v in self.model_dump(exclude_unset=True).items()}


class AccountCreate(BaseModel):
    """Request schema for creating an account."""

    name: str = Field(..., min_length=1, max_length=255)
    provider: str = Field(..., min_length=1, max_length=255)
    credentials: AccountCredentials = AccountCredentials()


class AccountUpdate(BaseModel):
    """Request schema for updating an account (all fields optional)."""

    name: str | None = Field(None, min_length=1, max_length=255)
    provider: str | None = Field(None, min_length=1, max_length=255)
    credentials: AccountCredentials | None = None


class AccountResponse(BaseModel):
    """Response schema for an account. Credentials are never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    provider: str
    secured: bool
    auth_failed: bool
    fetch_failed: bool
    created_at: str
    updated_at: str


class ProviderResponse(BaseModel):
    """Response schema for a catalog entry."""

    model_config = ConfigDict(from_attributes=True)

    key: str
    label: str
    url: str
    credentials: dict[str, str]
    supported: bool = False


# Fetch schemas


class FetchRequest(BaseModel):
    """Request schema for starting a fetch session."""

    account_ids: list[str] = Field(..., min_length=1)
    start: date | None = None
    end: date | None = None

    @model_validator(mode="after")
    def start_before_end(self) -> "FetchRequest":
        if self.start and self.end and self.start > self.end:
            raise ValueError("start must not be after end")
        return self


class AccountResultResponse(BaseModel):
    """Outcome for one requested account."""

    model_config = ConfigDict(from_attributes=True)

    account_id: str
    account_name: str | None = None
    status: str
    document_ids: list[str] = []
    error_code: str | None = None
    message_key: str | None = None
    error_message: str | None = None


class FetchSessionResponse(BaseModel):
    """State of a fetch session."""

    session_id: str
    running: bool
    account_ids: list[str] = []
    started_at: str | None = None
    finished_at: str | None = None
    results: list[AccountResultResponse] = []


class CodeSubmit(BaseModel):
    """Verification code or security answer for a pending request."""

    code: str


class CodeRequestResponse(BaseModel):
    """A pending code request."""

    model_config = ConfigDict(from_attributes=True)

    account_id: str
    account_name: str
    question: str | None = None
    requested_at: str


# Document schemas


class DocumentResponse(BaseModel):
    """Response schema for document metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    account_id: str | None = None
    account_name: str
    description: str
    issued_on: str | None = None
    file_name: str
    created_at: str
    available: bool = False


class BulkDeleteRequest(BaseModel):
    """Ids of documents to delete."""

    ids: list[str] = Field(..., min_length=1)


class ExportResponse(BaseModel):
    """Where a document was written."""

    id: str
    path: str


# Delivery schemas


class DeliveryCreate(BaseModel):
    """Request schema for marking a document delivered."""

    account_name: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)


class DeliveryResponse(BaseModel):
    """Response schema for a delivery record."""

    model_config = ConfigDict(from_attributes=True)

    account_name: str
    file_name: str
    delivered_at: str
