"""Typed domain exceptions for API error mapping.

Routes catch these by type instead of matching message strings:

    try:
        account = service.get(account_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
"""


class DomainError(Exception):
    """Base exception for all domain errors.

    ``message_key`` is the stable key a UI uses to localise the message.
    """

    message_key = "datastoreError"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class NotFoundError(DomainError):
    """Resource was not found. Maps to HTTP 404."""

    message_key = "notFound"

    def __init__(self, resource_type: str, identifier: str) -> None:
        super().__init__(f"{resource_type} '{identifier}' not found")
        self.resource_type = resource_type
        self.identifier = identifier


class ConflictError(DomainError):
    """Resource conflict (e.g., duplicate). Maps to HTTP 409."""

    message_key = "conflict"


class ValidationError(DomainError):
    """Validation failure. Maps to HTTP 400."""

    message_key = "validationFailed"


class ArtifactNotAvailableError(NotFoundError):
    """No artifact is held for a document id. Maps to HTTP 404."""

    message_key = "downloadIsNotAvailable"

    def __init__(self, document_id: str) -> None:
        super().__init__("Artifact", document_id)
        self.document_id = document_id


class SecretNotFoundError(NotFoundError):
    """A vault reference does not resolve to a stored secret."""

    message_key = "secretNotFound"

    def __init__(self, reference: str) -> None:
        super().__init__("Secret", reference)
        self.reference = reference
