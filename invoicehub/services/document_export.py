"""Resolve fetched documents to a file on disk or a mail attachment.

Both operations look the document up in the metadata store and its content
in the artifact table; a document whose artifact is gone raises
ArtifactNotAvailableError.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from sqlalchemy.orm import Session

from invoicehub.errors import InvoiceHubError
from invoicehub.orchestrator.artifacts import ArtifactTable
from invoicehub.scripts.base import BytesArtifact, FileArtifact
from invoicehub.services.delivery_service import DeliveryKind, DeliveryService
from invoicehub.services.document_service import DocumentService
from invoicehub.services.file_naming import mail_attachment_name, render_file_name
from invoicehub.services.settings_service import SettingsService

logger = logging.getLogger(__name__)


@dataclass
class MailAttachment:
    """Attachment payload: exactly one of ``content`` or ``path`` is set."""

    filename: str
    content: bytes | None = field(default=None, repr=False)
    path: Path | None = None


class DocumentExporter:
    """Saves documents to the output directory and builds mail attachments."""

    def __init__(self, db: Session, artifacts: ArtifactTable, output_dir: Path) -> None:
        self._db = db
        self._artifacts = artifacts
        self._output_dir = Path(output_dir)

    def target_path(self, document_id: str) -> Path:
        """Return where ``save_to_disk`` would write the document."""
        record = DocumentService(self._db).get(document_id)
        settings = SettingsService(self._db).snapshot()
        name = render_file_name(
            settings.file_name_format,
            suggested=record.file_name,
            description=record.description,
            issued_on=_parse_date(record.issued_on),
            account_name=record.account_name,
            date_format=settings.date_format,
        )
        return self._output_dir / name

    async def save_to_disk(self, document_id: str, mark_downloaded: bool = True) -> Path:
        """Write a document into the output directory.

        Raises:
            NotFoundError: If the document does not exist.
            ArtifactNotAvailableError: If its content is no longer held.
            InvoiceHubError: E-1002 if the output directory cannot be created.
        """
        record = DocumentService(self._db).get(document_id)
        artifact = self._artifacts.get(document_id)
        path = self.target_path(document_id)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create output dir %s: %s", path.parent, e)
            raise InvoiceHubError.from_code("E-1002", path=str(path.parent)) from e

        await artifact.save_as(path)
        logger.info("Saved document %s to %s", document_id, path)

        if mark_downloaded:
            DeliveryService(self._db).mark(
                DeliveryKind.DOWNLOADED, record.account_name, record.file_name
            )
        return path

    async def mail_attachment(self, document_id: str) -> MailAttachment:
        """Build the attachment payload for a document.

        In-memory artifacts are returned as content; file artifacts by path.

        Raises:
            NotFoundError: If the document does not exist.
            ArtifactNotAvailableError: If its content is no longer held.
        """
        record = DocumentService(self._db).get(document_id)
        artifact = self._artifacts.get(document_id)
        filename = mail_attachment_name(record.account_name, record.file_name)

        if isinstance(artifact, FileArtifact):
            return MailAttachment(filename=filename, path=Path(artifact.path))
        if isinstance(artifact, BytesArtifact):
            return MailAttachment(filename=filename, content=artifact.content)
        return MailAttachment(filename=filename, content=await artifact.read_bytes())


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None
