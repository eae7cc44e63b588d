"""Service for the document metadata of the current fetch session."""

import logging
from datetime import date

from sqlalchemy import delete
from sqlalchemy.orm import Session

from invoicehub.db.models import DocumentRecord
from invoicehub.errors import NotFoundError

logger = logging.getLogger(__name__)


class DocumentService:
    """CRUD service for DocumentRecord rows."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def create(
        self,
        account_name: str,
        file_name: str,
        description: str = "",
        issued_on: date | None = None,
        account_id: str | None = None,
    ) -> DocumentRecord:
        record = DocumentRecord(
            account_id=account_id,
            account_name=account_name,
            description=description,
            issued_on=issued_on.isoformat() if issued_on else None,
            file_name=file_name,
        )
        self._db.add(record)
        self._db.flush()
        return record

    def get(self, document_id: str) -> DocumentRecord:
        """Return a document by id.

        Raises:
            NotFoundError: If the document does not exist.
        """
        record = self._db.get(DocumentRecord, document_id)
        if record is None:
            raise NotFoundError("Document", document_id)
        return record

    def list_all(self, account_name: str | None = None) -> list[DocumentRecord]:
        query = self._db.query(DocumentRecord)
        if account_name is not None:
            query = query.filter(DocumentRecord.account_name == account_name)
        return query.order_by(DocumentRecord.account_name, DocumentRecord.created_at).all()

    def delete_all(self) -> int:
        """Truncate the document table. Returns the number of rows removed."""
        result = self._db.execute(delete(DocumentRecord))
        self._db.flush()
        count = result.rowcount or 0
        logger.debug("Deleted %d document row(s)", count)
        return count

    def bulk_delete(self, document_ids: list[str]) -> list[str]:
        """Delete the given documents.

        Returns:
            Ids that existed and were deleted.
        """
        if not document_ids:
            return []
        rows = (
            self._db.query(DocumentRecord)
            .filter(DocumentRecord.id.in_(document_ids))
            .all()
        )
        for row in rows:
            self._db.delete(row)
        self._db.flush()
        return [row.id for row in rows]
