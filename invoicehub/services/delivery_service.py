"""Delivery records for documents that were e-mailed or saved to disk.

A record is identified by (account name, file name). Marking the same
document twice is a no-op that reports it was already recorded.
"""

import logging
from enum import Enum

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from invoicehub.db.models import DownloadedDocument, EmailedDocument


class DeliveryKind(str, Enum):
    """Kinds of delivery that are tracked."""

    EMAILED = "emailed"
    DOWNLOADED = "downloaded"


_MODELS = {
    DeliveryKind.EMAILED: EmailedDocument,
    DeliveryKind.DOWNLOADED: DownloadedDocument,
}

logger = logging.getLogger(__name__)


class DeliveryService:
    """Mark, list and reset delivery records."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def mark(self, kind: DeliveryKind, account_name: str, file_name: str) -> bool:
        """Record a delivery.

        Returns:
            True if a new record was stored, False if it already existed.
        """
        if self.is_delivered(kind, account_name, file_name):
            return False
        model = _MODELS[DeliveryKind(kind)]
        try:
            with self._db.begin_nested():
                self._db.add(model(account_name=account_name, file_name=file_name))
        except IntegrityError:
            logger.debug("%s already recorded: %s / %s", kind, account_name, file_name)
            return False
        return True

    def is_delivered(self, kind: DeliveryKind, account_name: str, file_name: str) -> bool:
        model = _MODELS[DeliveryKind(kind)]
        return (
            self._db.query(model)
            .filter(model.account_name == account_name, model.file_name == file_name)
            .first()
            is not None
        )

    def list_records(self, kind: DeliveryKind) -> list[EmailedDocument] | list[DownloadedDocument]:
        model = _MODELS[DeliveryKind(kind)]
        return self._db.query(model).order_by(model.delivered_at).all()

    def reset(self, kind: DeliveryKind) -> int:
        """Remove every record of one kind. Returns the number removed."""
        model = _MODELS[DeliveryKind(kind)]
        result = self._db.execute(delete(model))
        self._db.flush()
        count = result.rowcount or 0
        logger.info("Reset %d %s record(s)", count, DeliveryKind(kind).value)
        return count
