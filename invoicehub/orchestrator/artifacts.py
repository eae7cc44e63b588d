"""In-process table correlating document ids with their fetched artifacts.

Artifacts are never persisted. The orchestrator registers one right after
the matching DocumentRecord row is stored, clears the table when a new
fetch session starts, and evicts entries when their rows are deleted.
"""

import logging
import threading
from collections.abc import Iterable

from invoicehub.errors import ArtifactNotAvailableError
from invoicehub.scripts.base import Artifact

logger = logging.getLogger(__name__)


class ArtifactTable:
    """Thread-safe document id -> Artifact map."""

    def __init__(self) -> None:
        self._artifacts: dict[str, Artifact] = {}
        self._lock = threading.Lock()

    def put(self, document_id: str, artifact: Artifact) -> None:
        with self._lock:
            self._artifacts[document_id] = artifact

    def get(self, document_id: str) -> Artifact:
        """Return the artifact for a document.

        Raises:
            ArtifactNotAvailableError: If no artifact is held for the id.
        """
        artifact = self.find(document_id)
        if artifact is None:
            raise ArtifactNotAvailableError(document_id)
        return artifact

    def find(self, document_id: str) -> Artifact | None:
        with self._lock:
            return self._artifacts.get(document_id)

    def discard(self, document_ids: Iterable[str]) -> int:
        """Evict the given ids. Returns how many were held."""
        removed = 0
        with self._lock:
            for document_id in document_ids:
                if self._artifacts.pop(document_id, None) is not None:
                    removed += 1
        return removed

    def clear(self) -> int:
        """Evict everything. Returns how many entries were held."""
        with self._lock:
            count = len(self._artifacts)
            self._artifacts.clear()
        if count:
            logger.debug("Evicted %d artifact(s)", count)
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)

    def __contains__(self, document_id: object) -> bool:
        with self._lock:
            return document_id in self._artifacts
