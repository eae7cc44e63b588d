"""API routes for the documents of the last fetch session.

All endpoints use /api/v1/documents prefix.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from invoicehub.api.deps import get_runtime
from invoicehub.api.schemas import BulkDeleteRequest, DocumentResponse, ExportResponse
from invoicehub.db.connection import get_db
from invoicehub.orchestrator.runtime import FetchRuntime
from invoicehub.services.document_export import DocumentExporter
from invoicehub.services.document_service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=list[DocumentResponse])
def list_documents(
    account_name: str | None = None,
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> list[DocumentResponse]:
    """List documents, flagging which ones can still be exported."""
    records = DocumentService(db).list_all(account_name=account_name)
    return [
        DocumentResponse.model_validate(r).model_copy(update={"available": r.id in runtime.artifacts})
        for r in records
    ]


@router.delete("")
def delete_all_documents(
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> dict:
    """Delete every document and its held content."""
    count = DocumentService(db).delete_all()
    db.commit()
    runtime.artifacts.clear()
    return {"deleted": count}


@router.post("/bulk-delete")
def bulk_delete_documents(
    data: BulkDeleteRequest,
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> dict:
    """Delete the selected documents and their held content."""
    deleted = DocumentService(db).bulk_delete(data.ids)
    db.commit()
    runtime.artifacts.discard(deleted)
    return {"deleted": deleted}


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> DocumentResponse:
    record = DocumentService(db).get(document_id)
    return DocumentResponse.model_validate(record).model_copy(
        update={"available": record.id in runtime.artifacts}
    )


@router.post("/{document_id}/export", response_model=ExportResponse)
async def export_document(
    document_id: str,
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> ExportResponse:
    """Save a document into the output directory and record the download."""
    exporter = DocumentExporter(db, runtime.artifacts, runtime.output_dir)
    path = await exporter.save_to_disk(document_id)
    db.commit()
    return ExportResponse(id=document_id, path=str(path))


@router.get("/{document_id}/attachment")
async def get_attachment(
    document_id: str,
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> Response:
    """Return the document as a mail attachment (``"<account> - <file>.pdf"``)."""
    exporter = DocumentExporter(db, runtime.artifacts, runtime.output_dir)
    attachment = await exporter.mail_attachment(document_id)
    if attachment.path is not None:
        return FileResponse(
            attachment.path, media_type="application/pdf", filename=attachment.filename
        )
    return Response(
        content=attachment.content or b"",
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{attachment.filename}"'},
    )
