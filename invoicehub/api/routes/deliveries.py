"""API routes for delivery records (emailed and downloaded documents).

All endpoints use /api/v1/deliveries/{kind} where kind is
``emailed`` or ``downloaded``.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from invoicehub.api.schemas import DeliveryCreate, DeliveryResponse
from invoicehub.db.connection import get_db
from invoicehub.services.delivery_service import DeliveryKind, DeliveryService

router = APIRouter(prefix="/deliveries", tags=["deliveries"])


def _get_service(db: Session = Depends(get_db)) -> DeliveryService:
    """Dependency injector for DeliveryService."""
    return DeliveryService(db)


@router.get("/{kind}", response_model=list[DeliveryResponse])
def list_deliveries(
    kind: DeliveryKind,
    service: DeliveryService = Depends(_get_service),
) -> list[DeliveryResponse]:
    return [DeliveryResponse.model_validate(r) for r in service.list_records(kind)]


@router.post("/{kind}", status_code=201)
def mark_delivered(
    kind: DeliveryKind,
    data: DeliveryCreate,
    response: Response,
    service: DeliveryService = Depends(_get_service),
    db: Session = Depends(get_db),
) -> dict:
    """Record a delivery. Already recorded documents return 200."""
    created = service.mark(kind, data.account_name, data.file_name)
    db.commit()
    if not created:
        response.status_code = 200
    return {"created": created, "kind": kind.value}


@router.delete("/{kind}")
def reset_deliveries(
    kind: DeliveryKind,
    service: DeliveryService = Depends(_get_service),
    db: Session = Depends(get_db),
) -> dict:
    """Remove every record of one kind."""
    count = service.reset(kind)
    db.commit()
    return {"deleted": count, "kind": kind.value}
