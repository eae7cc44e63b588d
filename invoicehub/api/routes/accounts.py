"""API routes for account management.

Credentials are accepted in requests and moved straight into the vault;
responses never contain them. All endpoints use /api/v1/accounts prefix.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from invoicehub.api.deps import get_account_service
from invoicehub.api.schemas import AccountCreate, AccountResponse, AccountUpdate
from invoicehub.db.connection import get_db
from invoicehub.services.account_service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    service: AccountService = Depends(get_account_service),
) -> list[AccountResponse]:
    """List all accounts with their failure flags."""
    return [AccountResponse.model_validate(a) for a in service.list_all()]


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    data: AccountCreate,
    service: AccountService = Depends(get_account_service),
    db: Session = Depends(get_db),
) -> AccountResponse:
    """Create an account."""
    account = service.create(data.name, data.provider, data.credentials.supplied())
    db.commit()
    return AccountResponse.model_validate(account)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """Get one account."""
    return AccountResponse.model_validate(service.get(account_id))


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    data: AccountUpdate,
    service: AccountService = Depends(get_account_service),
    db: Session = Depends(get_db),
) -> AccountResponse:
    """Update an account (patch semantics)."""
    account = service.update(
        account_id,
        name=data.name,
        provider=data.provider,
        credentials=data.credentials.supplied() if data.credentials else None,
    )
    db.commit()
    return AccountResponse.model_validate(account)


@router.delete("/{account_id}", status_code=204)
def delete_account(
    account_id: str,
    service: AccountService = Depends(get_account_service),
    db: Session = Depends(get_db),
) -> None:
    """Delete an account and release its vault entries."""
    service.delete(account_id)
    db.commit()
