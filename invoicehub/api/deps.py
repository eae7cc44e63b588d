"""Shared FastAPI dependencies."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from invoicehub.db.connection import get_db
from invoicehub.orchestrator.runtime import FetchRuntime
from invoicehub.services.account_service import AccountService


def get_runtime(request: Request) -> FetchRuntime:
    """Return the FetchRuntime built by the application lifespan."""
    return request.app.state.runtime


def get_account_service(
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> AccountService:
    """Dependency injector for AccountService."""
    return AccountService(db, runtime.vault)
