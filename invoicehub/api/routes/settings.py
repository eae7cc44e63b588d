"""API routes for application settings management.

Provides GET/PATCH for the settings singleton.
All endpoints use /api/v1/settings prefix.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from invoicehub.api.deps import get_runtime
from invoicehub.db.connection import get_db
from invoicehub.orchestrator.runtime import FetchRuntime
from invoicehub.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsResponse(BaseModel):
    """Response schema for app settings."""
    file_name_format: str
    date_format: str
    debug_mode: bool = False
    license_key: str = ""

    model_config = {"from_attributes": True}


class SettingsPatch(BaseModel):
    """Request schema for updating settings (all fields optional)."""
    file_name_format: str | None = None
    date_format: str | None = None
    debug_mode: bool | None = None
    license_key: str | None = None


def _get_service(
    db: Session = Depends(get_db),
    runtime: FetchRuntime = Depends(get_runtime),
) -> SettingsService:
    """Dependency injector for SettingsService."""
    return SettingsService(db, log_dir=runtime.log_dir)


@router.get("", response_model=SettingsResponse)
def get_settings(
    service: SettingsService = Depends(_get_service),
    db: Session = Depends(get_db),
) -> SettingsResponse:
    """Get all application settings."""
    settings = service.get_or_create()
    db.commit()
    return SettingsResponse.model_validate(settings)


@router.patch("", response_model=SettingsResponse)
def update_settings(
    data: SettingsPatch,
    service: SettingsService = Depends(_get_service),
    db: Session = Depends(get_db),
) -> SettingsResponse:
    """Update application settings (patch semantics)."""
    updates = {k: v for k, v in data.model_dump().items() if v is not None}
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    settings = service.update(updates)
    db.commit()
    return SettingsResponse.model_validate(settings)
