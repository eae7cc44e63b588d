"""Service for application settings management.

Provides singleton access to AppSettings with patch-style updates.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from invoicehub.db.models import AppSettings, utc_now_iso
from invoicehub.errors import ValidationError
from invoicehub.utils.logging_config import set_debug_mode

logger = logging.getLogger(__name__)

# Fields that can be updated via PATCH
_MUTABLE_FIELDS = {
    "file_name_format",
    "date_format",
    "debug_mode",
    "license_key",
}


@dataclass(frozen=True)
class SettingsSnapshot:
    """Read-only copy of the settings handed to site scripts and exporters."""

    file_name_format: str
    date_format: str
    debug_mode: bool
    license_key: str


class SettingsService:
    """CRUD service for the AppSettings singleton."""

    def __init__(self, db: Session, log_dir: Path | None = None) -> None:
        self._db = db
        self._log_dir = log_dir

    def get_or_create(self) -> AppSettings:
        """Return the settings singleton, creating it with defaults if absent."""
        settings = self._db.query(AppSettings).first()
        if settings is None:
            settings = AppSettings()
            self._db.add(settings)
            self._db.flush()
            logger.info("Created AppSettings singleton: %s", settings.id)
        return settings

    def update(self, patch: dict[str, Any]) -> AppSettings:
        """Apply patch-style updates to settings.

        Switching ``debug_mode`` takes effect on the process logging
        immediately.

        Args:
            patch: Dict of field names to new values.

        Returns:
            Updated AppSettings instance.

        Raises:
            ValidationError: If patch contains unknown field names.
        """
        unknown = set(patch.keys()) - _MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown setting fields: {sorted(unknown)}")

        settings = self.get_or_create()
        for key, value in patch.items():
            setattr(settings, key, value)
        settings.updated_at = utc_now_iso()
        self._db.flush()

        if "debug_mode" in patch:
            set_debug_mode(bool(settings.debug_mode), self._log_dir)
        return settings

    def snapshot(self) -> SettingsSnapshot:
        settings = self.get_or_create()
        return SettingsSnapshot(
            file_name_format=settings.file_name_format,
            date_format=settings.date_format,
            debug_mode=settings.debug_mode,
            license_key=settings.license_key,
        )
