"""Backup document model (export/import file format)."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from pagotrack.models.payment import EmployeeSettings, Payment

BACKUP_VERSION = 1


class BackupDocument(BaseModel):
    """
    A full snapshot of settings and payments.

    Import is all-or-nothing: either this whole document validates or
    nothing is replaced.
    """

    version: Literal[1] = BACKUP_VERSION
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the backup was taken"
    )
    settings: EmployeeSettings
    payments: list[Payment] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        return {
            "version": self.version,
            "timestamp": self.timestamp.isoformat(),
            "settings": self.settings.to_storage_dict(),
            "payments": [payment.to_storage_dict() for payment in self.payments],
        }
