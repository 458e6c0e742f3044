"""
Event Models for PagoTrack

Every state change and every failure at a boundary (storage, backup,
receipt extraction) produces an Event that is written to the local
structured log.

DESIGN DECISION: Events are log lines only. They are not stored, so
there is no edit history to keep consistent.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Types of events we log."""
    # Payments
    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_REMOVED = "payment_removed"
    PAYMENT_VALIDATION_FAILED = "payment_validation_failed"

    # Settings
    SETTINGS_UPDATED = "settings_updated"
    SETTINGS_VALIDATION_FAILED = "settings_validation_failed"
    APP_RESET = "app_reset"

    # Backup
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_IMPORTED = "backup_imported"
    BACKUP_REJECTED = "backup_rejected"

    # Storage
    STATE_LOADED = "state_loaded"
    STORED_DATA_CORRUPT = "stored_data_corrupt"
    STORAGE_DEGRADED = "storage_degraded"

    # Receipts
    RECEIPT_EXTRACTED = "receipt_extracted"
    RECEIPT_EXTRACTION_FAILED = "receipt_extraction_failed"

    # Reports
    REPORT_GENERATED = "report_generated"


class EventSeverity(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Event(BaseModel):
    """A single logged event."""

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: EventType
    severity: EventSeverity = EventSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'payment', 'settings', 'backup')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }
