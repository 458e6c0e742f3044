"""
Event Logger

DESIGN DECISION: Every state change and boundary failure is logged.
This provides:
1. Traceability of what the user did in a session
2. Debugging capability when stored data turns out to be corrupt
3. Visibility of silent fallbacks (e.g. storage degraded to memory)

The event logger:
- Writes structured JSON lines through structlog
- Never persists events (there is no edit history)
- Never raises: a logging failure must not break a payment save
"""

import logging
from typing import Optional

import structlog

from pagotrack.models.event import Event, EventSeverity, EventType


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class EventLogger:
    """Central event logging service."""

    def __init__(self, logger_name: str = "pagotrack"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: Event) -> None:
        """Log an event at the level matching its severity."""
        log_dict = event.to_log_dict()

        try:
            if event.severity == EventSeverity.ERROR:
                self._logger.error("event", **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning("event", **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug("event", **log_dict)
            else:
                self._logger.info("event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).error("event logging failed: %s", e)

    def log_payment_saved(self, payment_id: str, payment_date: str, amount: str, created: bool) -> None:
        self.log(Event(
            event_type=EventType.PAYMENT_CREATED if created else EventType.PAYMENT_UPDATED,
            entity_type="payment",
            entity_id=payment_id,
            description=f"Payment {'created' if created else 'updated'} for {payment_date}",
            details={"date": payment_date, "amount": amount},
        ))

    def log_payment_removed(self, payment_id: str) -> None:
        self.log(Event(
            event_type=EventType.PAYMENT_REMOVED,
            entity_type="payment",
            entity_id=payment_id,
            description="Payment removed",
        ))

    def log_validation_failed(self, entity_type: str, issues: list[dict]) -> None:
        event_type = (
            EventType.SETTINGS_VALIDATION_FAILED
            if entity_type == "settings"
            else EventType.PAYMENT_VALIDATION_FAILED
        )
        self.log(Event(
            event_type=event_type,
            severity=EventSeverity.WARNING,
            entity_type=entity_type,
            description=f"{entity_type.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
        ))

    def log_settings_updated(self, changed_fields: list[str]) -> None:
        self.log(Event(
            event_type=EventType.SETTINGS_UPDATED,
            entity_type="settings",
            description="Settings updated",
            details={"changed_fields": changed_fields},
        ))

    def log_app_reset(self) -> None:
        self.log(Event(
            event_type=EventType.APP_RESET,
            severity=EventSeverity.WARNING,
            description="Settings reset to defaults and all payments cleared",
        ))

    def log_backup_exported(self, payment_count: int) -> None:
        self.log(Event(
            event_type=EventType.BACKUP_EXPORTED,
            entity_type="backup",
            description=f"Backup exported with {payment_count} payments",
            details={"payment_count": payment_count},
        ))

    def log_backup_imported(self, payment_count: int) -> None:
        self.log(Event(
            event_type=EventType.BACKUP_IMPORTED,
            entity_type="backup",
            description=f"Backup imported with {payment_count} payments",
            details={"payment_count": payment_count},
        ))

    def log_backup_rejected(self, reason: str) -> None:
        self.log(Event(
            event_type=EventType.BACKUP_REJECTED,
            severity=EventSeverity.WARNING,
            entity_type="backup",
            description="Backup import rejected",
            error_message=reason,
        ))

    def log_state_loaded(self, key: str, item_count: int) -> None:
        self.log(Event(
            event_type=EventType.STATE_LOADED,
            severity=EventSeverity.DEBUG,
            description=f"Loaded {key}",
            details={"key": key, "item_count": item_count},
        ))

    def log_stored_data_corrupt(self, key: str, error_message: str) -> None:
        self.log(Event(
            event_type=EventType.STORED_DATA_CORRUPT,
            severity=EventSeverity.ERROR,
            description=f"Stored value for {key} could not be read; starting from defaults",
            details={"key": key},
            error_message=error_message,
        ))

    def log_storage_degraded(self, key: str, error_message: str) -> None:
        self.log(Event(
            event_type=EventType.STORAGE_DEGRADED,
            severity=EventSeverity.WARNING,
            description="Storage unavailable; continuing in memory for this session",
            details={"key": key},
            error_message=error_message,
        ))

    def log_receipt_extracted(self, found_fields: list[str]) -> None:
        self.log(Event(
            event_type=EventType.RECEIPT_EXTRACTED,
            entity_type="receipt",
            description=f"Receipt extraction suggested {len(found_fields)} fields",
            details={"fields": found_fields},
        ))

    def log_receipt_failed(self, error_message: str) -> None:
        self.log(Event(
            event_type=EventType.RECEIPT_EXTRACTION_FAILED,
            severity=EventSeverity.ERROR,
            entity_type="receipt",
            description="Receipt extraction failed",
            error_message=error_message,
        ))

    def log_report_generated(self, kind: str, row_count: int, file_name: Optional[str] = None) -> None:
        self.log(Event(
            event_type=EventType.REPORT_GENERATED,
            entity_type="report",
            description=f"{kind.capitalize()} report assembled with {row_count} rows",
            details={"kind": kind, "row_count": row_count, "file_name": file_name},
        ))
