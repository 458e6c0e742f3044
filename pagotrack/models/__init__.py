"""
Data Models Package

This package contains all Pydantic models used in PagoTrack.
All data flowing through the system must conform to these schemas.
"""

from pagotrack.models.payment import (
    EmployeeSettings,
    Payment,
    PaymentDraft,
    PendingPayment,
    ReceiptSuggestion,
    new_payment_id,
)
from pagotrack.models.ledger import (
    DebtFormula,
    DebtSummary,
    WeekSlot,
    WeekStatus,
)
from pagotrack.models.report import (
    Report,
    ReportKind,
    ReportRow,
    ReportSummary,
)
from pagotrack.models.backup import BACKUP_VERSION, BackupDocument
from pagotrack.models.event import Event, EventSeverity, EventType

__all__ = [
    # Payment models
    "EmployeeSettings",
    "Payment",
    "PaymentDraft",
    "PendingPayment",
    "ReceiptSuggestion",
    "new_payment_id",
    # Ledger models
    "DebtFormula",
    "DebtSummary",
    "WeekSlot",
    "WeekStatus",
    # Report models
    "Report",
    "ReportKind",
    "ReportRow",
    "ReportSummary",
    # Backup
    "BACKUP_VERSION",
    "BackupDocument",
    # Events
    "Event",
    "EventSeverity",
    "EventType",
]
