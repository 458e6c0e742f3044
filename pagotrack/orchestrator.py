"""
Main Orchestrator for PagoTrack

This module ties together all the components and defines the
end-to-end flows for:
1. Payment entry (form → optional receipt suggestion → validate → save)
2. Reconciliation (settings + payments → ledger → debt)
3. Settings changes, reset
4. Backup export/import
5. Report assembly

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches a store without passing validation
- Reconciliation functions never see storage
- Derived data (ledger, debt) is recomputed on every call
- Every mutation and boundary failure is logged

This is the "glue" the UI talks to; the UI never touches a store directly.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from pagotrack.config import get_settings
from pagotrack.events import EventLogger, configure_logging
from pagotrack.models.backup import BackupDocument
from pagotrack.models.ledger import DebtFormula, DebtSummary, WeekSlot
from pagotrack.models.payment import (
    EmployeeSettings,
    Payment,
    PendingPayment,
    ReceiptSuggestion,
)
from pagotrack.models.report import Report
from pagotrack.reconciliation import (
    all_time_total,
    build_ledger,
    calculate_debt,
    calculate_debt_variant,
    missed_dates,
    resolve_cutoff,
)
from pagotrack.reports import build_monthly_report, build_total_report
from pagotrack.services.backup import (
    ImportFormatError,
    dumps_backup,
    export_backup,
    parse_backup,
)
from pagotrack.services.receipt import (
    GeminiReceiptService,
    ReceiptError,
    prepare_receipt_image,
)
from pagotrack.services.storage import (
    JsonFileStorage,
    KeyValueStorage,
    StorageUnavailable,
)
from pagotrack.store import PaymentStore, SettingsStore
from pagotrack.validation import (
    PaymentValidator,
    ReviewResult,
    ValidationError,
    issues_from_pydantic,
)


@dataclass(frozen=True)
class Reconciliation:
    """One consistent snapshot of the derived state."""

    settings: EmployeeSettings
    cutoff: date
    ledger: list[WeekSlot]
    summary: DebtSummary
    all_time_paid: Decimal

    @property
    def missed_dates(self) -> list[date]:
        return missed_dates(self.ledger)


class PaymentTracker:
    """
    Facade over the stores, validation, reconciliation and backup.

    Flow for a payment:
    1. UI fills a PendingPayment (optionally merging a receipt suggestion)
    2. review() validates it and returns non-blocking warnings
    3. save_payment() validates again and upserts
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        payment_store: PaymentStore,
        validator: Optional[PaymentValidator] = None,
        receipt_service: Optional[GeminiReceiptService] = None,
        event_logger: Optional[EventLogger] = None,
    ):
        self._settings = settings_store
        self._payments = payment_store
        self._validator = validator or PaymentValidator()
        self._receipt_service = receipt_service
        self._events = event_logger or EventLogger()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> EmployeeSettings:
        return self._settings.current

    @property
    def payments(self) -> list[Payment]:
        return self._payments.all()

    @property
    def is_persistent(self) -> bool:
        return self._settings.is_persistent and self._payments.is_persistent

    def load(self) -> None:
        """Read settings and payments from storage (once, at startup)."""
        self._settings.load()
        self._payments.load()

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        return self._payments.get(payment_id)

    def payment_on(self, day: date) -> Optional[Payment]:
        return self._payments.find_by_date(day)

    def pending_for(self, day: date) -> tuple[PendingPayment, Optional[str]]:
        """
        Entry form state for a clicked day.

        Returns the form pre-filled from the payment on that day (and its
        id, for edit mode) or an empty form for that date.
        """
        existing = self._payments.find_by_date(day)
        if existing is not None:
            return PendingPayment.for_payment(existing), existing.id
        return PendingPayment(date=day.isoformat()), None

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def review(
        self,
        pending: PendingPayment,
        identity_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ReviewResult:
        """
        Validate an entry and collect warnings without saving.

        Raises:
            ValidationError: If any field is malformed
        """
        try:
            draft = self._validator.validate_pending(pending)
        except ValidationError as e:
            self._events.log_validation_failed("payment", [i.to_dict() for i in e.issues])
            raise
        return self._validator.review_payment(
            draft,
            self.settings,
            self._payments.all(),
            identity_id=identity_id,
            today=today,
        )

    def save_payment(self, pending: PendingPayment, identity_id: Optional[str] = None) -> Payment:
        """
        Validate and store a payment.

        Args:
            pending: Raw form values
            identity_id: Id of the payment being edited (None creates)

        Raises:
            ValidationError: If any field is malformed; nothing is stored
        """
        try:
            draft = self._validator.validate_pending(pending)
        except ValidationError as e:
            self._events.log_validation_failed("payment", [i.to_dict() for i in e.issues])
            raise
        return self._payments.upsert(draft, identity_id=identity_id)

    def delete_payment(self, payment_id: str) -> bool:
        return self._payments.remove(payment_id)

    # -------------------------------------------------------------------------
    # Receipts
    # -------------------------------------------------------------------------

    async def suggest_from_receipt(self, image_bytes: bytes) -> tuple[Optional[str], ReceiptSuggestion]:
        """
        Normalize a receipt photo and ask for suggested field values.

        Returns:
            (receipt_data_url, suggestion). The data URL is None when the
            file is not a usable image. Extraction failures are logged and
            give an empty suggestion; the user can still type the values.
        """
        try:
            prepared = prepare_receipt_image(image_bytes)
        except ReceiptError as e:
            self._events.log_receipt_failed(str(e))
            return None, ReceiptSuggestion()

        if self._receipt_service is None:
            return prepared.data_url, ReceiptSuggestion()

        try:
            suggestion = await self._receipt_service.extract(prepared)
        except ReceiptError as e:
            self._events.log_receipt_failed(str(e))
            return prepared.data_url, ReceiptSuggestion()

        found = [name for name in ("amount", "date") if getattr(suggestion, name) is not None]
        self._events.log_receipt_extracted(found)
        return prepared.data_url, suggestion

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def update_settings(self, data: dict[str, Any]) -> EmployeeSettings:
        """
        Replace the settings with validated values.

        Accepts python or camelCase keys; omitted keys keep their
        current value.

        Raises:
            ValidationError: If the result is invalid; settings unchanged
        """
        merged = {**self.settings.model_dump(), **self._normalize_keys(data)}
        try:
            new_settings = self._validator.validate_settings(merged)
        except ValidationError as e:
            self._events.log_validation_failed("settings", [i.to_dict() for i in e.issues])
            raise
        return self._settings.replace(new_settings)

    @staticmethod
    def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
        fields = EmployeeSettings.model_fields
        aliases = {info.alias: name for name, info in fields.items() if info.alias}
        return {aliases.get(key, key): value for key, value in data.items()}

    def reset(self, today: Optional[date] = None) -> None:
        """Restore default settings and clear every payment."""
        self._settings.reset(today)
        self._payments.replace_all([])
        self._events.log_app_reset()

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def reconcile(self, today: Optional[date] = None) -> Reconciliation:
        """Build the ledger and debt summary from the current state."""
        settings = self.settings
        payments = self._payments.all()
        cutoff = resolve_cutoff(settings, today)
        ledger = build_ledger(settings, payments, cutoff=cutoff)
        return Reconciliation(
            settings=settings,
            cutoff=cutoff,
            ledger=ledger,
            summary=calculate_debt(ledger, settings),
            all_time_paid=all_time_total(payments),
        )

    def debt_variant(self, formula: DebtFormula, today: Optional[date] = None) -> DebtSummary:
        snapshot = self.reconcile(today)
        return calculate_debt_variant(
            formula,
            snapshot.ledger,
            self._payments.all(),
            snapshot.settings,
            snapshot.cutoff,
        )

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def total_report(
        self,
        formula: DebtFormula = DebtFormula.CALENDAR_WEEKS,
        today: Optional[date] = None,
        generated_at: Optional[datetime] = None,
    ) -> Report:
        snapshot = self.reconcile(today)
        summary = snapshot.summary
        if formula != DebtFormula.CALENDAR_WEEKS:
            summary = self.debt_variant(formula, today)
        report = build_total_report(snapshot.settings, snapshot.ledger, summary, generated_at)
        self._events.log_report_generated(report.kind.value, len(report.rows), report.file_name)
        return report

    def monthly_report(self, year: int, month: int, generated_at: Optional[datetime] = None) -> Report:
        report = build_monthly_report(self.settings, self._payments.all(), year, month, generated_at)
        self._events.log_report_generated(report.kind.value, len(report.rows), report.file_name)
        return report

    # -------------------------------------------------------------------------
    # Backup
    # -------------------------------------------------------------------------

    def export_backup(self, timestamp: Optional[datetime] = None) -> BackupDocument:
        document = export_backup(self.settings, self._payments.all(), timestamp)
        self._events.log_backup_exported(len(document.payments))
        return document

    def export_backup_json(self, timestamp: Optional[datetime] = None) -> str:
        return dumps_backup(self.export_backup(timestamp))

    def import_backup(self, raw) -> BackupDocument:
        """
        Replace settings and payments with a backup's contents.

        Raises:
            ImportFormatError: If the backup is rejected; nothing changes
        """
        try:
            document = parse_backup(raw)
        except ImportFormatError as e:
            self._events.log_backup_rejected(str(e))
            raise

        self._payments.replace_all(document.payments)
        self._settings.replace(document.settings)
        self._events.log_backup_imported(len(document.payments))
        return document


def create_app_components(
    storage: Optional[KeyValueStorage] = None,
    use_storage: bool = True,
    use_receipt_extraction: bool = True,
) -> PaymentTracker:
    """
    Factory function to create a loaded PaymentTracker.

    Args:
        storage: Storage backend; defaults to JsonFileStorage in the
                 configured data directory
        use_storage: Set to False to run purely in memory
        use_receipt_extraction: Set to False to skip Gemini setup

    Storage that cannot be used degrades to in-memory operation, and a
    missing Gemini key disables receipt suggestions; neither is fatal.
    """
    config = get_settings()
    configure_logging(config.app.log_level)
    events = EventLogger()
    storage_settings = config.storage

    if use_storage and storage is None:
        storage = JsonFileStorage(storage_settings.data_dir)
    if not use_storage:
        storage = None

    receipt_service = None
    if use_receipt_extraction:
        try:
            receipt_service = GeminiReceiptService(settings=config.gemini)
        except PydanticValidationError as e:
            events.log_receipt_failed(f"Receipt extraction disabled: {issues_from_pydantic(e)[0].message}")

    tracker = PaymentTracker(
        settings_store=SettingsStore(storage, key=storage_settings.settings_key, event_logger=events),
        payment_store=PaymentStore(storage, key=storage_settings.payments_key, event_logger=events),
        receipt_service=receipt_service,
        event_logger=events,
    )
    try:
        tracker.load()
    except StorageUnavailable as e:
        # Stores already degrade on their own; this only covers backends
        # that fail outside read()/write()
        events.log_storage_degraded("*", str(e))
    return tracker
