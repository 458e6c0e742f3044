"""
Tests for PagoTrack models.

Test strategy:
1. Unit tests for the pydantic models (constraints, coercion, shapes)
2. Flow tests live in test_orchestrator.py (with in-memory storage)
3. No real API calls in tests (use fakes)
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from pagotrack.models import (
    DebtFormula,
    DebtSummary,
    EmployeeSettings,
    Event,
    EventSeverity,
    EventType,
    Payment,
    PaymentDraft,
    PendingPayment,
    ReceiptSuggestion,
    WeekSlot,
    WeekStatus,
)
from pagotrack.models.payment import decimal_to_number


class TestPaymentModels:
    """Tests for payment-related Pydantic models."""

    def test_payment_creation(self):
        """Test Payment model creation."""
        payment = Payment(id="abc", date=date(2024, 1, 5), amount=Decimal("2500"))
        assert payment.id == "abc"
        assert payment.note is None
        assert payment.receipt_image is None

    def test_accepts_camel_case_keys(self):
        payment = Payment.model_validate({
            "id": "abc",
            "date": "2024-01-05",
            "amount": 2500,
            "receiptImage": "data:image/jpeg;base64,AAAA",
        })
        assert payment.receipt_image == "data:image/jpeg;base64,AAAA"

    def test_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            PaymentDraft(date=date(2024, 1, 5), amount=Decimal("-1"))

    def test_zero_amount_is_allowed(self):
        assert PaymentDraft(date=date(2024, 1, 5), amount=0).amount == 0

    def test_rejects_bool_amount(self):
        with pytest.raises(ValueError):
            PaymentDraft(date=date(2024, 1, 5), amount=True)

    def test_float_amount_keeps_decimal_digits(self):
        draft = PaymentDraft(date=date(2024, 1, 5), amount=0.1)
        assert draft.amount == Decimal("0.1")

    def test_rejects_non_iso_date(self):
        with pytest.raises(ValueError):
            PaymentDraft(date="2024/01/05", amount=1)

    def test_blank_note_is_absent(self):
        draft = PaymentDraft(date=date(2024, 1, 5), amount=1, note="   ")
        assert draft.note is None

    def test_note_whitespace_is_stripped(self):
        draft = PaymentDraft(date=date(2024, 1, 5), amount=1, note="  cash  ")
        assert draft.note == "cash"

    def test_payment_is_immutable(self):
        payment = Payment(id="abc", date=date(2024, 1, 5), amount=1)
        with pytest.raises(PydanticValidationError):
            payment.amount = Decimal("2")

    def test_rejects_empty_id(self):
        with pytest.raises(ValueError):
            Payment(id="", date=date(2024, 1, 5), amount=1)

    def test_draft_round_trip(self):
        draft = PaymentDraft(date=date(2024, 1, 5), amount=Decimal("2500.50"), note="x")
        payment = Payment.from_draft(draft, "id1")
        assert payment.id == "id1"
        assert payment.to_draft().model_dump() == draft.model_dump()

    def test_storage_dict_shape(self):
        payment = Payment(
            id="abc",
            date=date(2024, 1, 5),
            amount=Decimal("2500.50"),
            receipt_image="data:image/jpeg;base64,AAAA",
        )
        stored = payment.to_storage_dict()
        assert list(stored) == ["id", "date", "amount", "receiptImage"]
        assert stored["amount"] == 2500.5

    def test_decimal_to_number(self):
        assert decimal_to_number(Decimal("2500.00")) == 2500
        assert isinstance(decimal_to_number(Decimal("2500.00")), int)
        assert decimal_to_number(Decimal("0.1")) == 0.1


class TestEmployeeSettings:
    """Tests for the reconciliation policy model."""

    def test_creation(self, employee_settings):
        assert employee_settings.weekly_payment_day == 5
        assert employee_settings.end_date is None

    def test_date_range_validation(self):
        """Test that end_date cannot be before start_date."""
        with pytest.raises(ValueError, match="End date cannot be before start date"):
            EmployeeSettings(
                name="Ana",
                weekly_payment_day=1,
                expected_amount=100,
                start_date=date(2024, 2, 1),
                end_date=date(2024, 1, 31),
            )

    def test_end_equal_to_start_is_allowed(self):
        settings = EmployeeSettings(
            name="Ana",
            weekly_payment_day=1,
            expected_amount=100,
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 1),
        )
        assert settings.end_date == settings.start_date

    def test_rejects_empty_name(self):
        with pytest.raises(ValueError):
            EmployeeSettings(name="  ", weekly_payment_day=1, expected_amount=100, start_date=date(2024, 1, 1))

    def test_storage_dict_omits_absent_end_date(self, employee_settings):
        assert employee_settings.to_storage_dict() == {
            "name": "Juan Pérez",
            "weeklyPaymentDay": 5,
            "expectedAmount": 2500,
            "startDate": "2024-01-01",
        }


class TestEntryForm:
    """Tests for PendingPayment and receipt suggestions."""

    def test_for_payment_prefills_form(self):
        payment = Payment(id="abc", date=date(2024, 1, 5), amount=Decimal("2500.50"), note="cash")
        pending = PendingPayment.for_payment(payment)
        assert pending.date == "2024-01-05"
        assert pending.amount == "2500.50"
        assert pending.note == "cash"

    def test_suggestion_overrides_only_found_fields(self):
        pending = PendingPayment(date="2024-01-05", amount="", note="typed")
        pending.apply_suggestion(ReceiptSuggestion(amount=2500.5))
        assert pending.amount == "2500.5"
        assert pending.date == "2024-01-05"
        assert pending.note == "typed"

    def test_suggestion_text_conversion(self):
        suggestion = ReceiptSuggestion(amount=2500, date="")
        assert suggestion.amount == "2500"
        assert suggestion.date is None
        assert not suggestion.is_empty
        assert ReceiptSuggestion().is_empty


class TestLedgerModels:

    def test_paid_slot_requires_payment(self):
        with pytest.raises(ValueError, match="Paid week must link a payment"):
            WeekSlot(anchor_date=date(2024, 1, 5), due_date=date(2024, 1, 5), status=WeekStatus.PAID)

    def test_missed_slot_cannot_link_payment(self):
        payment = Payment(id="abc", date=date(2024, 1, 5), amount=1)
        with pytest.raises(ValueError, match="Missed week cannot link a payment"):
            WeekSlot(
                anchor_date=date(2024, 1, 5),
                due_date=date(2024, 1, 5),
                status=WeekStatus.MISSED,
                linked_payment=payment,
            )

    def test_missed_slot_amount_is_zero(self):
        slot = WeekSlot(anchor_date=date(2024, 1, 5), due_date=date(2024, 1, 5), status=WeekStatus.MISSED)
        assert slot.amount == 0
        assert not slot.is_paid

    def test_debt_summary_labels(self):
        owed = DebtSummary(weeks_elapsed=1, expected_total=10, actual_total=0, debt=10)
        assert owed.is_underpaid
        assert owed.balance_label == "Owed"
        assert owed.formula == DebtFormula.CALENDAR_WEEKS


class TestEventModels:
    """Tests for event models."""

    def test_event_log_dict(self):
        event = Event(
            event_type=EventType.PAYMENT_CREATED,
            entity_type="payment",
            entity_id="abc",
            severity=EventSeverity.INFO,
            description="Payment recorded",
            timestamp=datetime(2024, 1, 5, tzinfo=timezone.utc),
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "payment_created"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["timestamp"] == "2024-01-05T00:00:00+00:00"

    def test_description_length_limit(self):
        with pytest.raises(ValueError):
            Event(event_type=EventType.APP_RESET, description="x" * 501)
