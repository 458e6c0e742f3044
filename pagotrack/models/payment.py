"""
Core Data Models for PagoTrack

These models define the strict schemas for the payment and settings data
that is persisted, exported in backups and fed into reconciliation.
They are designed to:
1. Enforce field constraints at runtime (amounts, weekdays, ISO dates)
2. Serialize to the exact stored JSON shape (camelCase keys, numeric amounts)
3. Represent absent optional values as None, never as empty strings

DESIGN DECISION: Dates arriving as text must be strict YYYY-MM-DD.
Floats are converted through their string form so 0.1 stays 0.1.
"""

import datetime as dt
from datetime import date
from decimal import Decimal
from typing import Optional, Union
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from pagotrack.dates import parse_iso_date


def new_payment_id() -> str:
    """Opaque identifier for a newly created payment."""
    return uuid4().hex


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _coerce_date(value):
    if isinstance(value, str):
        return parse_iso_date(value)
    return value


def _coerce_decimal(value):
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        return value.strip()
    return value


def decimal_to_number(value: Decimal) -> Union[int, float]:
    """Render a Decimal as a JSON number (int when integral)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


STORAGE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    frozen=True,
)


# =============================================================================
# PAYMENTS
# =============================================================================

class PaymentDraft(BaseModel):
    """
    A validated payment candidate without identity.

    This is what the entry form produces. PaymentStore.upsert()
    decides which id it ends up under.
    """
    model_config = STORAGE_CONFIG

    date: dt.date = Field(
        ...,
        description="Effective day of the payment"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount paid"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="Free text note"
    )
    receipt_image: Optional[str] = Field(
        default=None,
        description="Encoded receipt photo (data URL)"
    )

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v):
        return _coerce_date(v)

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v):
        return _coerce_decimal(v)

    @field_validator('note', 'receipt_image', mode='before')
    @classmethod
    def blank_is_absent(cls, v):
        """Empty strings mean "no value"."""
        return _blank_to_none(v)

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, value: Decimal):
        return decimal_to_number(value)


class Payment(PaymentDraft):
    """
    A single recorded payment.

    The id is assigned once at creation and never changes, even when
    the payment is later edited to a different date.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier"
    )

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, v):
        # Older exports used numeric ids
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @classmethod
    def from_draft(cls, draft: PaymentDraft, payment_id: str) -> "Payment":
        return cls(id=payment_id, **draft.model_dump())

    def to_draft(self) -> PaymentDraft:
        return PaymentDraft(**self.model_dump(exclude={"id"}))

    def to_storage_dict(self) -> dict:
        """Stored/exported shape: id first, camelCase keys, no absent fields."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {"id": data.pop("id"), **data}


# =============================================================================
# EMPLOYEE SETTINGS
# =============================================================================

class EmployeeSettings(BaseModel):
    """
    The reconciliation policy.

    Passed by value into every computation; owned by SettingsStore.
    """
    model_config = STORAGE_CONFIG

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Employee display name"
    )
    weekly_payment_day: int = Field(
        ...,
        ge=0,
        le=6,
        description="Weekday the payment is due (0=Sunday ... 6=Saturday)"
    )
    expected_amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount due per week"
    )
    start_date: date = Field(
        ...,
        description="Date obligations start accruing"
    )
    end_date: Optional[date] = Field(
        default=None,
        description="Date reconciliation stops (defaults to today)"
    )

    @field_validator('weekly_payment_day', mode='before')
    @classmethod
    def reject_bool_weekday(cls, v):
        if isinstance(v, bool):
            raise ValueError("Weekday must be an integer between 0 and 6")
        return v

    @field_validator('expected_amount', mode='before')
    @classmethod
    def parse_amount(cls, v):
        return _coerce_decimal(v)

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def parse_dates(cls, v):
        return _coerce_date(_blank_to_none(v))

    @field_serializer('expected_amount', when_used='json')
    def serialize_amount(self, value: Decimal):
        return decimal_to_number(value)

    @model_validator(mode='after')
    def validate_date_range(self) -> 'EmployeeSettings':
        """End date cannot precede start date."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    def to_storage_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# ENTRY FORM STATE
# =============================================================================

class ReceiptSuggestion(BaseModel):
    """
    Field values proposed by receipt extraction.

    CRITICAL: This is UNTRUSTED input. Values are kept as raw text and
    go through the same validation as anything the user types.
    """

    amount: Optional[str] = None
    date: Optional[str] = None

    @field_validator('amount', 'date', mode='before')
    @classmethod
    def to_text(cls, v):
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return _blank_to_none(v)

    @property
    def is_empty(self) -> bool:
        return self.amount is None and self.date is None


class PendingPayment(BaseModel):
    """
    Mutable state of the payment entry form.

    Holds raw values exactly as typed (or suggested). Nothing here is
    trusted until PaymentValidator turns it into a PaymentDraft.
    """
    date: str = ""
    amount: str = ""
    note: str = ""
    receipt_image: Optional[str] = None

    @classmethod
    def for_payment(cls, payment: Payment) -> "PendingPayment":
        """Pre-fill the form from an existing payment (edit mode)."""
        return cls(
            date=payment.date.isoformat(),
            amount=str(payment.amount),
            note=payment.note or "",
            receipt_image=payment.receipt_image,
        )

    def apply_suggestion(self, suggestion: ReceiptSuggestion) -> "PendingPayment":
        """Merge extracted values the same way typed values would be."""
        if suggestion.amount is not None:
            self.amount = suggestion.amount
        if suggestion.date is not None:
            self.date = suggestion.date
        return self
