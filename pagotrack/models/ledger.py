"""
Derived Reconciliation Models

WeekSlot and DebtSummary are projections of the current settings and
payments. They are produced fresh by every reconciliation call and are
never stored or updated in place.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pagotrack.models.payment import Payment


class WeekStatus(str, Enum):
    """Outcome of one obligation week."""
    PAID = "Paid"
    MISSED = "Missed"


class DebtFormula(str, Enum):
    """
    How the number of owed weeks is counted.

    DESIGN DECISION: CALENDAR_WEEKS is the canonical formula used
    everywhere the app shows "debt". The others exist only as
    explicitly named report variants.
    """
    CALENDAR_WEEKS = "calendar_weeks"          # ledger length
    RECORDED_PAYMENTS = "recorded_payments"    # one week per recorded payment
    FOUR_WEEKS_PER_MONTH = "four_weeks_per_month"


class WeekSlot(BaseModel):
    """
    One obligation week in the ledger.

    anchor_date is the linked payment's own date when the week is
    PAID, and the due date when it is MISSED.
    """
    model_config = ConfigDict(frozen=True)

    anchor_date: date
    due_date: date = Field(
        ...,
        description="Aligned due date of this obligation week"
    )
    status: WeekStatus
    linked_payment: Optional[Payment] = None

    @model_validator(mode='after')
    def validate_link(self) -> 'WeekSlot':
        """A payment is linked iff the week is paid."""
        if self.status == WeekStatus.PAID and self.linked_payment is None:
            raise ValueError("Paid week must link a payment")
        if self.status == WeekStatus.MISSED and self.linked_payment is not None:
            raise ValueError("Missed week cannot link a payment")
        return self

    @property
    def is_paid(self) -> bool:
        return self.status == WeekStatus.PAID

    @property
    def amount(self) -> Decimal:
        """Amount paid in this week (zero when missed)."""
        if self.linked_payment is None:
            return Decimal("0")
        return self.linked_payment.amount


class DebtSummary(BaseModel):
    """
    Expected vs actual totals over a ledger.

    Sign convention: debt > 0 means underpaid; debt <= 0 means fully
    paid or ahead.
    """
    model_config = ConfigDict(frozen=True)

    formula: DebtFormula = DebtFormula.CALENDAR_WEEKS
    weeks_elapsed: int = Field(ge=0)
    paid_weeks: int = Field(default=0, ge=0)
    missed_weeks: int = Field(default=0, ge=0)
    expected_total: Decimal
    actual_total: Decimal
    debt: Decimal

    @property
    def is_underpaid(self) -> bool:
        return self.debt > 0

    @property
    def balance_label(self) -> str:
        if self.debt > 0:
            return "Owed"
        if self.debt < 0:
            return "Ahead"
        return "Up to date"
