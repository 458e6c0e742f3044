"""
Debt Calculator

Reduces a ledger to expected/actual totals.

CANONICAL FORMULA (DebtFormula.CALENDAR_WEEKS):
    weeks_elapsed  = len(ledger)
    expected_total = weeks_elapsed * expected_amount
    actual_total   = sum of the linked payments of PAID weeks
    debt           = expected_total - actual_total

actual_total is ledger-scoped: payments outside the reconciliation
window do not count. Use all_time_total() when the raw sum over every
recorded payment is wanted instead.

The other formulas are exposed as named variants for reports; they are
never substituted silently.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from pagotrack.dates import months_touched
from pagotrack.models.ledger import DebtFormula, DebtSummary, WeekSlot, WeekStatus
from pagotrack.models.payment import EmployeeSettings, Payment
from pagotrack.reconciliation.ledger import first_due_date

WEEKS_PER_MONTH = 4


def calculate_debt(ledger: Sequence[WeekSlot], settings: EmployeeSettings) -> DebtSummary:
    """Canonical debt over a ledger."""
    paid = [slot for slot in ledger if slot.status == WeekStatus.PAID]
    weeks_elapsed = len(ledger)
    expected_total = settings.expected_amount * weeks_elapsed
    actual_total = sum((slot.amount for slot in paid), Decimal("0"))

    return DebtSummary(
        formula=DebtFormula.CALENDAR_WEEKS,
        weeks_elapsed=weeks_elapsed,
        paid_weeks=len(paid),
        missed_weeks=weeks_elapsed - len(paid),
        expected_total=expected_total,
        actual_total=actual_total,
        debt=expected_total - actual_total,
    )


def calculate_debt_for_weeks(weeks_elapsed: int, actual_total: Decimal, settings: EmployeeSettings) -> DebtSummary:
    """Debt from a raw week count, without a ledger."""
    if weeks_elapsed < 0:
        raise ValueError("weeks_elapsed cannot be negative")
    expected_total = settings.expected_amount * weeks_elapsed
    return DebtSummary(
        formula=DebtFormula.CALENDAR_WEEKS,
        weeks_elapsed=weeks_elapsed,
        expected_total=expected_total,
        actual_total=actual_total,
        debt=expected_total - actual_total,
    )


def all_time_total(payments: Iterable[Payment]) -> Decimal:
    """Sum of every recorded payment, inside the window or not."""
    return sum((p.amount for p in payments), Decimal("0"))


def calculate_debt_variant(
    formula: DebtFormula,
    ledger: Sequence[WeekSlot],
    payments: Sequence[Payment],
    settings: EmployeeSettings,
    cutoff: date,
) -> DebtSummary:
    """
    Debt under an explicitly chosen formula.

    RECORDED_PAYMENTS counts one owed week per recorded payment and
    compares against every recorded payment. FOUR_WEEKS_PER_MONTH
    counts four weeks per calendar month between the first due date
    and the cutoff, against the ledger-scoped actual total.
    """
    if formula == DebtFormula.CALENDAR_WEEKS:
        return calculate_debt(ledger, settings)

    if formula == DebtFormula.RECORDED_PAYMENTS:
        weeks = len(payments)
        expected_total = settings.expected_amount * weeks
        actual_total = all_time_total(payments)
        return DebtSummary(
            formula=formula,
            weeks_elapsed=weeks,
            paid_weeks=weeks,
            expected_total=expected_total,
            actual_total=actual_total,
            debt=expected_total - actual_total,
        )

    if formula == DebtFormula.FOUR_WEEKS_PER_MONTH:
        canonical = calculate_debt(ledger, settings)
        weeks = WEEKS_PER_MONTH * months_touched(first_due_date(settings), cutoff)
        expected_total = settings.expected_amount * weeks
        return DebtSummary(
            formula=formula,
            weeks_elapsed=weeks,
            paid_weeks=canonical.paid_weeks,
            expected_total=expected_total,
            actual_total=canonical.actual_total,
            debt=expected_total - canonical.actual_total,
        )

    raise ValueError(f"Unknown debt formula: {formula}")
