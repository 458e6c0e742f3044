"""
Ledger Builder

Walks the calendar one obligation week at a time and classifies each
week as Paid or Missed.

ALGORITHM:
1. first_due = first date on/after settings.start_date that falls on
   settings.weekly_payment_day
2. cursor = first_due, then +7 days, while cursor <= cutoff
3. a week is PAID if a payment dated on or before the cutoff shares the
   cursor's Monday-start week; the slot is anchored at that payment's
   own date. Otherwise the week is MISSED and anchored at the cursor.

Paying early in the week (e.g. Thursday for a Friday due date) counts.
When several payments share one week, the earliest is linked.

The ledger is a pure function of its inputs. It is rebuilt on every
request and never cached, so it can never go stale.
"""

from datetime import date, timedelta
from typing import Iterable, Optional

from pagotrack.dates import align_to_weekday, start_of_week
from pagotrack.models.ledger import WeekSlot, WeekStatus
from pagotrack.models.payment import EmployeeSettings, Payment

ONE_WEEK = timedelta(days=7)


def first_due_date(settings: EmployeeSettings) -> date:
    """The first aligned due date of the obligation."""
    return align_to_weekday(settings.start_date, settings.weekly_payment_day)


def resolve_cutoff(settings: EmployeeSettings, today: Optional[date] = None) -> date:
    """settings.end_date when set, otherwise today."""
    if settings.end_date is not None:
        return settings.end_date
    return today or date.today()


def build_ledger(
    settings: EmployeeSettings,
    payments: Iterable[Payment],
    cutoff: Optional[date] = None,
    today: Optional[date] = None,
) -> list[WeekSlot]:
    """
    Build the merged week-by-week ledger.

    Args:
        settings: Reconciliation policy
        payments: Recorded payments (any order)
        cutoff: Last day considered; defaults to resolve_cutoff()
        today: Reference date used when cutoff is not given

    Returns:
        One WeekSlot per obligation week, ascending. Empty when the
        first due date is after the cutoff.
    """
    if cutoff is None:
        cutoff = resolve_cutoff(settings, today)

    # Earliest payment per Monday-week; later payments in the same week are ignored
    by_week: dict[date, Payment] = {}
    for payment in sorted(payments, key=lambda p: p.date):
        if payment.date > cutoff:
            continue
        by_week.setdefault(start_of_week(payment.date), payment)

    ledger = []
    cursor = first_due_date(settings)
    while cursor <= cutoff:
        match = by_week.get(start_of_week(cursor))
        if match is not None:
            ledger.append(WeekSlot(
                anchor_date=match.date,
                due_date=cursor,
                status=WeekStatus.PAID,
                linked_payment=match,
            ))
        else:
            ledger.append(WeekSlot(
                anchor_date=cursor,
                due_date=cursor,
                status=WeekStatus.MISSED,
            ))
        cursor += ONE_WEEK

    return ledger


def expected_week_count(settings: EmployeeSettings, cutoff: date) -> int:
    """Closed-form ledger length: floor((cutoff - first_due) / 7) + 1, or 0."""
    first_due = first_due_date(settings)
    if first_due > cutoff:
        return 0
    return (cutoff - first_due).days // 7 + 1


def missed_dates(ledger: Iterable[WeekSlot]) -> list[date]:
    """Due dates of the missed weeks (used to highlight the calendar)."""
    return [slot.due_date for slot in ledger if slot.status == WeekStatus.MISSED]


def unmatched_payments(ledger: Iterable[WeekSlot], payments: Iterable[Payment]) -> list[Payment]:
    """Payments that no ledger week links to (outside the window or a second payment in a week)."""
    linked = {slot.linked_payment.id for slot in ledger if slot.linked_payment is not None}
    return [p for p in payments if p.id not in linked]
