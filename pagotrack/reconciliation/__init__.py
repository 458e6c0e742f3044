"""Weekly reconciliation engine: ledger building and debt accounting."""

from pagotrack.reconciliation.ledger import (
    build_ledger,
    expected_week_count,
    first_due_date,
    missed_dates,
    resolve_cutoff,
    unmatched_payments,
)
from pagotrack.reconciliation.debt import (
    all_time_total,
    calculate_debt,
    calculate_debt_for_weeks,
    calculate_debt_variant,
)

__all__ = [
    "all_time_total",
    "build_ledger",
    "calculate_debt",
    "calculate_debt_for_weeks",
    "calculate_debt_variant",
    "expected_week_count",
    "first_due_date",
    "missed_dates",
    "resolve_cutoff",
    "unmatched_payments",
]
