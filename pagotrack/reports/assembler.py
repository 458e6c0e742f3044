"""
Report Assembler

Maps reconciliation output into the generic rows consumed by the
document renderer. The renderer receives a Report and nothing else: no
Payment or EmployeeSettings objects cross this boundary.

Two documents exist:
- TOTAL report: one row per obligation week plus expected/actual/debt
- MONTHLY report: one row per payment recorded in a calendar month plus
  the month's total paid
"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pagotrack.dates import month_bounds
from pagotrack.models.ledger import DebtFormula, DebtSummary, WeekSlot, WeekStatus
from pagotrack.models.payment import EmployeeSettings, Payment
from pagotrack.models.report import Report, ReportKind, ReportRow, ReportSummary

MISSED_LABEL = "Missed payment"
NO_NOTE_LABEL = "No note"

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def report_file_name(prefix: str, employee_name: str, *parts: str) -> str:
    """File name stem, e.g. Debt_Report_Juan_Perez.pdf."""
    words = [prefix, re.sub(r"\s+", "_", employee_name.strip()), *parts]
    return "_".join(word for word in words if word) + ".pdf"


def slot_to_row(slot: WeekSlot) -> ReportRow:
    if slot.status == WeekStatus.PAID:
        payment = slot.linked_payment
        return ReportRow(
            date=slot.anchor_date,
            label=payment.note or NO_NOTE_LABEL,
            status=WeekStatus.PAID.value,
            amount=payment.amount,
            attachment=payment.receipt_image,
        )
    return ReportRow(
        date=slot.anchor_date,
        label=MISSED_LABEL,
        status=WeekStatus.MISSED.value,
        amount=Decimal("0"),
    )


def build_total_report(
    settings: EmployeeSettings,
    ledger: Sequence[WeekSlot],
    summary: DebtSummary,
    generated_at: Optional[datetime] = None,
) -> Report:
    """Salary-and-debt report over the whole ledger."""
    generated_at = generated_at or datetime.now(timezone.utc)

    if summary.formula == DebtFormula.CALENDAR_WEEKS:
        subtitle = "Based on calendar weeks since the start date"
    else:
        subtitle = f"Based on formula: {summary.formula.value.replace('_', ' ')}"

    return Report(
        kind=ReportKind.TOTAL,
        title="Salary and Debt Report",
        subtitle=subtitle,
        employee_name=settings.name,
        generated_at=generated_at,
        file_name=report_file_name("Debt_Report", settings.name),
        rows=[slot_to_row(slot) for slot in ledger],
        summary=ReportSummary(
            actual_total=summary.actual_total,
            expected_total=summary.expected_total,
            debt=summary.debt,
            weeks_elapsed=summary.weeks_elapsed,
        ),
    )


def build_monthly_report(
    settings: EmployeeSettings,
    payments: Iterable[Payment],
    year: int,
    month: int,
    generated_at: Optional[datetime] = None,
) -> Report:
    """Payments recorded in one calendar month."""
    generated_at = generated_at or datetime.now(timezone.utc)
    first, last = month_bounds(year, month)

    in_month = sorted(
        (p for p in payments if first <= p.date <= last),
        key=lambda p: p.date,
    )
    rows = [
        ReportRow(
            date=p.date,
            label=p.note or NO_NOTE_LABEL,
            status=WeekStatus.PAID.value,
            amount=p.amount,
            attachment=p.receipt_image,
        )
        for p in in_month
    ]
    total = sum((p.amount for p in in_month), Decimal("0"))
    month_name = MONTH_NAMES[month - 1]

    return Report(
        kind=ReportKind.MONTHLY,
        title="Monthly Report",
        subtitle=f"Period: {month_name} {year}",
        employee_name=settings.name,
        generated_at=generated_at,
        file_name=report_file_name("Monthly_Report", settings.name, month_name, str(year)),
        rows=rows,
        summary=ReportSummary(actual_total=total),
    )
