"""
Report Models

These rows and totals are the ONLY thing handed to the document
renderer. The renderer never sees Payment or EmployeeSettings.
"""

import datetime as dt
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pagotrack.models.payment import decimal_to_number


class ReportKind(str, Enum):
    TOTAL = "total"
    MONTHLY = "monthly"


class ReportRow(BaseModel):
    """One table row: a week slot (total report) or a payment (monthly report)."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    label: str
    status: str = Field(..., pattern="^(Paid|Missed)$")
    amount: Decimal
    attachment: Optional[str] = None

    def to_dict(self) -> dict:
        row = {
            "date": self.date.isoformat(),
            "label": self.label,
            "status": self.status,
            "amount": decimal_to_number(self.amount),
        }
        if self.attachment is not None:
            row["attachment"] = self.attachment
        return row


class ReportSummary(BaseModel):
    """
    Trailing totals row.

    The monthly report only knows what was paid, so expected_total and
    debt are absent there.
    """
    model_config = ConfigDict(frozen=True)

    actual_total: Decimal
    expected_total: Optional[Decimal] = None
    debt: Optional[Decimal] = None
    weeks_elapsed: Optional[int] = None

    def to_dict(self) -> dict:
        summary = {"label": "TOTAL", "actualTotal": decimal_to_number(self.actual_total)}
        if self.expected_total is not None:
            summary["expectedTotal"] = decimal_to_number(self.expected_total)
        if self.debt is not None:
            summary["debt"] = decimal_to_number(self.debt)
        if self.weeks_elapsed is not None:
            summary["weeksElapsed"] = self.weeks_elapsed
        return summary


class Report(BaseModel):
    """Everything a renderer needs for one document."""
    model_config = ConfigDict(frozen=True)

    kind: ReportKind
    title: str
    subtitle: str
    employee_name: str
    generated_at: datetime
    file_name: str
    rows: list[ReportRow] = Field(default_factory=list)
    summary: ReportSummary

    def table(self) -> list[dict]:
        """Row dicts followed by the summary dict."""
        return [row.to_dict() for row in self.rows] + [self.summary.to_dict()]
