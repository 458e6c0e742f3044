"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - FIELD VALIDATION (blocking):
- Required field presence
- ISO date format
- Non-negative amounts, weekday within 0-6
- End date not before start date
Failures raise ValidationError and nothing reaches a store.

STAGE 2 - REVIEW (non-blocking):
- Future payment dates
- Payment dated outside the reconciliation window
- Amount different from the expected weekly amount
- A second payment in the same week
These are warnings shown to the user before saving.

IMPORTANT: Validation NEVER silently fixes values. Receipt extraction
suggestions go through exactly the same checks as typed values.
"""

from datetime import date, timedelta
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from pagotrack.config import get_settings
from pagotrack.dates import align_to_weekday, same_week
from pagotrack.models.payment import (
    EmployeeSettings,
    Payment,
    PaymentDraft,
    PendingPayment,
)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str
    severity: str = Field(..., pattern="^(error|warning)$")

    def to_dict(self) -> dict:
        return {"field": self.field, "type": self.issue_type, "message": self.message}


class ValidationError(ValueError):
    """
    A field is malformed or out of range.

    The operation that raised this had no effect.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        super().__init__(summary or "Invalid input")


class ReviewResult(BaseModel):
    """Outcome of the non-blocking review stage."""

    draft: PaymentDraft
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


_FIELD_NAMES = {
    "date": "date",
    "amount": "amount",
    "note": "note",
    "receipt_image": "receiptImage",
    "receiptImage": "receiptImage",
    "name": "name",
    "weekly_payment_day": "weeklyPaymentDay",
    "weeklyPaymentDay": "weeklyPaymentDay",
    "expected_amount": "expectedAmount",
    "expectedAmount": "expectedAmount",
    "start_date": "startDate",
    "startDate": "startDate",
    "end_date": "endDate",
    "endDate": "endDate",
}


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Translate pydantic errors into ValidationIssues keyed by stored field name."""
    issues = []
    for item in error.errors():
        location = item.get("loc") or ()
        raw_field = str(location[0]) if location else "__root__"
        message = str(item.get("msg", "Invalid value"))
        # Model-level validators raise "Value error, ..."
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if raw_field == "__root__" and "End date" in message:
            raw_field = "endDate"
        issues.append(ValidationIssue(
            field=_FIELD_NAMES.get(raw_field, raw_field),
            issue_type=str(item.get("type", "invalid")),
            message=message,
            severity="error",
        ))
    return issues


class PaymentValidator:
    """
    Validates payment entries and settings changes.

    Stage 1 is pure and needs nothing but the input.
    Stage 2 also looks at the current settings and payments.
    """

    def __init__(self, future_date_tolerance_days: Optional[int] = None):
        if future_date_tolerance_days is None:
            future_date_tolerance_days = get_settings().app.future_date_tolerance_days
        self._future_tolerance = timedelta(days=future_date_tolerance_days)

    # -------------------------------------------------------------------------
    # Stage 1
    # -------------------------------------------------------------------------

    def validate_pending(self, pending: PendingPayment) -> PaymentDraft:
        """
        Turn raw entry-form values into a PaymentDraft.

        Raises:
            ValidationError: If any field is missing or malformed
        """
        issues = []
        if not pending.date.strip():
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))
        if not pending.amount.strip():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
        if issues:
            raise ValidationError(issues)

        return self.validate_payment({
            "date": pending.date,
            "amount": pending.amount,
            "note": pending.note,
            "receipt_image": pending.receipt_image,
        })

    def validate_payment(self, data: dict[str, Any]) -> PaymentDraft:
        """
        Validate a payment mapping (python or camelCase keys).

        Raises:
            ValidationError: If any field is malformed
        """
        try:
            return PaymentDraft.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(issues_from_pydantic(e)) from e

    def validate_settings(self, data: dict[str, Any]) -> EmployeeSettings:
        """
        Validate a settings mapping (python or camelCase keys).

        Raises:
            ValidationError: If any field is malformed or the range is inverted
        """
        try:
            return EmployeeSettings.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(issues_from_pydantic(e)) from e

    # -------------------------------------------------------------------------
    # Stage 2
    # -------------------------------------------------------------------------

    def review_payment(
        self,
        draft: PaymentDraft,
        settings: EmployeeSettings,
        existing: Iterable[Payment],
        identity_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ReviewResult:
        """
        Collect non-blocking warnings about a valid draft.

        Args:
            draft: The validated payment
            settings: Current reconciliation policy
            existing: Payments currently stored
            identity_id: Id of the payment being edited, if any
            today: Reference date (defaults to date.today())
        """
        today = today or date.today()
        warnings = []

        if draft.date > today + self._future_tolerance:
            warnings.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Payment date ({draft.date}) is in the future",
                severity="warning",
            ))

        first_due = align_to_weekday(settings.start_date, settings.weekly_payment_day)
        window_end = settings.end_date or today
        if not same_week(draft.date, first_due) and draft.date < first_due:
            warnings.append(ValidationIssue(
                field="date",
                issue_type="outside_window",
                message=(
                    f"Payment date ({draft.date}) is before the first due date "
                    f"({first_due}); it will not count towards the balance"
                ),
                severity="warning",
            ))
        elif settings.end_date is not None and draft.date > window_end:
            warnings.append(ValidationIssue(
                field="date",
                issue_type="outside_window",
                message=(
                    f"Payment date ({draft.date}) is after the end date "
                    f"({settings.end_date}); it will not count towards the balance"
                ),
                severity="warning",
            ))

        if draft.amount != settings.expected_amount:
            warnings.append(ValidationIssue(
                field="amount",
                issue_type="unexpected_amount",
                message=(
                    f"Amount ({draft.amount}) differs from the expected "
                    f"weekly amount ({settings.expected_amount})"
                ),
                severity="warning",
            ))

        for payment in existing:
            if payment.id == identity_id:
                continue
            if payment.date == draft.date:
                if identity_id is None:
                    warnings.append(ValidationIssue(
                        field="date",
                        issue_type="replaces_existing",
                        message=f"This replaces the payment already recorded on {draft.date}",
                        severity="warning",
                    ))
                else:
                    warnings.append(ValidationIssue(
                        field="date",
                        issue_type="replaces_existing",
                        message=f"Moving here replaces the payment already recorded on {draft.date}",
                        severity="warning",
                    ))
            elif same_week(payment.date, draft.date):
                warnings.append(ValidationIssue(
                    field="date",
                    issue_type="same_week",
                    message=(
                        f"A payment on {payment.date} already covers this week; "
                        "only the earliest payment of a week counts"
                    ),
                    severity="warning",
                ))

        return ReviewResult(draft=draft, warnings=warnings)


def get_user_friendly_summary(issues: list[ValidationIssue]) -> str:
    """Plain-language summary of issues for display."""
    if not issues:
        return "All checks passed."

    lines = []
    errors = [issue for issue in issues if issue.severity == "error"]
    warnings = [issue for issue in issues if issue.severity == "warning"]

    if errors:
        lines.append("Please fix the following:")
        lines.extend(f"  • {issue.message}" for issue in errors)
    if warnings:
        if lines:
            lines.append("")
        lines.append("Please verify the following:")
        lines.extend(f"  • {issue.message}" for issue in warnings)

    return "\n".join(lines)
