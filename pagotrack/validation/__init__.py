"""Validation package."""

from pagotrack.validation.validator import (
    PaymentValidator,
    ReviewResult,
    ValidationError,
    ValidationIssue,
    get_user_friendly_summary,
    issues_from_pydantic,
)

__all__ = [
    "PaymentValidator",
    "ReviewResult",
    "ValidationError",
    "ValidationIssue",
    "get_user_friendly_summary",
    "issues_from_pydantic",
]
