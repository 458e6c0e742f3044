"""
Tests for the debt calculator.

Covers the canonical calendar-weeks formula, the named variants and
the sign convention (debt > 0 means underpaid).
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pagotrack.dates import start_of_week
from pagotrack.models.ledger import DebtFormula
from pagotrack.models.payment import EmployeeSettings, Payment
from pagotrack.reconciliation import (
    all_time_total,
    build_ledger,
    calculate_debt,
    calculate_debt_for_weeks,
    calculate_debt_variant,
    first_due_date,
)


class TestCalculateDebt:
    """Canonical formula."""

    def test_no_payments(self, employee_settings):
        ledger = build_ledger(employee_settings, [], cutoff=date(2024, 1, 19))
        summary = calculate_debt(ledger, employee_settings)

        assert summary.weeks_elapsed == 3
        assert summary.expected_total == Decimal("7500")
        assert summary.actual_total == Decimal("0")
        assert summary.debt == Decimal("7500")
        assert summary.missed_weeks == 3
        assert summary.balance_label == "Owed"

    def test_one_payment_in_three_weeks(self, employee_settings, make_payment):
        ledger = build_ledger(employee_settings, [make_payment(date(2024, 1, 11))], cutoff=date(2024, 1, 19))
        summary = calculate_debt(ledger, employee_settings)

        assert summary.actual_total == Decimal("2500")
        assert summary.debt == Decimal("5000")
        assert summary.paid_weeks == 1
        assert summary.missed_weeks == 2

    def test_empty_ledger_has_no_debt(self, employee_settings):
        summary = calculate_debt([], employee_settings)
        assert summary.expected_total == 0
        assert summary.debt == 0
        assert summary.balance_label == "Up to date"
        assert not summary.is_underpaid

    def test_overpayment_gives_negative_debt(self, employee_settings, make_payment):
        ledger = build_ledger(employee_settings, [make_payment(date(2024, 1, 5), "4000")], cutoff=date(2024, 1, 5))
        summary = calculate_debt(ledger, employee_settings)
        assert summary.debt == Decimal("-1500")
        assert summary.balance_label == "Ahead"

    def test_payments_outside_window_not_counted(self, employee_settings, make_payment):
        before_start = make_payment(date(2023, 12, 20))
        ledger = build_ledger(employee_settings, [before_start], cutoff=date(2024, 1, 5))
        summary = calculate_debt(ledger, employee_settings)

        assert summary.actual_total == 0
        assert all_time_total([before_start]) == Decimal("2500")

    def test_same_inputs_same_result(self, employee_settings, make_payment):
        ledger = build_ledger(employee_settings, [make_payment(date(2024, 1, 11))], cutoff=date(2024, 3, 1))
        assert calculate_debt(ledger, employee_settings) == calculate_debt(ledger, employee_settings)


class TestDebtForWeeks:

    def test_from_raw_week_count(self, employee_settings):
        summary = calculate_debt_for_weeks(4, Decimal("5000"), employee_settings)
        assert summary.expected_total == Decimal("10000")
        assert summary.debt == Decimal("5000")

    def test_rejects_negative_weeks(self, employee_settings):
        with pytest.raises(ValueError):
            calculate_debt_for_weeks(-1, Decimal("0"), employee_settings)


class TestMonotonicity:
    """Holding payments fixed, debt does not decrease as weeks elapse."""

    @given(
        weeks=st.integers(min_value=0, max_value=200),
        actual=st.decimals(min_value=0, max_value=100000, places=2),
    )
    def test_raw_week_count(self, weeks, actual):
        settings = EmployeeSettings(
            name="Ana",
            weekly_payment_day=5,
            expected_amount=Decimal("2500"),
            start_date=date(2024, 1, 1),
        )
        now = calculate_debt_for_weeks(weeks, actual, settings)
        later = calculate_debt_for_weeks(weeks + 1, actual, settings)
        assert later.debt >= now.debt

    @given(
        weekday=st.integers(min_value=0, max_value=6),
        offsets=st.sets(st.integers(min_value=0, max_value=120), max_size=20),
        amount=st.decimals(min_value=0, max_value=2500, places=2),
    )
    def test_ledger_at_week_ends(self, weekday, offsets, amount):
        """Payments of at most the expected amount, measured at the end of each due week."""
        settings = EmployeeSettings(
            name="Ana",
            weekly_payment_day=weekday,
            expected_amount=Decimal("2500"),
            start_date=date(2024, 1, 1),
        )
        payments = [
            Payment(id=str(offset), date=date(2024, 1, 1) + timedelta(days=offset), amount=amount)
            for offset in offsets
        ]
        first_due = first_due_date(settings)

        debts = []
        for week in range(18):
            due = first_due + timedelta(weeks=week)
            cutoff = start_of_week(due) + timedelta(days=6)
            ledger = build_ledger(settings, payments, cutoff=cutoff)
            assert len(ledger) == week + 1
            debts.append(calculate_debt(ledger, settings).debt)

        assert debts == sorted(debts)


class TestVariants:
    """Named alternative formulas."""

    def test_calendar_weeks_variant_is_canonical(self, employee_settings, make_payment):
        payments = [make_payment(date(2024, 1, 11))]
        ledger = build_ledger(employee_settings, payments, cutoff=date(2024, 1, 19))
        variant = calculate_debt_variant(
            DebtFormula.CALENDAR_WEEKS, ledger, payments, employee_settings, date(2024, 1, 19),
        )
        assert variant == calculate_debt(ledger, employee_settings)

    def test_recorded_payments_variant(self, employee_settings, make_payment):
        payments = [make_payment(date(2024, 1, 11), "2000"), make_payment(date(2023, 12, 1), "2500")]
        ledger = build_ledger(employee_settings, payments, cutoff=date(2024, 1, 19))
        variant = calculate_debt_variant(
            DebtFormula.RECORDED_PAYMENTS, ledger, payments, employee_settings, date(2024, 1, 19),
        )

        assert variant.formula == DebtFormula.RECORDED_PAYMENTS
        assert variant.weeks_elapsed == 2
        assert variant.expected_total == Decimal("5000")
        assert variant.actual_total == Decimal("4500")
        assert variant.debt == Decimal("500")

    def test_four_weeks_per_month_variant(self, employee_settings, make_payment):
        payments = [make_payment(date(2024, 1, 11))]
        cutoff = date(2024, 2, 10)
        ledger = build_ledger(employee_settings, payments, cutoff=cutoff)
        variant = calculate_debt_variant(
            DebtFormula.FOUR_WEEKS_PER_MONTH, ledger, payments, employee_settings, cutoff,
        )

        assert variant.weeks_elapsed == 8
        assert variant.expected_total == Decimal("20000")
        assert variant.actual_total == Decimal("2500")
        assert variant.debt == Decimal("17500")
