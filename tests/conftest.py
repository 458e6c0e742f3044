"""
Shared fixtures for PagoTrack tests.

No test touches the user's data directory or calls Gemini: storage is
in-memory (or under tmp_path) and the Gemini model is a fake.
"""

from datetime import date
from decimal import Decimal

import pytest

from pagotrack.events import EventLogger
from pagotrack.models.payment import EmployeeSettings, Payment
from pagotrack.orchestrator import PaymentTracker
from pagotrack.services.storage import InMemoryStorage
from pagotrack.store import PaymentStore, SettingsStore
from pagotrack.validation import PaymentValidator


@pytest.fixture
def employee_settings() -> EmployeeSettings:
    """Friday payments of 2500 starting Monday 2024-01-01."""
    return EmployeeSettings(
        name="Juan Pérez",
        weekly_payment_day=5,
        expected_amount=Decimal("2500"),
        start_date=date(2024, 1, 1),
    )


@pytest.fixture
def make_payment():
    """Factory for stored payments with readable ids."""
    counter = {"n": 0}

    def _make(day, amount="2500", note=None, payment_id=None, receipt_image=None):
        counter["n"] += 1
        return Payment(
            id=payment_id or f"p{counter['n']}",
            date=day,
            amount=Decimal(amount),
            note=note,
            receipt_image=receipt_image,
        )

    return _make


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def event_logger() -> EventLogger:
    return EventLogger("pagotrack.tests")


@pytest.fixture
def payment_store(storage, event_logger) -> PaymentStore:
    return PaymentStore(storage, event_logger=event_logger)


@pytest.fixture
def settings_store(storage, event_logger) -> SettingsStore:
    return SettingsStore(storage, event_logger=event_logger)


@pytest.fixture
def tracker(settings_store, payment_store, employee_settings, event_logger) -> PaymentTracker:
    """Tracker over in-memory storage, seeded with employee_settings."""
    settings_store.replace(employee_settings)
    return PaymentTracker(
        settings_store=settings_store,
        payment_store=payment_store,
        validator=PaymentValidator(future_date_tolerance_days=0),
        event_logger=event_logger,
    )
