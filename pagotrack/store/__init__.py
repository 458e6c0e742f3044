"""Stateful stores: the only owners of mutable application state."""

from pagotrack.store.payment_store import DuplicatePaymentError, PaymentStore
from pagotrack.store.settings_store import SettingsStore, default_employee_settings

__all__ = [
    "DuplicatePaymentError",
    "PaymentStore",
    "SettingsStore",
    "default_employee_settings",
]
