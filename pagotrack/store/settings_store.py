"""
Settings Store

Owns the current EmployeeSettings. Every other component receives the
settings by value and never holds on to them.
"""

import json
from datetime import date
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from pagotrack.config import get_settings
from pagotrack.events import EventLogger
from pagotrack.models.payment import EmployeeSettings
from pagotrack.services.storage import KeyValueStorage, StorageCorrupt, StorageUnavailable


def default_employee_settings(today: Optional[date] = None) -> EmployeeSettings:
    """Settings for a fresh installation: configured defaults, starting on January 1st."""
    today = today or date.today()
    app = get_settings().app
    return EmployeeSettings(
        name=app.default_employee_name,
        weekly_payment_day=app.default_weekly_payment_day,
        expected_amount=app.default_expected_amount,
        start_date=date(today.year, 1, 1),
    )


class SettingsStore:
    """Current settings with a load/save boundary."""

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        key: str = "pagotrack_settings",
        event_logger: Optional[EventLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._events = event_logger or EventLogger()
        self._settings = default_employee_settings()

    @property
    def current(self) -> EmployeeSettings:
        return self._settings

    @property
    def is_persistent(self) -> bool:
        return self._storage is not None

    def replace(self, settings: EmployeeSettings) -> EmployeeSettings:
        """Store a validated settings object and persist it."""
        previous = self._settings.model_dump()
        self._settings = settings
        self.save()

        changed = [
            field for field, value in settings.model_dump().items()
            if previous.get(field) != value
        ]
        self._events.log_settings_updated(changed)
        return settings

    def reset(self, today: Optional[date] = None) -> EmployeeSettings:
        return self.replace(default_employee_settings(today))

    def save(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.write(self._key, json.dumps(self._settings.to_storage_dict(), ensure_ascii=False))
        except StorageUnavailable as e:
            self._events.log_storage_degraded(self._key, str(e))
            self._storage = None

    def load(self) -> EmployeeSettings:
        """
        Read stored settings. Missing or unreadable data falls back to
        the defaults (and the corruption is logged).
        """
        if self._storage is None:
            return self._settings

        try:
            raw = self._storage.read(self._key)
        except StorageCorrupt as e:
            self._events.log_stored_data_corrupt(self._key, str(e))
            return self._settings
        except StorageUnavailable as e:
            self._events.log_storage_degraded(self._key, str(e))
            self._storage = None
            return self._settings

        if raw is None:
            return self._settings

        try:
            self._settings = EmployeeSettings.model_validate(json.loads(raw))
        except (ValueError, PydanticValidationError) as e:
            self._events.log_stored_data_corrupt(self._key, str(e))
            return self._settings

        self._events.log_state_loaded(self._key, 1)
        return self._settings
