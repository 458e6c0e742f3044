"""
Backup Export / Import

Export produces a JSON document:
    {"version": 1, "timestamp": "<ISO-8601>", "settings": {...}, "payments": [...]}

Import is ALL OR NOTHING. The document is accepted only if `payments`
is an array, `settings` is an object, and every entry validates. Any
failure raises ImportFormatError before anything is replaced.
"""

import json
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from pagotrack.models.backup import BACKUP_VERSION, BackupDocument
from pagotrack.models.payment import EmployeeSettings, Payment


class ImportFormatError(Exception):
    """The backup is missing required fields or has the wrong types."""
    pass


def backup_file_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"pagotrack_backup_{today.isoformat()}.json"


def export_backup(
    settings: EmployeeSettings,
    payments: Iterable[Payment],
    timestamp: Optional[datetime] = None,
) -> BackupDocument:
    return BackupDocument(
        version=BACKUP_VERSION,
        timestamp=timestamp or datetime.now(timezone.utc),
        settings=settings,
        payments=list(payments),
    )


def dumps_backup(document: BackupDocument) -> str:
    """Pretty-printed JSON text of a backup."""
    return json.dumps(document.to_json_dict(), indent=2, ensure_ascii=False)


def parse_backup(raw: Union[str, bytes, dict]) -> BackupDocument:
    """
    Parse and validate a backup document.

    Raises:
        ImportFormatError: If the document is not valid JSON, lacks an
            object `settings` or an array `payments`, or any entry fails
            validation
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            raise ImportFormatError(f"Backup is not valid JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, dict):
        raise ImportFormatError("Backup must be a JSON object")
    if not isinstance(data.get("payments"), list):
        raise ImportFormatError("Backup field 'payments' must be an array")
    if not isinstance(data.get("settings"), dict):
        raise ImportFormatError("Backup field 'settings' must be an object")

    version = data.get("version", BACKUP_VERSION)
    if version != BACKUP_VERSION:
        raise ImportFormatError(f"Unsupported backup version: {version!r}")

    try:
        settings = EmployeeSettings.model_validate(data["settings"])
    except PydanticValidationError as e:
        raise ImportFormatError(f"Backup settings are invalid: {e}") from e

    payments = []
    for index, item in enumerate(data["payments"]):
        try:
            payments.append(Payment.model_validate(item))
        except PydanticValidationError as e:
            raise ImportFormatError(f"Backup payment #{index} is invalid: {e}") from e

    seen_dates = set()
    seen_ids = set()
    for payment in payments:
        if payment.date in seen_dates:
            raise ImportFormatError(f"Backup has more than one payment on {payment.date}")
        if payment.id in seen_ids:
            raise ImportFormatError(f"Backup has duplicate payment id {payment.id}")
        seen_dates.add(payment.date)
        seen_ids.add(payment.id)

    timestamp = data.get("timestamp")
    try:
        return BackupDocument(
            version=BACKUP_VERSION,
            timestamp=timestamp if timestamp else datetime.now(timezone.utc),
            settings=settings,
            payments=payments,
        )
    except PydanticValidationError as e:
        raise ImportFormatError(f"Backup timestamp is invalid: {e}") from e
