"""
Payment Store

Owns the collection of recorded payments.

INVARIANTS (hold after every operation):
1. At most one payment per date
2. Payments are sorted ascending by date
3. Ids never change once assigned

The one-per-date rule is enforced by EVICTION, not rejection: saving a
new payment on an occupied date replaces the payment that was there.

Every successful mutation writes the full collection to storage.
If storage fails, the store keeps working in memory for the rest of
the session.
"""

import json
from datetime import date
from typing import Iterable, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from pagotrack.events import EventLogger
from pagotrack.models.payment import Payment, PaymentDraft, new_payment_id
from pagotrack.services.storage import KeyValueStorage, StorageCorrupt, StorageUnavailable


class DuplicatePaymentError(ValueError):
    """A wholesale replacement would break the one-per-date or unique-id rule."""
    pass


class PaymentStore:
    """
    In-memory ordered payment collection with a storage boundary.

    Usage:
        store = PaymentStore(storage, key="pagotrack_payments")
        store.load()
        payment = store.upsert(draft)
        store.upsert(edited_draft, identity_id=payment.id)
        store.remove(payment.id)
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        key: str = "pagotrack_payments",
        event_logger: Optional[EventLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._events = event_logger or EventLogger()
        self._payments: list[Payment] = []

    # -------------------------------------------------------------------------
    # Read view
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator[Payment]:
        return iter(list(self._payments))

    def __len__(self) -> int:
        return len(self._payments)

    def all(self) -> list[Payment]:
        """Date-sorted copy of the collection."""
        return list(self._payments)

    def get(self, payment_id: str) -> Optional[Payment]:
        return next((p for p in self._payments if p.id == payment_id), None)

    def find_by_date(self, day: date) -> Optional[Payment]:
        return next((p for p in self._payments if p.date == day), None)

    @property
    def is_persistent(self) -> bool:
        """False once storage has failed (or none was configured)."""
        return self._storage is not None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def upsert(self, candidate: PaymentDraft, identity_id: Optional[str] = None) -> Payment:
        """
        Insert or replace a payment.

        Edit mode (identity_id given): the record with that id is removed
        and the candidate is inserted under the same id, whether or not
        the date changed.

        Create mode: any record on candidate.date is evicted and the
        candidate is inserted under a fresh id.

        In both modes a different record already sitting on the
        candidate's date is evicted, so the one-per-date rule holds.

        Returns:
            The stored payment
        """
        created = identity_id is None
        payment_id = new_payment_id() if created else identity_id
        payment = Payment.from_draft(candidate, payment_id)

        remaining = [
            p for p in self._payments
            if p.id != payment_id and p.date != payment.date
        ]
        remaining.append(payment)
        self._payments = sorted(remaining, key=lambda p: p.date)

        self.save()
        self._events.log_payment_saved(
            payment_id=payment.id,
            payment_date=payment.date.isoformat(),
            amount=str(payment.amount),
            created=created,
        )
        return payment

    def remove(self, payment_id: str) -> bool:
        """
        Delete a payment by id.

        Returns:
            True if a payment was removed, False if the id was unknown
        """
        remaining = [p for p in self._payments if p.id != payment_id]
        if len(remaining) == len(self._payments):
            return False

        self._payments = remaining
        self.save()
        self._events.log_payment_removed(payment_id)
        return True

    def replace_all(self, payments: Iterable[Payment]) -> None:
        """
        Replace the whole collection (backup import, reset).

        Raises:
            DuplicatePaymentError: If two payments share a date or an id.
                The current collection is left untouched.
        """
        incoming = list(payments)
        self._check_unique(incoming)
        self._payments = sorted(incoming, key=lambda p: p.date)
        self.save()

    @staticmethod
    def _check_unique(payments: list[Payment]) -> None:
        seen_dates: set[date] = set()
        seen_ids: set[str] = set()
        for payment in payments:
            if payment.date in seen_dates:
                raise DuplicatePaymentError(f"More than one payment on {payment.date}")
            if payment.id in seen_ids:
                raise DuplicatePaymentError(f"Duplicate payment id {payment.id}")
            seen_dates.add(payment.date)
            seen_ids.add(payment.id)

    # -------------------------------------------------------------------------
    # Storage boundary
    # -------------------------------------------------------------------------

    def to_json(self) -> str:
        return json.dumps([p.to_storage_dict() for p in self._payments], ensure_ascii=False)

    def save(self) -> None:
        """Write the full collection to storage (no-op when in memory only)."""
        if self._storage is None:
            return
        try:
            self._storage.write(self._key, self.to_json())
        except StorageUnavailable as e:
            self._events.log_storage_degraded(self._key, str(e))
            self._storage = None

    def load(self) -> list[Payment]:
        """
        Read the stored collection, replacing what is in memory.

        Missing data yields an empty collection. Unreadable data is
        logged and also yields an empty collection. If two stored
        payments share a date, the one read last wins.
        """
        self._payments = []
        if self._storage is None:
            return self.all()

        try:
            raw = self._storage.read(self._key)
        except StorageCorrupt as e:
            self._events.log_stored_data_corrupt(self._key, str(e))
            return self.all()
        except StorageUnavailable as e:
            self._events.log_storage_degraded(self._key, str(e))
            self._storage = None
            return self.all()

        if raw is None:
            return self.all()

        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("Stored payments are not a list")
            loaded = [Payment.model_validate(item) for item in items]
        except (ValueError, PydanticValidationError) as e:
            self._events.log_stored_data_corrupt(self._key, str(e))
            return self.all()

        by_date: dict[date, Payment] = {}
        for payment in loaded:
            by_date[payment.date] = payment
        self._payments = sorted(by_date.values(), key=lambda p: p.date)

        self._events.log_state_loaded(self._key, len(self._payments))
        return self.all()
