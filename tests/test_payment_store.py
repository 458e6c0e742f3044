"""
Tests for PaymentStore.

The store must keep at most one payment per date, stay sorted by date,
never change an id, and write the full collection on every mutation.
"""

import json
from datetime import date, timedelta
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pagotrack.models.payment import PaymentDraft
from pagotrack.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    StorageUnavailable,
)
from pagotrack.store import DuplicatePaymentError, PaymentStore


def draft(day, amount="2500", note=None):
    return PaymentDraft(date=day, amount=Decimal(amount), note=note)


class FailingStorage(KeyValueStorage):
    """Storage whose every call fails."""

    def read(self, key):
        raise StorageUnavailable("disk gone")

    def write(self, key, value):
        raise StorageUnavailable("disk gone")

    def delete(self, key):
        raise StorageUnavailable("disk gone")


class TestUpsert:
    """Create and edit semantics."""

    def test_create_assigns_id(self, payment_store):
        payment = payment_store.upsert(draft(date(2024, 1, 5)))
        assert payment.id
        assert payment_store.get(payment.id) == payment
        assert len(payment_store) == 1

    def test_create_on_occupied_date_evicts_previous(self, payment_store):
        first = payment_store.upsert(draft(date(2024, 1, 5), "1000"))
        second = payment_store.upsert(draft(date(2024, 1, 5), "2500"))

        assert len(payment_store) == 1
        assert payment_store.get(first.id) is None
        assert payment_store.find_by_date(date(2024, 1, 5)).id == second.id

    def test_edit_keeps_id_when_date_changes(self, payment_store):
        """Moving a payment frees the old date and keeps the id."""
        original = payment_store.upsert(draft(date(2024, 1, 5)))
        moved = payment_store.upsert(draft(date(2024, 1, 12), "3000"), identity_id=original.id)

        assert moved.id == original.id
        assert payment_store.find_by_date(date(2024, 1, 5)) is None
        assert payment_store.find_by_date(date(2024, 1, 12)).amount == Decimal("3000")
        assert len(payment_store) == 1

    def test_edit_onto_occupied_date_evicts_other_record(self, payment_store):
        a = payment_store.upsert(draft(date(2024, 1, 5)))
        b = payment_store.upsert(draft(date(2024, 1, 12)))

        payment_store.upsert(draft(date(2024, 1, 12), "100"), identity_id=a.id)

        assert [p.id for p in payment_store] == [a.id]
        assert payment_store.get(b.id) is None

    def test_collection_stays_sorted(self, payment_store):
        for day in (date(2024, 1, 19), date(2024, 1, 5), date(2024, 1, 12)):
            payment_store.upsert(draft(day))
        assert [p.date for p in payment_store] == [
            date(2024, 1, 5), date(2024, 1, 12), date(2024, 1, 19),
        ]

    def test_every_mutation_writes_storage(self, payment_store, storage):
        payment = payment_store.upsert(draft(date(2024, 1, 5)))
        payment_store.remove(payment.id)
        assert storage.write_count == 2
        assert json.loads(storage.read("pagotrack_payments")) == []

    @settings(max_examples=50)
    @given(st.lists(
        st.tuples(
            st.integers(min_value=0, max_value=20),
            st.booleans(),
        ),
        max_size=30,
    ))
    def test_at_most_one_payment_per_date(self, operations):
        """Any sequence of creates and edits keeps dates unique and sorted."""
        store = PaymentStore(InMemoryStorage())
        base = date(2024, 1, 1)
        for offset, edit in operations:
            existing = store.all()
            identity = existing[offset % len(existing)].id if edit and existing else None
            store.upsert(draft(base + timedelta(days=offset)), identity_id=identity)

        dates = [p.date for p in store]
        ids = [p.id for p in store]
        assert len(dates) == len(set(dates))
        assert len(ids) == len(set(ids))
        assert dates == sorted(dates)


class TestRemove:

    def test_remove_unknown_id_returns_false(self, payment_store, storage):
        assert payment_store.remove("nope") is False
        assert storage.write_count == 0

    def test_remove_known_id(self, payment_store):
        payment = payment_store.upsert(draft(date(2024, 1, 5)))
        assert payment_store.remove(payment.id) is True
        assert len(payment_store) == 0


class TestReplaceAll:

    def test_rejects_duplicate_dates(self, payment_store, make_payment):
        payment_store.upsert(draft(date(2024, 1, 5)))
        with pytest.raises(DuplicatePaymentError):
            payment_store.replace_all([
                make_payment(date(2024, 1, 12)),
                make_payment(date(2024, 1, 12)),
            ])
        # Untouched
        assert [p.date for p in payment_store] == [date(2024, 1, 5)]

    def test_rejects_duplicate_ids(self, payment_store, make_payment):
        with pytest.raises(DuplicatePaymentError):
            payment_store.replace_all([
                make_payment(date(2024, 1, 5), payment_id="same"),
                make_payment(date(2024, 1, 12), payment_id="same"),
            ])

    def test_sorts_incoming(self, payment_store, make_payment):
        payment_store.replace_all([
            make_payment(date(2024, 1, 12)),
            make_payment(date(2024, 1, 5)),
        ])
        assert [p.date for p in payment_store] == [date(2024, 1, 5), date(2024, 1, 12)]


class TestLoad:
    """The storage boundary."""

    def test_missing_key_gives_empty_store(self, payment_store):
        assert payment_store.load() == []

    def test_round_trip_through_storage(self, storage):
        writer = PaymentStore(storage)
        writer.upsert(PaymentDraft(date=date(2024, 1, 5), amount=Decimal("2500.50"), note="Cash"))

        reader = PaymentStore(storage)
        loaded = reader.load()

        assert len(loaded) == 1
        assert loaded[0].amount == Decimal("2500.50")
        assert loaded[0].note == "Cash"

    def test_stored_shape(self, payment_store, storage):
        payment = payment_store.upsert(draft(date(2024, 1, 5), "2500"))
        stored = json.loads(storage.read("pagotrack_payments"))
        assert stored == [{"id": payment.id, "date": "2024-01-05", "amount": 2500}]

    def test_corrupt_data_gives_empty_store(self):
        store = PaymentStore(InMemoryStorage({"pagotrack_payments": "{not json"}))
        assert store.load() == []

    def test_undecodable_file_gives_empty_store(self, tmp_path):
        (tmp_path / "pagotrack_payments.json").write_bytes(b'[{"id": "1", "note": "\xff\xfe"}]')
        store = PaymentStore(JsonFileStorage(tmp_path))

        assert store.load() == []
        assert store.is_persistent

        payment = store.upsert(draft(date(2024, 1, 5)))
        stored = json.loads((tmp_path / "pagotrack_payments.json").read_text(encoding="utf-8"))
        assert [item["id"] for item in stored] == [payment.id]

    def test_non_list_data_gives_empty_store(self):
        store = PaymentStore(InMemoryStorage({"pagotrack_payments": '{"id": "1"}'}))
        assert store.load() == []

    def test_duplicate_dates_last_one_wins(self):
        raw = json.dumps([
            {"id": "a", "date": "2024-01-05", "amount": 1000},
            {"id": "b", "date": "2024-01-05", "amount": 2500},
        ])
        store = PaymentStore(InMemoryStorage({"pagotrack_payments": raw}))
        loaded = store.load()
        assert [p.id for p in loaded] == ["b"]

    def test_numeric_ids_from_older_data(self):
        raw = json.dumps([{"id": 1704412800000, "date": "2024-01-05", "amount": 2500}])
        store = PaymentStore(InMemoryStorage({"pagotrack_payments": raw}))
        assert store.load()[0].id == "1704412800000"


class TestDegradedStorage:
    """Storage failures fall back to memory for the session."""

    def test_write_failure_keeps_working_in_memory(self):
        store = PaymentStore(FailingStorage())
        payment = store.upsert(draft(date(2024, 1, 5)))

        assert store.get(payment.id) == payment
        assert store.is_persistent is False

    def test_read_failure_gives_empty_store(self):
        store = PaymentStore(FailingStorage())
        assert store.load() == []
        assert store.is_persistent is False
