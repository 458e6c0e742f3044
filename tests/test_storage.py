"""
Tests for the storage adapters.

JsonFileStorage runs against pytest's tmp_path; nothing outside it is
touched.
"""

import json

import pytest

from pagotrack.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    StorageCorrupt,
    StorageUnavailable,
)


class TestJsonFileStorage:

    def test_missing_key_reads_none(self, tmp_path):
        assert JsonFileStorage(tmp_path).read("pagotrack_payments") is None

    def test_write_then_read(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.write("pagotrack_settings", json.dumps({"name": "Juan Pérez"}, ensure_ascii=False))

        assert json.loads(storage.read("pagotrack_settings")) == {"name": "Juan Pérez"}
        assert (tmp_path / "pagotrack_settings.json").exists()

    def test_write_replaces_whole_value(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.write("k", "[1, 2, 3]")
        storage.write("k", "[]")
        assert storage.read("k") == "[]"

    def test_no_temp_files_left_behind(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.write("k", "{}")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_creates_data_dir(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "nested" / "dir")
        storage.write("k", "{}")
        assert storage.read("k") == "{}"

    def test_delete(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.write("k", "{}")
        storage.delete("k")
        storage.delete("k")
        assert storage.read("k") is None

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "white space"])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        with pytest.raises(ValueError):
            JsonFileStorage(tmp_path).read(key)

    def test_unwritable_location_raises_storage_unavailable(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("file")
        storage = JsonFileStorage(blocker / "data", attempts=2, wait_max=0)

        with pytest.raises(StorageUnavailable):
            storage.write("k", "{}")

    def test_invalid_utf8_raises_storage_corrupt(self, tmp_path):
        (tmp_path / "k.json").write_bytes(b"\xff\xfe{}")

        with pytest.raises(StorageCorrupt, match="not valid UTF-8"):
            JsonFileStorage(tmp_path, attempts=2, wait_max=0).read("k")


class TestInMemoryStorage:

    def test_initial_values_and_snapshot(self):
        storage = InMemoryStorage({"a": "1"})
        storage.write("b", "2")

        assert storage.read("a") == "1"
        assert storage.snapshot() == {"a": "1", "b": "2"}
        assert storage.write_count == 1

    def test_delete_missing_key_is_noop(self):
        storage = InMemoryStorage()
        storage.delete("missing")
        assert storage.read("missing") is None
