"""In-memory storage, used in tests and when no data directory is usable."""

from typing import Optional

from pagotrack.services.storage.interface import KeyValueStorage


class InMemoryStorage(KeyValueStorage):

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value
        self.write_count += 1

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)
