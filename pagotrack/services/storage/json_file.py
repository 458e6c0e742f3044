"""
JSON File Storage Implementation

DESIGN DECISION: Each key is stored as its own UTF-8 file inside a data
directory, mirroring the browser local storage the app was designed
around:
1. No database setup required
2. Users can open, copy and back up the files directly
3. One key = one file, so settings and payments never share a write

TRADEOFFS:
- Not suitable for concurrent writers (we assume a single user)
- Whole-value rewrites on every save (fine for a few hundred payments)

Writes go to a temporary file first and are moved into place with
os.replace(), so a crash mid-write leaves the previous value intact.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pagotrack.config import get_settings
from pagotrack.services.storage.interface import (
    KeyValueStorage,
    StorageCorrupt,
    StorageUnavailable,
)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage(KeyValueStorage):
    """
    File-per-key storage.

    Transient OS errors (e.g. a file briefly locked by a sync client)
    are retried with exponential backoff before giving up.
    """

    def __init__(
        self,
        data_dir: Optional[Union[str, Path]] = None,
        attempts: Optional[int] = None,
        wait_max: float = 2.0,
    ):
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._attempts = attempts or settings.write_attempts
        self._wait_max = wait_max

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=0.1, min=0, max=self._wait_max),
            retry=retry_if_exception_type(OSError),
        )

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            for attempt in self._retrying():
                with attempt:
                    if not path.exists():
                        return None
                    return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageCorrupt(f"{path} is not valid UTF-8: {e}") from e
        except RetryError as e:
            raise StorageUnavailable(f"Could not read {path}: {e.last_attempt.exception()}") from e
        return None

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            for attempt in self._retrying():
                with attempt:
                    self._atomic_write(path, value)
        except RetryError as e:
            raise StorageUnavailable(f"Could not write {path}: {e.last_attempt.exception()}") from e

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Could not delete {path}: {e}") from e

    def _atomic_write(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
