"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
The JSON file backend is the default; in-memory storage backs tests
and the degraded mode.
"""

from pagotrack.services.storage.interface import (
    KeyValueStorage,
    StorageCorrupt,
    StorageError,
    StorageUnavailable,
)
from pagotrack.services.storage.json_file import JsonFileStorage
from pagotrack.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "KeyValueStorage",
    # Exceptions
    "StorageCorrupt",
    "StorageError",
    "StorageUnavailable",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
