"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract key-value interface for storage.
This allows us to:
1. Swap the JSON file backend for something else later
2. Use in-memory storage for testing and as a degraded fallback
3. Keep the stores decoupled from where bytes end up

The interface is intentionally tiny: every value is written verbatim
as a whole (no partial or delta writes) and read once at startup.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """
    Abstract interface for whole-value key-value storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if the key was never written

        Raises:
            StorageUnavailable: If the backend cannot be read
            StorageCorrupt: If the stored bytes cannot be decoded
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        The write is atomic from the caller's perspective: a reader
        sees either the old value or the new one, never a mix.

        Raises:
            StorageUnavailable: If the backend cannot be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key if present."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailable(StorageError):
    """The storage backend cannot be read or written."""
    pass


class StorageCorrupt(StorageError):
    """The backend was read, but the stored value is not valid text."""
    pass
