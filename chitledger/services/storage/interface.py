"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The ledger persists through a plain string key-value
contract. This allows us to:
1. Keep the same key layout as the browser storage the ledger started on
2. Use in-memory storage for testing
3. Swap the JSON file for an embedded database later
4. Keep business logic decoupled from storage implementation

The interface is intentionally tiny. Keys and values are strings;
serialization is the caller's job (see LedgerStore).
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from chitledger.ledger.errors import (
    MalformedImport,
    StorageError,
    StorageQuotaExceeded,
)


class KeyValueAdapter(ABC):
    """
    Abstract interface for key-value persistence.

    Any backend (JSON file, in-memory, SQLite, ...) must implement these
    methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: if the backend cannot be read
        """
        pass

    @abstractmethod
    def set_many(self, items: Mapping[str, str]) -> None:
        """
        Write several keys in one step.

        Either every key is written or none is.

        Raises:
            StorageQuotaExceeded: if the backend is full
            StorageError: if the write fails for any other reason
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key; absent keys are ignored."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        pass

    def set(self, key: str, value: str) -> None:
        """Write a single key."""
        self.set_many({key: value})


__all__ = [
    "KeyValueAdapter",
    "MalformedImport",
    "StorageError",
    "StorageQuotaExceeded",
]
