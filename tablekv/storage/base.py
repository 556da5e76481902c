"""
Record Store Interface

The server only talks to storage through this narrow CRUD interface.
Implementations are not required to be thread-safe: the command
executor guarantees that at most one call is in flight at a time.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


class RecordStore(ABC):
    """
    Key-value collaborator keyed by unique string keys.

    All methods raise StoreError when the backing storage fails.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for key, or None if the key is absent."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if key is present."""

    @abstractmethod
    def insert(self, key: str, value: str) -> None:
        """Add a new entry. The key must not already exist."""

    @abstractmethod
    def update(self, key: str, value: str) -> None:
        """Replace the value of an existing entry."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an entry. Deleting an absent key is not an error."""

    @abstractmethod
    def list(self) -> List[Tuple[str, str]]:
        """Return all entries ordered by key."""

    def close(self) -> None:
        """Release any resources held by the store."""
