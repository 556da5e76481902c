"""
In-Memory Record Store

Dictionary-backed store used by the test suite and by ``--memory``
runs. Contents are lost when the process exits.
"""

from typing import Dict, List, Optional, Tuple

from ..errors import StoreError
from .base import RecordStore


class MemoryRecordStore(RecordStore):
    """
    Record store that keeps entries in a plain dict.

    Provides O(1) average-case get/exists/insert/update/delete and
    O(n log n) list (entries are sorted by key).
    """

    def __init__(self):
        self._store: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def exists(self, key: str) -> bool:
        return key in self._store

    def insert(self, key: str, value: str) -> None:
        if key in self._store:
            raise StoreError(f"duplicate key {key!r}")
        self._store[key] = value

    def update(self, key: str, value: str) -> None:
        if key not in self._store:
            raise StoreError(f"no entry for key {key!r}")
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def list(self) -> List[Tuple[str, str]]:
        return sorted(self._store.items())

    def size(self) -> int:
        """Get the current number of entries in the store."""
        return len(self._store)

    def clear(self) -> None:
        """Remove all entries from the store."""
        self._store.clear()
