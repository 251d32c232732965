"""
Process cache for mapping lookups.

A keyed, grouped store without expiry. Values are set once per key and
stay until the cache is discarded; absent results are cached too, so
``get`` reports whether a key was found separately from its value.
"""

import threading
from typing import Any, Hashable


DEFAULT_GROUP = "mapped_domains"


class ProcessCache:
    """In-memory cache scoped to one resolver (normally one request)."""

    def __init__(self) -> None:
        self._store: dict[tuple[str, Hashable], Any] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, group: str = DEFAULT_GROUP) -> tuple[Any, bool]:
        """
        Look up a key.

        Returns:
            ``(value, True)`` on a hit, ``(None, False)`` on a miss
        """
        with self._lock:
            if (group, key) in self._store:
                return self._store[(group, key)], True
        return None, False

    def set(self, key: Hashable, value: Any, group: str = DEFAULT_GROUP) -> None:
        with self._lock:
            self._store[(group, key)] = value

    def __contains__(self, item: tuple[str, Hashable]) -> bool:
        with self._lock:
            return item in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
