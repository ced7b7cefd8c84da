"""A thread-safe string-keyed dictionary."""

from __future__ import annotations

import random
import threading
from typing import Any, Callable


class SyncDict:
    """A dictionary guarded by a lock, with Redis-style put semantics."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> tuple[Any, bool]:
        """Return ``(value, found)`` for the key."""
        with self._lock:
            if key in self._data:
                return self._data[key], True
            return None, False

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def put(self, key: str, value: Any) -> int:
        """Store the value; return 1 if the key is new, else 0."""
        with self._lock:
            existed = key in self._data
            self._data[key] = value
            return 0 if existed else 1

    def put_if_absent(self, key: str, value: Any) -> int:
        """Store only if the key is missing; return 1 if stored."""
        with self._lock:
            if key in self._data:
                return 0
            self._data[key] = value
            return 1

    def put_if_exists(self, key: str, value: Any) -> int:
        """Store only if the key is present; return 1 if stored."""
        with self._lock:
            if key in self._data:
                self._data[key] = value
                return 1
            return 0

    def remove(self, key: str) -> int:
        """Delete the key; return 1 if it was present."""
        with self._lock:
            return 0 if self._data.pop(key, _MISSING) is _MISSING else 1

    def for_each(self, consumer: Callable[[str, Any], object]) -> None:
        """Call ``consumer(key, value)`` for every entry."""
        with self._lock:
            items = list(self._data.items())
        for key, value in items:
            consumer(key, value)

    def keys(self) -> list[str]:
        """All keys."""
        with self._lock:
            return list(self._data)

    def random_keys(self, limit: int) -> list[str]:
        """Up to ``limit`` keys picked at random; repeats are possible."""
        keys = self.keys()
        if not keys or limit <= 0:
            return []
        return random.choices(keys, k=limit)

    def random_distinct_keys(self, limit: int) -> list[str]:
        """Up to ``limit`` distinct keys picked at random."""
        keys = self.keys()
        return random.sample(keys, min(max(limit, 0), len(keys)))

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._data = {}


_MISSING = object()