from __future__ import annotations

import threading
from pathlib import Path


class KeyedLockRegistry:
    """
    Hands out one stable lock per key so unrelated keys never contend.

    Keys are instance ids for lock-state mutations and resolved file paths
    for document writes.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def lock_for_path(self, path: Path) -> threading.Lock:
        return self.lock_for(str(path.resolve()))


GLOBAL_PATH_LOCKS = KeyedLockRegistry()
