"""
Memory Key-Value Adapter - In-memory TTL storage (testing only).
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from carelink_auth.ports.kv_port import KeyValuePort


class MemoryKeyValueAdapter(KeyValuePort):
    """
    In-memory key-value storage with TTL expiry.

    WARNING: Only for testing. Data is lost on restart and not shared
    between processes.

    The clock is injectable so tests can move time forward instead of sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize in-memory storage.

        Args:
            clock: Returns the current unix time in seconds
        """
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.RLock()

    def _live(self, key: str) -> Optional[str]:
        """Value if present and unexpired. Expired keys are dropped."""
        item = self._data.get(key)
        if item is None:
            return None

        value, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def _write(self, key: str, value: str, ttl: int) -> None:
        self._data[key] = (value, self._clock() + ttl)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._live(key)

    def set(self, key: str, value: str, ttl: int, nx: bool = False, xx: bool = False) -> bool:
        with self._lock:
            present = self._live(key) is not None
            if nx and present:
                return False
            if xx and not present:
                return False
            self._write(key, value, ttl)
            return True

    def delete(self, *keys: str) -> int:
        with self._lock:
            removed = 0
            for key in keys:
                if self._live(key) is not None:
                    del self._data[key]
                    removed += 1
            return removed

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    def ttl(self, key: str) -> Optional[int]:
        with self._lock:
            if self._live(key) is None:
                return None
            expires_at = self._data[key][1]
            if expires_at is None:
                return None
            return int(round(expires_at - self._clock()))

    def compare_and_set(
        self,
        key: str,
        expected: Optional[str],
        value: Optional[str],
        ttl: int,
    ) -> bool:
        with self._lock:
            if self._live(key) != expected:
                return False
            if value is None:
                self._data.pop(key, None)
            else:
                self._write(key, value, ttl)
            return True

    def keys(self):
        """Live keys (test helper)."""
        with self._lock:
            return [k for k in list(self._data) if self._live(k) is not None]
