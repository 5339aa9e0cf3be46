"""
Key-Value Port - Interface for the TTL-backed key-value store.

Implementations:
- RedisKeyValueAdapter: Redis (production)
- MemoryKeyValueAdapter: In-memory with a pluggable clock (testing only)

A missing key is a normal result everywhere (None / False / 0), never an
exception. Expiry is enforced by the store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValuePort(ABC):
    """Port: TTL-backed key-value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Get a value.

        Args:
            key: Key

        Returns:
            Stored string, or None if absent or expired
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: int, nx: bool = False, xx: bool = False) -> bool:
        """
        Set a value with a TTL.

        Args:
            key: Key
            value: String value
            ttl: Time-to-live in seconds
            nx: Only set if the key does not exist
            xx: Only set if the key already exists

        Returns:
            True if written, False if the nx/xx condition prevented the write
        """
        pass

    @abstractmethod
    def delete(self, *keys: str) -> int:
        """
        Delete keys.

        Returns:
            Number of keys that existed and were removed
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def ttl(self, key: str) -> Optional[int]:
        """
        Remaining TTL in seconds.

        Returns:
            Seconds left, or None if the key is absent or has no expiry
        """
        pass

    @abstractmethod
    def compare_and_set(
        self,
        key: str,
        expected: Optional[str],
        value: Optional[str],
        ttl: int,
    ) -> bool:
        """
        Atomically replace a value if it still equals what was read.

        Args:
            key: Key
            expected: Value previously read (None = key must be absent)
            value: New value (None = delete the key)
            ttl: TTL applied when writing

        Returns:
            True if applied, False if the key changed since it was read
        """
        pass
