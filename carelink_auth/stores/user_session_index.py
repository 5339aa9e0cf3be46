"""
User Session Index - The list of live session tokens per user hash.

The index lets us revoke every session of a user without scanning the store.
Entries are rewritten whole; concurrent writers are serialized with
compare-and-set and a bounded retry.
"""

import json
from typing import Callable, List, Optional, Tuple

import structlog

from carelink_auth.domain.session import UserSessionIndexEntry
from carelink_auth.errors import IndexConflictError, MalformedSessionError
from carelink_auth.ports.kv_port import KeyValuePort

logger = structlog.get_logger(__name__)


class UserSessionIndex:
    """
    Per-user session lists in the key-value store.

    Every write refreshes the entry's TTL. Empty entries are deleted.
    """

    def __init__(self, kv: KeyValuePort, ttl: int, max_retries: int = 5):
        """
        Args:
            kv: Key-value store
            ttl: Entry time-to-live in seconds, refreshed on every write
            max_retries: Compare-and-set attempts before IndexConflictError
        """
        self._kv = kv
        self._ttl = ttl
        self._max_retries = max_retries

    def _read(self, user_hash: str) -> Tuple[Optional[str], Optional[UserSessionIndexEntry]]:
        raw = self._kv.get(user_hash)
        if raw is None:
            return None, None

        try:
            return raw, UserSessionIndexEntry.from_json(raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedSessionError("User session index is malformed", cause=e)

    def load(self, user_hash: str) -> Optional[UserSessionIndexEntry]:
        """
        Load a user's entry.

        Returns:
            Entry, or None if the user has no index key
        """
        return self._read(user_hash)[1]

    def _update(
        self,
        user_hash: str,
        mutate: Callable[[UserSessionIndexEntry], bool],
        create_missing: bool,
    ) -> Optional[UserSessionIndexEntry]:
        """
        Read-modify-write an entry under compare-and-set.

        Args:
            mutate: Changes the entry in place, returns False if nothing changed
            create_missing: Start from an empty entry when the key is absent
        """
        for attempt in range(self._max_retries):
            raw, entry = self._read(user_hash)
            if entry is None:
                if not create_missing:
                    return None
                entry = UserSessionIndexEntry(user_id_hash=user_hash)

            if not mutate(entry):
                return entry

            new_raw = None if entry.is_empty() else entry.to_json()
            if self._kv.compare_and_set(user_hash, raw, new_raw, self._ttl):
                return entry

            logger.debug("session_index_conflict", attempt=attempt + 1)

        raise IndexConflictError()

    def append(self, user_hash: str, token: str, roles_list: List[int]) -> UserSessionIndexEntry:
        """Add a session to the user's entry, creating it if absent."""
        def add(entry: UserSessionIndexEntry) -> bool:
            entry.append(token, roles_list)
            return True

        return self._update(user_hash, add, create_missing=True)

    def remove(self, user_hash: str, token: str) -> Optional[UserSessionIndexEntry]:
        """
        Remove a session from the user's entry.

        Deletes the key when the last session goes.

        Returns:
            The updated entry, or None if the user had no entry
        """
        return self._update(user_hash, lambda entry: entry.remove(token), create_missing=False)

    def delete(self, user_hash: str) -> bool:
        return self._kv.delete(user_hash) > 0

    def ttl(self, user_hash: str) -> Optional[int]:
        return self._kv.ttl(user_hash)
