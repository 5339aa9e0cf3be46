"""
Session Record Store - Session records keyed by token, with a store TTL.
"""

import json
from typing import Optional

from carelink_auth.domain.session import Session
from carelink_auth.errors import MalformedSessionError, NonUniqueTokenError, SessionNotFoundError
from carelink_auth.ports.kv_port import KeyValuePort


class SessionRecordStore:
    """
    Session records in the key-value store.

    Every write resets the key's TTL to the full session_ttl.
    """

    def __init__(self, kv: KeyValuePort, ttl: int):
        """
        Args:
            kv: Key-value store
            ttl: Session time-to-live in seconds
        """
        self._kv = kv
        self._ttl = ttl

    def load(self, token: str) -> Optional[Session]:
        """
        Load a session.

        Returns:
            Session, or None if the key does not exist (expired or unknown)

        Raises:
            MalformedSessionError: If the stored value cannot be decoded
        """
        raw = self._kv.get(token)
        if raw is None:
            return None

        try:
            return Session.from_json(token, raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedSessionError(cause=e)

    def save(self, session: Session) -> None:
        """
        Store a new session.

        Raises:
            NonUniqueTokenError: If a record already exists under the token
        """
        if self._kv.exists(session.token):
            raise NonUniqueTokenError()

        # a writer racing between exists() and set() is also a collision
        if not self._kv.set(session.token, session.to_json(), self._ttl, nx=True):
            raise NonUniqueTokenError()

    def rewrite(self, session: Session) -> None:
        """
        Overwrite an existing session and reset its TTL.

        Raises:
            SessionNotFoundError: If the key expired or was deleted meanwhile
        """
        if not self._kv.set(session.token, session.to_json(), self._ttl, xx=True):
            raise SessionNotFoundError()

    def delete(self, token: str) -> bool:
        return self._kv.delete(token) > 0

    def ttl(self, token: str) -> Optional[int]:
        return self._kv.ttl(token)
