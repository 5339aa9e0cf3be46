"""
Audit Trail - session_summaries rows recording session start and end.

Rows are closed on explicit logout only. Sessions that expire through the
store TTL keep ended = NULL.
"""

import time
from typing import Any, Callable, Dict, Optional

from carelink_auth.ports.sql_port import SQLExecutorPort

OPEN_SQL = """
    INSERT INTO session_summaries (token, user_id, started, last_active, hard_logout, created)
    VALUES (:token, :user_id, :started, :started, 0, :now)
"""

TOUCH_SQL = """
    UPDATE session_summaries SET last_active = :last_active WHERE token = :token
"""

CLOSE_SQL = """
    UPDATE session_summaries SET ended = :now, hard_logout = 1 WHERE token = :token
"""

FIND_SQL = """
    SELECT token, user_id, started, last_active, ended, hard_logout, created
    FROM session_summaries
    WHERE token = :token
"""


class AuditTrail:
    """Relational log of session lifecycles."""

    def __init__(self, sql: SQLExecutorPort, clock: Callable[[], float] = time.time):
        self._sql = sql
        self._clock = clock

    def open(self, token: str, user_id: int, started: int) -> None:
        """Record a new session (started = last_active = started)."""
        self._sql.execute(
            OPEN_SQL,
            {"token": token, "user_id": user_id, "started": started, "now": int(self._clock())},
        )

    def touch(self, token: str, last_active: int) -> int:
        """Update last_active. Returns the number of rows updated."""
        return self._sql.execute(TOUCH_SQL, {"token": token, "last_active": last_active})

    def close(self, token: str) -> int:
        """Mark a session as ended by an explicit logout. Returns rows updated."""
        return self._sql.execute(CLOSE_SQL, {"token": token, "now": int(self._clock())})

    def find(self, token: str) -> Optional[Dict[str, Any]]:
        rows = self._sql.query(FIND_SQL, {"token": token})
        return rows[0] if rows else None
