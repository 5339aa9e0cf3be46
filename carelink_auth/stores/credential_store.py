"""
Credential Store - User identity lookup and login-attempt bookkeeping.
"""

import time
from typing import Callable, Dict, Optional

import structlog

from carelink_auth.config import SessionSettings
from carelink_auth.domain.identity import Identity, UserStatus
from carelink_auth.errors import UserLockedError, UserNotFoundError
from carelink_auth.ports.sql_port import SQLExecutorPort

logger = structlog.get_logger(__name__)

FIND_BY_USERNAME_SQL = """
    SELECT user_id, status, password, created, failed_logins
    FROM users
    WHERE username = :username AND system_code = :system_code
"""

GET_CREATED_SQL = """
    SELECT created
    FROM users
    WHERE user_id = :user_id
    LIMIT 1
"""

GET_ROLES_SQL = """
    SELECT r.role_id, r.name
    FROM users u
    INNER JOIN user_roles_xref urx ON urx.user_id = u.user_id
    INNER JOIN roles r ON r.role_id = urx.role_id
    WHERE u.user_id = :user_id
"""

LOGIN_SUCCESS_SQL = """
    UPDATE users
    SET last_login = :now, login_count = login_count + 1, failed_logins = 0
    WHERE user_id = :user_id
"""

# status is assigned first so every dialect sees the pre-increment counter
LOGIN_FAILURE_SQL = """
    UPDATE users
    SET status = status | (CASE WHEN failed_logins + 1 >= :max_attempts THEN :locked_bit ELSE 0 END),
        failed_logins = failed_logins + 1
    WHERE user_id = :user_id
"""


class CredentialStore:
    """
    Relational access to users for the login path.

    Lockout: each failed login increments failed_logins; the attempt that
    brings it to max_login_attempts sets LOCKED_LOGIN. Nothing here clears it.
    """

    def __init__(
        self,
        sql: SQLExecutorPort,
        settings: Optional[SessionSettings] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._sql = sql
        self._settings = settings or SessionSettings()
        self._clock = clock

    def find_by_username(self, username: str, tenant_code: str) -> Identity:
        """
        Find a user by username within a tenant (system code).

        Raises:
            UserNotFoundError: If no row matches
        """
        rows = self._sql.query(
            FIND_BY_USERNAME_SQL,
            {"username": username, "system_code": tenant_code},
        )
        if not rows:
            raise UserNotFoundError()
        return Identity.from_row(rows[0])

    def get_created(self, user_id: int) -> Optional[int]:
        """Creation timestamp of a user, or None if the user does not exist."""
        rows = self._sql.query(GET_CREATED_SQL, {"user_id": user_id})
        if not rows:
            return None
        return int(rows[0]["created"])

    def get_roles(self, user_id: int) -> Dict[str, str]:
        """Role assignments as {role_id string: role name}."""
        rows = self._sql.query(GET_ROLES_SQL, {"user_id": user_id})
        return {str(row["role_id"]): row["name"] for row in rows}

    def record_login_result(self, user_id: int, success: bool) -> None:
        """
        Persist the outcome of a login attempt.

        Args:
            user_id: User ID
            success: True resets the failure counter, False increments it
                and may lock the account
        """
        if success:
            self._sql.execute(
                LOGIN_SUCCESS_SQL,
                {"now": int(self._clock()), "user_id": user_id},
            )
            return

        self._sql.execute(
            LOGIN_FAILURE_SQL,
            {
                "max_attempts": self._settings.max_login_attempts,
                "locked_bit": int(UserStatus.LOCKED_LOGIN),
                "user_id": user_id,
            },
        )
        logger.info("login_failed", user_id=user_id)

    @staticmethod
    def validate_status(identity: Identity) -> None:
        """
        Reject deleted and locked identities.

        Deleted users are reported as not found so callers cannot tell
        deletion from non-existence.

        Raises:
            UserNotFoundError: If the DELETED bit is set
            UserLockedError: If LOCKED or LOCKED_LOGIN is set
        """
        if identity.is_deleted:
            raise UserNotFoundError()
        if identity.is_locked:
            raise UserLockedError()
