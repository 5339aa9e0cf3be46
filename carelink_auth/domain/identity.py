"""
Identity Domain Model - The credential side of a user account.
"""

from dataclasses import dataclass
from enum import IntFlag
from typing import Dict, Any


class UserStatus(IntFlag):
    """Status bits stored in users.status."""
    ACTIVE = 0
    DELETED = 2
    LOCKED = 4
    LOCKED_LOGIN = 16


@dataclass
class Identity:
    """
    Identity entity - the row a login attempt is checked against.

    Domain rules:
    - created doubles as the password hashing salt and never changes
    - LOCKED_LOGIN is only ever set here, clearing it is administrative
    """
    user_id: int
    status: UserStatus
    password_hash: str
    created: int
    failed_logins: int = 0

    @property
    def is_deleted(self) -> bool:
        return bool(self.status & UserStatus.DELETED)

    @property
    def is_locked(self) -> bool:
        return bool(self.status & (UserStatus.LOCKED | UserStatus.LOCKED_LOGIN))

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Identity":
        """Build from a users row (user_id, status, password, created, failed_logins)."""
        return cls(
            user_id=int(row["user_id"]),
            status=UserStatus(int(row["status"] or 0)),
            password_hash=row["password"] or "",
            created=int(row["created"]),
            failed_logins=int(row.get("failed_logins") or 0),
        )
