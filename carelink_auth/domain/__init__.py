"""
Domain Models - Pure business entities.

No infrastructure dependencies. Domain logic only.
"""

from carelink_auth.domain.identity import Identity, UserStatus
from carelink_auth.domain.session import Session, UserSession, UserSessionIndexEntry

__all__ = [
    "Identity",
    "UserStatus",
    "Session",
    "UserSession",
    "UserSessionIndexEntry",
]
