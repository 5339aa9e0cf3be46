"""
CareLink Auth - Session lifecycle for multi-tenant applications.

Hexagonal architecture: the session core talks to a TTL key-value store
(Redis) and a relational database through ports.

Usage:
    from carelink_auth import SessionManager, SessionContext
    from carelink_auth.adapters import RedisKeyValueAdapter, SQLAlchemyExecutor

    manager = SessionManager(SessionContext(
        kv=RedisKeyValueAdapter(),
        sql=SQLAlchemyExecutor(engine),
    ))

    # Log in
    token = manager.create(username, password, tenant_code, signing_secret)

    # Keep alive
    manager.refresh(token)

    # Log out everywhere
    manager.find_and_delete_all_by_token(token)
"""

__version__ = "0.1.0"

from carelink_auth.sdk.session_manager import SessionManager, SessionContext
from carelink_auth.config import SessionSettings
from carelink_auth.domain.identity import Identity, UserStatus
from carelink_auth.domain.session import Session
from carelink_auth.errors import SessionError, SessionErrorKind

__all__ = [
    "SessionManager",
    "SessionContext",
    "SessionSettings",
    "Identity",
    "UserStatus",
    "Session",
    "SessionError",
    "SessionErrorKind",
]
