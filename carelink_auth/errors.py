"""
Session Errors - Tagged error hierarchy for the session core.

Every error carries a SessionErrorKind so callers (HTTP handlers, jobs) can
map failures to responses without string matching. Store and transport
errors (redis, SQLAlchemy) are NOT wrapped and propagate unchanged.
"""

from enum import Enum
from typing import Optional


class SessionErrorKind(Enum):
    """Error kinds raised by the session core."""
    USER_NOT_FOUND = "user_not_found"
    USER_LOCKED = "user_locked"
    PASSWORD_MISMATCH = "password_mismatch"
    NON_UNIQUE_TOKEN = "non_unique_token"
    SESSION_NOT_FOUND = "session_not_found"
    MALFORMED_SESSION = "malformed_session"
    HASH_FAILED = "hash_failed"
    PASSWORD_POLICY = "password_policy"
    TOKEN_SIGNING = "token_signing"
    TOKEN_INVALID = "token_invalid"
    INDEX_CONFLICT = "index_conflict"


class SessionError(Exception):
    """
    Base class for session core errors.

    Args:
        message: Human readable message (defaults to the class message)
        cause: Underlying exception, if any
    """

    kind: SessionErrorKind
    default_message: str = "Session error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class UserNotFoundError(SessionError):
    """Identity is absent or deleted."""
    kind = SessionErrorKind.USER_NOT_FOUND
    default_message = "User not found"


class UserLockedError(SessionError):
    """Account is locked, administratively or by failed logins."""
    kind = SessionErrorKind.USER_LOCKED
    default_message = "Account is locked"


class PasswordMismatchError(SessionError):
    kind = SessionErrorKind.PASSWORD_MISMATCH
    default_message = "Password is incorrect"


class NonUniqueTokenError(SessionError):
    """A freshly minted token collided with an existing session key."""
    kind = SessionErrorKind.NON_UNIQUE_TOKEN
    default_message = "Generated token was not unique"


class SessionNotFoundError(SessionError):
    kind = SessionErrorKind.SESSION_NOT_FOUND
    default_message = "Session not found"


class MalformedSessionError(SessionError):
    """Stored session data could not be decoded."""
    kind = SessionErrorKind.MALFORMED_SESSION
    default_message = "Session data is malformed"


class HashError(SessionError):
    kind = SessionErrorKind.HASH_FAILED
    default_message = "Password hash failed"


class PasswordPolicyError(SessionError):
    kind = SessionErrorKind.PASSWORD_POLICY
    default_message = "Password does not satisfy the password policy"


class TokenSigningError(SessionError):
    kind = SessionErrorKind.TOKEN_SIGNING
    default_message = "Token signing failed"


class InvalidTokenError(SessionError):
    kind = SessionErrorKind.TOKEN_INVALID
    default_message = "Token is invalid"


class IndexConflictError(SessionError):
    """User session index kept changing under concurrent writers."""
    kind = SessionErrorKind.INDEX_CONFLICT
    default_message = "User session index update conflicted"


__all__ = [
    "SessionErrorKind",
    "SessionError",
    "UserNotFoundError",
    "UserLockedError",
    "PasswordMismatchError",
    "NonUniqueTokenError",
    "SessionNotFoundError",
    "MalformedSessionError",
    "HashError",
    "PasswordPolicyError",
    "TokenSigningError",
    "InvalidTokenError",
    "IndexConflictError",
]
