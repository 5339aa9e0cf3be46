"""
Configuration - Session policy and store connection settings.

Settings are plain dataclasses. Load them from the environment for local
development, or from a secret map (see adapters.aws_secret) in deployments.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple, Any, Optional

DEFAULT_SESSION_TTL = 960
DEFAULT_MAX_LOGIN_ATTEMPTS = 6
MIN_NONCE_LENGTH = 16
CLINICIAN_ROLE_ID = 4
ACTIVE_CLINICIAN_LIST_KEY = "active_clinician_list"


def _default_cache_evictions() -> Dict[int, Tuple[str, ...]]:
    return {CLINICIAN_ROLE_ID: (ACTIVE_CLINICIAN_LIST_KEY,)}


def parse_cache_evictions(value: str) -> Dict[int, Tuple[str, ...]]:
    """
    Parse "4:active_clinician_list,7:other_key" into {4: (...), 7: (...)}.

    A role id may appear more than once to evict several keys.
    """
    evictions: Dict[int, Tuple[str, ...]] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        role_id, sep, cache_key = item.partition(":")
        if not sep or not cache_key.strip():
            raise ValueError(f"Invalid cache eviction entry: {item!r}")
        rid = int(role_id)
        evictions[rid] = evictions.get(rid, ()) + (cache_key.strip(),)
    return evictions


@dataclass
class SessionSettings:
    """
    Session lifecycle policy.

    Attributes:
        session_ttl: Seconds a session (and index entry) lives after its last write
        max_login_attempts: Failed logins that lock the account
        nonce_length: Length of the random token nonce (at least 16)
        token_algorithm: JWT signing algorithm
        cache_evictions: Role id -> cache keys evicted when a session with
            that role is bulk deleted
        index_cas_retries: Attempts at a contended index write before giving up
    """
    session_ttl: int = DEFAULT_SESSION_TTL
    max_login_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS
    nonce_length: int = MIN_NONCE_LENGTH
    token_algorithm: str = "HS256"
    cache_evictions: Dict[int, Tuple[str, ...]] = field(default_factory=_default_cache_evictions)
    index_cas_retries: int = 5

    def __post_init__(self):
        if self.session_ttl <= 0:
            raise ValueError("session_ttl must be positive")
        if self.max_login_attempts <= 0:
            raise ValueError("max_login_attempts must be positive")
        if self.nonce_length < MIN_NONCE_LENGTH:
            raise ValueError(f"nonce_length must be at least {MIN_NONCE_LENGTH}")
        if self.index_cas_retries <= 0:
            raise ValueError("index_cas_retries must be positive")

    @classmethod
    def from_env(cls, prefix: str = "CARELINK_") -> "SessionSettings":
        """
        Load settings from environment variables.

        Args:
            prefix: Variable prefix (default CARELINK_)

        Unset variables keep their defaults.
        """
        kwargs: Dict[str, Any] = {}
        env = os.environ

        if f"{prefix}SESSION_TTL" in env:
            kwargs["session_ttl"] = int(env[f"{prefix}SESSION_TTL"])
        if f"{prefix}MAX_LOGIN_ATTEMPTS" in env:
            kwargs["max_login_attempts"] = int(env[f"{prefix}MAX_LOGIN_ATTEMPTS"])
        if f"{prefix}NONCE_LENGTH" in env:
            kwargs["nonce_length"] = int(env[f"{prefix}NONCE_LENGTH"])
        if f"{prefix}TOKEN_ALGORITHM" in env:
            kwargs["token_algorithm"] = env[f"{prefix}TOKEN_ALGORITHM"]
        if f"{prefix}CACHE_EVICTIONS" in env:
            kwargs["cache_evictions"] = parse_cache_evictions(env[f"{prefix}CACHE_EVICTIONS"])
        if f"{prefix}INDEX_CAS_RETRIES" in env:
            kwargs["index_cas_retries"] = int(env[f"{prefix}INDEX_CAS_RETRIES"])

        return cls(**kwargs)


@dataclass
class RedisSettings:
    """Connection settings for the sessions Redis database."""
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None

    @classmethod
    def from_secret_map(cls, secret: Dict[str, Any], db_name: str = "sessions_db") -> "RedisSettings":
        """
        Build from a secret map such as {"host": ..., "port": "6379", "sessions_db": "2"}.

        Args:
            secret: Decoded secret JSON
            db_name: Key holding the numbered database (sessions_db, locks_db, ...)

        Raises:
            ValueError: If the database id is missing or not an integer
        """
        try:
            db = int(secret[db_name])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Failed to get {db_name} id from secret") from e

        return cls(
            host=str(secret.get("host", "localhost")),
            port=int(secret.get("port", 6379)),
            db=db,
            password=secret.get("password") or None,
        )
