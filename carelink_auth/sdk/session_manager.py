"""
Session Manager - Session lifecycle orchestration.

Ties credential checks, token minting, the session record store, the user
session index and the audit trail together:

    manager = SessionManager(SessionContext(kv=kv, sql=sql))
    token = manager.create("alice", "Str0ng!Pass", "CLINIC", signing_secret)
    manager.refresh(token)
    manager.delete(token)

There is no transaction across the stores. Each operation runs its steps in
order and a failing step leaves earlier steps' writes in place.
"""

import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional

import structlog

from carelink_auth.adapters.jwt_signer import JWTSigner
from carelink_auth.config import SessionSettings
from carelink_auth.domain.identity import Identity
from carelink_auth.domain.session import Session, UserSessionIndexEntry
from carelink_auth.errors import InvalidTokenError, PasswordMismatchError, SessionNotFoundError
from carelink_auth.password import PasswordHasher
from carelink_auth.ports.kv_port import KeyValuePort
from carelink_auth.ports.signer_port import TokenSignerPort
from carelink_auth.ports.sql_port import SQLExecutorPort
from carelink_auth.stores.audit_trail import AuditTrail
from carelink_auth.stores.credential_store import CredentialStore
from carelink_auth.stores.session_record_store import SessionRecordStore
from carelink_auth.stores.user_session_index import UserSessionIndex

logger = structlog.get_logger(__name__)

NONCE_ALPHABET = string.ascii_letters + string.digits


@dataclass
class SessionContext:
    """
    Everything a SessionManager needs, passed in explicitly.

    Attributes:
        kv: Key-value store holding session records, indexes and side caches
        sql: Relational executor for users and session_summaries
        signer: Token signer (HS256 JWT by default)
        settings: Session policy
        clock: Returns the current unix time in seconds
    """
    kv: KeyValuePort
    sql: SQLExecutorPort
    signer: Optional[TokenSignerPort] = None
    settings: SessionSettings = field(default_factory=SessionSettings)
    clock: Callable[[], float] = time.time

    def __post_init__(self):
        if self.signer is None:
            self.signer = JWTSigner(algorithm=self.settings.token_algorithm)


class SessionManager:
    """
    Create, refresh and revoke sessions.

    Error kinds raised: UserNotFoundError, UserLockedError,
    PasswordMismatchError, NonUniqueTokenError, SessionNotFoundError.
    Redis and SQL errors propagate unchanged.
    """

    def __init__(self, context: SessionContext):
        self._context = context
        self._settings = context.settings
        self._clock = context.clock
        self._kv = context.kv
        self._signer = context.signer
        self._hasher = PasswordHasher()
        self._credentials = CredentialStore(context.sql, settings=context.settings, clock=context.clock)
        self._records = SessionRecordStore(context.kv, ttl=context.settings.session_ttl)
        self._index = UserSessionIndex(
            context.kv,
            ttl=context.settings.session_ttl,
            max_retries=context.settings.index_cas_retries,
        )
        self._audit = AuditTrail(context.sql, clock=context.clock)

    @property
    def credentials(self) -> CredentialStore:
        return self._credentials

    @property
    def index(self) -> UserSessionIndex:
        return self._index

    @property
    def audit(self) -> AuditTrail:
        return self._audit

    def _now(self) -> int:
        return int(self._clock())

    # ------------------------------------------------------------------
    # Create / Save
    # ------------------------------------------------------------------

    def create(self, username: str, password: str, tenant_code: str, signing_secret: str) -> str:
        """
        Log a user in.

        1. Finds the user by username and tenant code
        2. Rejects deleted and locked users
        3. Compares the password hash; a mismatch counts a failed login
        4. Mints a token and stores the session under it
        5. Adds the token to the user's session index
        6. Records the successful login and opens the audit row

        Args:
            username: Username
            password: Plain text password
            tenant_code: Tenant (system) code the username belongs to
            signing_secret: Symmetric secret for the token signature

        Returns:
            The session token
        """
        identity = self._credentials.find_by_username(username, tenant_code)
        self._credentials.validate_status(identity)

        if not self._hasher.verify_password(password, identity.created, identity.password_hash):
            # The failed attempt is persisted even though the call fails
            self._credentials.record_login_result(identity.user_id, success=False)
            raise PasswordMismatchError()

        session = self._new_session(identity)
        session.token = self._mint_token(session, signing_secret)

        self.save(session, identity.created)
        self._credentials.record_login_result(identity.user_id, success=True)
        self._audit.open(session.token, session.user_id, session.created)

        logger.info("session_created", user_id=session.user_id, roles=sorted(session.roles))
        return session.token

    def _new_session(self, identity: Identity) -> Session:
        return Session(
            token="",
            user_id=identity.user_id,
            roles=self._credentials.get_roles(identity.user_id),
            created=self._now(),
            timeout=self._settings.session_ttl,
        )

    def _nonce(self) -> str:
        return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(self._settings.nonce_length))

    def _mint_token(self, session: Session, signing_secret: str) -> str:
        claims: Dict[str, Any] = {
            "user_id": session.user_id,
            "roles": session.roles,
            "iat": session.created,
            "rs": self._nonce(),
        }
        return self._signer.sign(claims, signing_secret)

    def save(self, session: Session, user_created: int) -> None:
        """
        Store a session and add it to the owner's session index.

        Args:
            session: Session with its token set
            user_created: Owner's creation timestamp (user hash salt)

        Raises:
            NonUniqueTokenError: If the token is already in use. Callers
                should mint a new token and retry.
        """
        self._records.save(session)
        user_hash = self._hasher.derive_user_hash(session.user_id, user_created)
        self._index.append(user_hash, session.token, session.role_ids())

    # ------------------------------------------------------------------
    # Lookup / Refresh
    # ------------------------------------------------------------------

    def get_session(self, token: str) -> Optional[Session]:
        """
        Get a session by token.

        Returns:
            Session, or None if it expired or never existed
        """
        return self._records.load(token)

    def authenticate(self, token: str, signing_secret: str) -> Session:
        """
        Verify a token's signature and require a live session for it.

        Raises:
            InvalidTokenError: If the signature or claims do not check out
            SessionNotFoundError: If the session expired or was revoked
        """
        claims = self._signer.decode(token, signing_secret)
        session = self._records.load(token)
        if session is None:
            raise SessionNotFoundError()
        if claims.get("user_id") != session.user_id:
            raise InvalidTokenError("Token does not belong to the session owner")
        return session

    def refresh(self, token: str) -> Session:
        """
        Extend a session to a full TTL from now.

        Token, roles and user_id stay the same and the session index is
        untouched. The audit row's last_active is updated.

        Raises:
            SessionNotFoundError: If the session does not exist
            MalformedSessionError: If the stored session cannot be decoded
        """
        session = self._records.load(token)
        if session is None:
            raise SessionNotFoundError()

        session.created = self._now()
        self._records.rewrite(session)
        self._audit.touch(token, session.created)
        return session

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def user_hash(self, user_id: int, created: int) -> str:
        """Key of a user's session index entry."""
        return self._hasher.derive_user_hash(user_id, created)

    def _user_hash_for(self, session: Session) -> Optional[str]:
        created = self._credentials.get_created(session.user_id)
        if created is None:
            return None
        return self.user_hash(session.user_id, created)

    def find_user_sessions_by_token(self, token: str) -> Optional[UserSessionIndexEntry]:
        """
        Find the session index entry of the user owning a token.

        Returns:
            Entry, or None if the session, the user or the entry is missing
        """
        session = self._records.load(token)
        if session is None:
            return None

        user_hash = self._user_hash_for(session)
        if user_hash is None:
            return None
        return self._index.load(user_hash)

    def delete(self, token: str) -> bool:
        """
        Delete a single session (logout).

        - To delete a list of sessions, use delete_multiple
        - To delete every session of the token's owner, use find_and_delete_all_by_token
        - With a user hash at hand, use delete_all_by_user_hash

        Returns:
            True if deleted, False if the session did not exist
        """
        session = self._records.load(token)
        if session is None:
            return False

        user_hash = self._user_hash_for(session)
        if user_hash is None:
            logger.warning("session_owner_missing", user_id=session.user_id)
        else:
            self._index.remove(user_hash, token)

        self._records.delete(token)
        self._audit.close(token)

        logger.info("session_deleted", user_id=session.user_id)
        return True

    def delete_multiple(self, tokens: Iterable[str]) -> int:
        """
        Delete sessions one by one, stopping at the first error.

        Returns:
            Number of sessions deleted
        """
        deleted = 0
        for token in tokens:
            if self.delete(token):
                deleted += 1
        return deleted

    def find_and_delete_all_by_token(self, token: str) -> int:
        """
        Delete every session of the user owning a token.

        Returns:
            Number of sessions deleted (0 if the session, user or index is missing)
        """
        session = self._records.load(token)
        if session is None:
            return 0

        user_hash = self._user_hash_for(session)
        if user_hash is None:
            return 0

        entry = self._index.load(user_hash)
        if entry is None or entry.is_empty():
            return 0

        deleted = self._delete_user_sessions(entry)
        logger.info("user_sessions_deleted", user_id=session.user_id, count=deleted)
        return deleted

    def delete_all_by_user_hash(self, user_hash: str, user_id: int) -> int:
        """
        Delete every session listed under a user hash.

        Used when there is no live token, e.g. after a password reset.

        Returns:
            Number of sessions deleted (0 if the user has no index entry)
        """
        entry = self._index.load(user_hash)
        if entry is None:
            logger.info("no_sessions_for_user", user_id=user_id)
            return 0

        deleted = self._delete_user_sessions(entry)
        logger.info("user_sessions_deleted", user_id=user_id, count=deleted)
        return deleted

    def _delete_user_sessions(self, entry: UserSessionIndexEntry) -> int:
        """
        Delete each listed session, evict role side caches, close audit rows,
        then drop the index key. The first failure aborts the rest.
        """
        deleted = 0
        for user_session in entry.sessions:
            self._records.delete(user_session.token)

            for role_id in user_session.roles_list:
                cache_keys = self._settings.cache_evictions.get(role_id, ())
                if cache_keys:
                    self._kv.delete(*cache_keys)

            self._audit.close(user_session.token)
            deleted += 1

        self._index.delete(entry.user_id_hash)
        return deleted
