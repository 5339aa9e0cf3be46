"""
Integration tests for the session lifecycle: create, refresh, delete.

Runs the SessionManager against the in-memory key-value adapter and an
in-memory SQLite database.
"""

import json
import pytest
from carelink_auth.adapters.jwt_signer import JWTSigner
from carelink_auth.errors import (
    InvalidTokenError,
    MalformedSessionError,
    NonUniqueTokenError,
    PasswordMismatchError,
    SessionErrorKind,
    SessionNotFoundError,
    UserNotFoundError,
)
from carelink_auth.password import PasswordHasher

SECRET = "test-signing-secret-0123456789abcdef"
PASSWORD = "Str0ng!Pass"


class TestCreate:
    """Login."""

    def test_create_returns_token_for_stored_session(self, manager, add_user):
        """Loading the session behind the token gives the user and roles."""
        add_user(user_id=42, role_ids=(1, 4))

        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        session = manager.get_session(token)
        assert session is not None
        assert session.user_id == 42
        assert session.roles == {"1": "patient", "4": "clinician"}
        assert session.timeout == 960

    def test_token_claims(self, manager, add_user, clock):
        """Token carries user_id, roles, iat = created and a 16+ char nonce."""
        add_user(user_id=42, role_ids=(4,))

        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        claims = JWTSigner().decode(token, SECRET)

        assert claims["user_id"] == 42
        assert claims["roles"] == {"4": "clinician"}
        assert claims["iat"] == int(clock())
        assert len(claims["rs"]) >= 16
        assert claims["rs"].isalnum()

    def test_same_second_logins_get_distinct_tokens(self, manager, add_user):
        """The nonce keeps tokens unique for the same user and second."""
        add_user()

        tokens = {manager.create("alice", PASSWORD, "CLINIC", SECRET) for _ in range(3)}
        assert len(tokens) == 3

    def test_session_stored_with_ttl(self, manager, add_user, kv):
        """The session value is stored under the token with the TTL."""
        add_user()

        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        assert kv.ttl(token) == 960
        stored = json.loads(kv.get(token))
        assert set(stored) == {"user_id", "roles", "created", "timeout"}

    def test_create_adds_index_entry(self, manager, add_user, kv):
        """The user hash entry lists the token and its role ids."""
        add_user(user_id=42, role_ids=(1, 4))

        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        user_hash = PasswordHasher().derive_user_hash(42, 1700000000)
        entry = manager.index.load(user_hash)
        assert entry.user_id_hash == user_hash
        assert entry.tokens() == [token]
        assert sorted(entry.sessions[0].roles_list) == [1, 4]
        assert kv.ttl(user_hash) == 960

    def test_create_records_login_and_audit(self, manager, add_user, user_row, summary_row, clock):
        """Login counters and the audit row are written on success."""
        add_user()

        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        row = user_row(42)
        assert row["login_count"] == 1
        assert row["failed_logins"] == 0
        assert row["last_login"] == int(clock())

        summary = summary_row(token)
        assert summary["user_id"] == 42
        assert summary["started"] == int(clock())
        assert summary["last_active"] == int(clock())
        assert summary["ended"] is None
        assert summary["hard_logout"] == 0

    def test_unknown_user(self, manager, add_user):
        """An unknown username is not found."""
        add_user()

        with pytest.raises(UserNotFoundError):
            manager.create("bob", PASSWORD, "CLINIC", SECRET)

    def test_tenant_scoping(self, manager, add_user):
        """The same username in another tenant is a different user."""
        add_user(system_code="OTHER")

        with pytest.raises(UserNotFoundError):
            manager.create("alice", PASSWORD, "CLINIC", SECRET)

    def test_deleted_user_is_not_found(self, manager, add_user):
        """Deleted users are reported as not found."""
        add_user(status=2)

        with pytest.raises(UserNotFoundError) as exc_info:
            manager.create("alice", PASSWORD, "CLINIC", SECRET)
        assert exc_info.value.kind == SessionErrorKind.USER_NOT_FOUND

    def test_wrong_password(self, manager, add_user, kv):
        """A mismatch stores nothing in the key-value store."""
        add_user()

        with pytest.raises(PasswordMismatchError):
            manager.create("alice", "Wr0ng!Password", "CLINIC", SECRET)

        assert kv.keys() == []

    def test_non_unique_token(self, manager, add_user, kv, monkeypatch):
        """A token colliding with a live session is rejected, not overwritten."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        stored_before = kv.get(token)

        monkeypatch.setattr(manager, "_mint_token", lambda session, secret: token)

        with pytest.raises(NonUniqueTokenError):
            manager.create("alice", PASSWORD, "CLINIC", SECRET)
        assert kv.get(token) == stored_before


class TestRefresh:
    """Keep-alive."""

    def test_refresh_moves_created_and_resets_ttl(self, manager, add_user, kv, clock):
        """Refresh moves created to now and restores the full TTL."""
        add_user(role_ids=(1, 4))
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        before = manager.get_session(token)

        clock.advance(600)
        assert kv.ttl(token) == 360

        refreshed = manager.refresh(token)

        assert refreshed.token == token
        assert refreshed.created == before.created + 600
        assert refreshed.user_id == before.user_id
        assert refreshed.roles == before.roles
        assert kv.ttl(token) == 960
        assert manager.get_session(token).created == refreshed.created

    def test_refresh_keeps_session_alive_past_first_expiry(self, manager, add_user, clock):
        """A refreshed session outlives its first expiry time."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        clock.advance(900)
        manager.refresh(token)
        clock.advance(900)

        assert manager.get_session(token) is not None

    def test_refresh_does_not_touch_index(self, manager, add_user, kv, clock):
        """The index entry and its TTL stay as they were."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        user_hash = manager.user_hash(42, 1700000000)
        index_before = kv.get(user_hash)

        clock.advance(100)
        manager.refresh(token)

        assert kv.get(user_hash) == index_before
        assert kv.ttl(user_hash) == 860

    def test_refresh_updates_audit_last_active(self, manager, add_user, summary_row, clock):
        """Refresh moves last_active and keeps started."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        started = summary_row(token)["started"]

        clock.advance(100)
        manager.refresh(token)

        summary = summary_row(token)
        assert summary["started"] == started
        assert summary["last_active"] == started + 100

    def test_refresh_unknown_token(self, manager):
        """Refreshing an unknown token is not found."""
        with pytest.raises(SessionNotFoundError):
            manager.refresh("no-such-token")

    def test_refresh_expired_token(self, manager, add_user, clock):
        """Store expiry is a not-found, not a malformed session."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        clock.advance(961)

        with pytest.raises(SessionNotFoundError):
            manager.refresh(token)

    def test_refresh_keeps_fields_from_older_writers(self, manager, add_user, kv, clock):
        """Stored keys the session model does not know survive a refresh."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        stored = json.loads(kv.get(token))
        stored.update({"user_status": 0, "UserCreated": 1700000000})
        kv.set(token, json.dumps(stored), ttl=960, xx=True)

        clock.advance(60)
        manager.refresh(token)

        rewritten = json.loads(kv.get(token))
        assert rewritten["user_status"] == 0
        assert rewritten["UserCreated"] == 1700000000
        assert rewritten["created"] == stored["created"] + 60


class TestAuthenticate:
    """Token verification against the live session."""

    def test_authenticate(self, manager, add_user):
        """A valid token with a live session authenticates."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        session = manager.authenticate(token, SECRET)
        assert session.user_id == 42

    def test_authenticate_wrong_secret(self, manager, add_user):
        """A token signed with another secret is invalid."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        with pytest.raises(InvalidTokenError):
            manager.authenticate(token, "another-secret-0123456789abcdef0123")

    def test_authenticate_after_logout(self, manager, add_user):
        """A correctly signed token without a session is rejected."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        manager.delete(token)

        with pytest.raises(SessionNotFoundError):
            manager.authenticate(token, SECRET)


class TestDelete:
    """Single logout."""

    def test_delete_only_session_removes_index(self, manager, add_user, kv):
        """Deleting the only session removes the index key."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)
        user_hash = manager.user_hash(42, 1700000000)

        assert manager.delete(token) is True

        assert manager.get_session(token) is None
        assert kv.exists(user_hash) is False

    def test_delete_one_of_many(self, manager, add_user):
        """Other sessions stay listed and alive."""
        add_user()
        tokens = [manager.create("alice", PASSWORD, "CLINIC", SECRET) for _ in range(3)]
        user_hash = manager.user_hash(42, 1700000000)

        manager.delete(tokens[0])

        entry = manager.index.load(user_hash)
        assert sorted(entry.tokens()) == sorted(tokens[1:])
        assert all(manager.get_session(t) is not None for t in tokens[1:])

    def test_delete_closes_audit_row(self, manager, add_user, summary_row, clock):
        """Logout closes the audit row as a hard logout."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        clock.advance(30)
        manager.delete(token)

        summary = summary_row(token)
        assert summary["ended"] == int(clock())
        assert summary["hard_logout"] == 1

    def test_delete_unknown_is_noop(self, manager):
        """Deleting an unknown token reports False."""
        assert manager.delete("no-such-token") is False

    def test_delete_expired_is_noop(self, manager, add_user, clock, summary_row):
        """TTL expiry leaves the audit row open."""
        add_user()
        token = manager.create("alice", PASSWORD, "CLINIC", SECRET)

        clock.advance(1000)

        assert manager.delete(token) is False
        assert summary_row(token)["ended"] is None

    def test_delete_then_refresh_fails(self, manager, add_user):
        """User 42, created 1700000000: logout then refresh is not-found."""
        add_user(user_id=42, created=1700000000, password="Str0ng!Pass")
        token = manager.create("alice", "Str0ng!Pass", "CLINIC", SECRET)

        manager.delete(token)

        with pytest.raises(SessionNotFoundError):
            manager.refresh(token)

    def test_delete_multiple(self, manager, add_user):
        """Known tokens are counted, unknown ones skipped."""
        add_user()
        tokens = [manager.create("alice", PASSWORD, "CLINIC", SECRET) for _ in range(3)]

        deleted = manager.delete_multiple(tokens[:2] + ["unknown"])

        assert deleted == 2
        assert manager.get_session(tokens[2]) is not None

    def test_delete_multiple_stops_at_first_error(self, manager, add_user, kv):
        """A failing delete aborts the batch; later tokens are untouched."""
        add_user()
        tokens = [manager.create("alice", PASSWORD, "CLINIC", SECRET) for _ in range(3)]
        kv.set(tokens[1], "{not json", ttl=960, xx=True)

        with pytest.raises(MalformedSessionError):
            manager.delete_multiple(tokens)

        assert manager.get_session(tokens[0]) is None
        assert manager.get_session(tokens[2]) is not None
