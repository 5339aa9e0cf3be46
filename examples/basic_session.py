"""
Basic Session Example - Login, refresh and logout against in-memory stores.
"""

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from carelink_auth import SessionContext, SessionManager
from carelink_auth.adapters import MemoryKeyValueAdapter, SQLAlchemyExecutor
from carelink_auth.adapters.sql_schema import create_all, roles, user_roles_xref, users
from carelink_auth.errors import PasswordMismatchError, SessionNotFoundError
from carelink_auth.logging_setup import configure_logging
from carelink_auth.password import PasswordHasher, validate_password

SIGNING_SECRET = "example-signing-secret-0123456789abcdef"


def seed(engine):
    password = "Str0ng!Pass"
    validate_password(password)

    with engine.begin() as conn:
        conn.execute(roles.insert(), [{"role_id": 4, "name": "clinician"}])
        conn.execute(users.insert(), {
            "user_id": 42,
            "username": "alice",
            "system_code": "CLINIC",
            "password": PasswordHasher().hash_password(password, 1700000000),
            "created": 1700000000,
        })
        conn.execute(user_roles_xref.insert(), {"user_id": 42, "role_id": 4})


def main():
    configure_logging(json_output=False)

    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_all(engine)
    seed(engine)

    manager = SessionManager(SessionContext(
        kv=MemoryKeyValueAdapter(),
        sql=SQLAlchemyExecutor(engine),
    ))

    # Wrong password counts towards the lockout
    try:
        manager.create("alice", "wrong-password", "CLINIC", SIGNING_SECRET)
    except PasswordMismatchError as e:
        print(f"Login refused: {e} ({e.kind.value})")

    # Login
    token = manager.create("alice", "Str0ng!Pass", "CLINIC", SIGNING_SECRET)
    print(f"\nLogin successful!")
    print(f"Token: {token[:50]}...")

    session = manager.authenticate(token, SIGNING_SECRET)
    print(f"User: {session.user_id}, roles: {session.roles}")

    # Keep alive
    refreshed = manager.refresh(token)
    print(f"\nSession refreshed at {refreshed.created}")

    # Logout
    manager.delete(token)
    print(f"\nLogged out successfully")

    try:
        manager.refresh(token)
    except SessionNotFoundError:
        print("Refresh after logout: session not found")


if __name__ == "__main__":
    main()
