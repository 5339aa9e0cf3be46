"""
Shared fixtures: a manual clock, an in-memory SQLite database with the
session core's tables, and a SessionManager wired to both.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from carelink_auth.adapters import MemoryKeyValueAdapter, SQLAlchemyExecutor
from carelink_auth.adapters.sql_schema import create_all, roles, session_summaries, user_roles_xref, users
from carelink_auth.config import SessionSettings
from carelink_auth.password import salted_hash
from carelink_auth.sdk import SessionContext, SessionManager

SIGNING_SECRET = "test-signing-secret-0123456789abcdef"
TENANT = "CLINIC"
PASSWORD = "Str0ng!Pass"
USER_CREATED = 1700000000
START_TIME = 1700001000


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all(engine)
    with engine.begin() as conn:
        conn.execute(roles.insert(), [
            {"role_id": 1, "name": "patient"},
            {"role_id": 4, "name": "clinician"},
            {"role_id": 7, "name": "admin"},
        ])
    yield engine
    engine.dispose()


@pytest.fixture
def sql(engine):
    return SQLAlchemyExecutor(engine)


@pytest.fixture
def kv(clock):
    return MemoryKeyValueAdapter(clock=clock)


@pytest.fixture
def settings():
    return SessionSettings()


@pytest.fixture
def manager(kv, sql, settings, clock):
    return SessionManager(SessionContext(kv=kv, sql=sql, settings=settings, clock=clock))


@pytest.fixture
def add_user(engine):
    """Insert a user row; returns the user_id."""

    def _add_user(
        user_id: int = 42,
        username: str = "alice",
        password: str = PASSWORD,
        created: int = USER_CREATED,
        status: int = 0,
        role_ids=(1,),
        system_code: str = TENANT,
    ) -> int:
        with engine.begin() as conn:
            conn.execute(users.insert(), {
                "user_id": user_id,
                "username": username,
                "system_code": system_code,
                "status": status,
                "password": salted_hash(password, created),
                "created": created,
            })
            if role_ids:
                conn.execute(user_roles_xref.insert(), [
                    {"user_id": user_id, "role_id": role_id} for role_id in role_ids
                ])
        return user_id

    return _add_user


@pytest.fixture
def user_row(engine):
    """Read a users row as a dict."""

    def _user_row(user_id: int = 42) -> dict:
        with engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.user_id == user_id)).mappings().first()
            return dict(row) if row else None

    return _user_row


@pytest.fixture
def summary_row(engine):
    """Read a session_summaries row as a dict."""

    def _summary_row(token: str) -> dict:
        with engine.connect() as conn:
            row = conn.execute(
                session_summaries.select().where(session_summaries.c.token == token)
            ).mappings().first()
            return dict(row) if row else None

    return _summary_row
