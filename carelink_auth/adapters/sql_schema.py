"""
SQL Schema - Tables the session core reads and writes.

The application owns these tables; they are declared here so tests and local
bootstrap can create them.
"""

from sqlalchemy import (
    BigInteger,
    Column,
    Integer,
    MetaData,
    SmallInteger,
    String,
    Table,
    text,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("user_id", BigInteger().with_variant(Integer, "sqlite"), primary_key=True),
    Column("username", String(255), nullable=False),
    Column("system_code", String(64), nullable=False),
    Column("status", Integer, nullable=False, server_default=text("0")),
    Column("password", String(255), nullable=False),
    Column("created", BigInteger, nullable=False),
    Column("failed_logins", Integer, nullable=False, server_default=text("0")),
    Column("last_login", BigInteger),
    Column("login_count", Integer, nullable=False, server_default=text("0")),
)

roles = Table(
    "roles",
    metadata,
    Column("role_id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
)

user_roles_xref = Table(
    "user_roles_xref",
    metadata,
    Column("user_id", BigInteger, primary_key=True),
    Column("role_id", Integer, primary_key=True),
)

session_summaries = Table(
    "session_summaries",
    metadata,
    Column("token", String(1024), primary_key=True),
    Column("user_id", BigInteger, nullable=False),
    Column("started", BigInteger, nullable=False),
    Column("last_active", BigInteger, nullable=False),
    Column("ended", BigInteger),
    Column("hard_logout", SmallInteger, nullable=False, server_default=text("0")),
    Column("created", BigInteger, nullable=False),
)


def create_all(engine: Engine) -> None:
    """Create any missing tables."""
    metadata.create_all(engine)
