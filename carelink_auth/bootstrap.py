"""
Bootstrap - Build a SessionManager from deployment secrets.

    secrets = AWSSecretsAdapter()
    engine = create_engine(database_url)
    manager = build_session_manager(secrets, os.environ["REDIS_SECRET"], engine)
"""

from typing import Optional

import structlog
from sqlalchemy.engine import Engine

from carelink_auth.adapters.redis_kv import RedisKeyValueAdapter
from carelink_auth.adapters.sqlalchemy_executor import SQLAlchemyExecutor
from carelink_auth.config import SessionSettings
from carelink_auth.ports.secret_port import SecretPort
from carelink_auth.sdk.session_manager import SessionContext, SessionManager

logger = structlog.get_logger(__name__)


def build_session_manager(
    secrets: SecretPort,
    redis_secret_id: str,
    engine: Engine,
    settings: Optional[SessionSettings] = None,
    db_name: str = "sessions_db",
) -> SessionManager:
    """
    Wire a SessionManager to Redis and a relational database.

    Args:
        secrets: Secret source holding the Redis connection map
        redis_secret_id: Id of the secret with host, port and db numbers
        engine: SQLAlchemy engine for users and session_summaries
        settings: Session policy (defaults, or SessionSettings.from_env())
        db_name: Which numbered Redis database to use

    Returns:
        Configured SessionManager
    """
    redis_secret = secrets.get_secret_map(redis_secret_id)
    kv = RedisKeyValueAdapter.from_secret_map(redis_secret, db_name=db_name)

    context = SessionContext(
        kv=kv,
        sql=SQLAlchemyExecutor(engine),
        settings=settings or SessionSettings(),
    )
    logger.info("session_manager_ready", redis_db=db_name)
    return SessionManager(context)
