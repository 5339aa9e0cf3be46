"""
SQLAlchemy Executor Adapter - Implements SQLExecutorPort on a SQLAlchemy engine.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from carelink_auth.ports.sql_port import SQLExecutorPort


class SQLAlchemyExecutor(SQLExecutorPort):
    """
    Runs textual SQL with named bind parameters.

    Each execute() commits on its own; there is no transaction spanning
    several statements.
    """

    def __init__(self, engine: Engine):
        """
        Args:
            engine: SQLAlchemy engine (create_engine("mysql+pymysql://..."), etc.)
        """
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def query(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            result = conn.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings()]

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(text(sql), params or {})
            return result.rowcount
