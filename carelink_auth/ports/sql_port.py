"""
SQL Executor Port - Interface for parameterized relational access.

Implementations:
- SQLAlchemyExecutor: Any SQLAlchemy engine (MySQL, PostgreSQL, SQLite)

Statements use named parameters (":user_id").
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class SQLExecutorPort(ABC):
    """Port: Run parameterized SQL."""

    @abstractmethod
    def query(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Run a SELECT.

        Args:
            sql: Statement with named parameters
            params: Parameter values

        Returns:
            Rows as dicts keyed by column name
        """
        pass

    @abstractmethod
    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Run an INSERT/UPDATE/DELETE in its own transaction.

        Returns:
            Number of affected rows
        """
        pass
