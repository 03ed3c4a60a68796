"""
RELGRAPH Database Manager

This module owns the SQLAlchemy engine used to reach the statistics source.
Connection parameters are passed in explicitly; nothing here reads
process-wide configuration.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable

from .exceptions import GatewayConnectionError
from .logger import Logger
from .models import ConnectionSettings


class DatabaseManager:
    """
    Thin wrapper around a SQLAlchemy engine.

    Provides connection testing and query execution returning plain rows.
    Query errors propagate as ``SQLAlchemyError``; callers decide how to
    recover.
    """

    def __init__(self, settings: Optional[ConnectionSettings] = None, engine: Optional[Engine] = None):
        """
        Initialize the database manager.

        Args:
            settings (Optional[ConnectionSettings]): Connection parameters
            engine (Optional[Engine]): Pre-built engine, used instead of settings
        """
        if settings is None and engine is None:
            raise ValueError("DatabaseManager needs connection settings or an engine")
        self.settings = settings
        self.logger = Logger("database_manager")
        self._engine = engine

    @property
    def target(self) -> str:
        if self.settings is not None:
            return self.settings.describe()
        return str(self._engine.url)

    def get_engine(self) -> Engine:
        """Create the engine on first use."""
        if self._engine is None:
            self._engine = create_engine(self.settings.url(), pool_pre_ping=True)
        return self._engine

    def test_connection(self) -> None:
        """
        Check that the database answers.

        Raises:
            GatewayConnectionError: If the database cannot be reached
        """
        try:
            with self.get_engine().connect() as conn:
                conn.execute(text("SELECT 1"))
            self.logger.info(f"Connected to {self.target}")
        except SQLAlchemyError as e:
            self.logger.error(f"Connection test failed for {self.target}: {str(e)}")
            raise GatewayConnectionError(f"Cannot reach {self.target}: {e}", target=self.target) from e

    def execute_query(self, query: Union[str, Executable], params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Execute a query and return its rows as dictionaries.

        Args:
            query (Union[str, Executable]): SQL text or a SQLAlchemy construct
            params (Optional[Mapping[str, Any]]): Bound parameters

        Returns:
            List[Dict[str, Any]]: Result rows
        """
        statement = text(query) if isinstance(query, str) else query
        with self.get_engine().connect() as conn:
            result = conn.execute(statement, dict(params or {}))
            return [dict(row._mapping) for row in result]

    def execute_scalar(self, query: Union[str, Executable], params: Optional[Mapping[str, Any]] = None) -> Any:
        """Execute a query returning a single value (None for no rows)."""
        statement = text(query) if isinstance(query, str) else query
        with self.get_engine().connect() as conn:
            return conn.execute(statement, dict(params or {})).scalar()

    def dispose(self) -> None:
        """Release pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self.logger.info(f"Disconnected from {self.target}")
