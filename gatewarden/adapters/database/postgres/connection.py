# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

"""Database connection pool management."""

import logging
from typing import Generator, Optional
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from gatewarden.core.config import get_settings
from gatewarden.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class DatabaseConfig:
    """Database configuration read from settings unless overridden."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        pool_size: Optional[int] = None,
        max_overflow: Optional[int] = None,
        pool_timeout: Optional[int] = None,
        pool_recycle: Optional[int] = None,
        pool_pre_ping: Optional[bool] = None,
        echo: bool = False,
    ):
        """
        Initialize database configuration.

        Args:
            database_url: Database connection URL (falls back to settings)
            pool_size: Number of connections to maintain in pool
            max_overflow: Max connections beyond pool_size
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Seconds before recycling connections
            pool_pre_ping: Test connections before using
            echo: Log all SQL statements
        """
        settings = get_settings()
        self.database_url = database_url or settings.database_url
        self.pool_size = pool_size or settings.database_pool_size
        self.max_overflow = max_overflow if max_overflow is not None else settings.database_max_overflow
        self.pool_timeout = pool_timeout or settings.database_pool_timeout
        self.pool_recycle = pool_recycle if pool_recycle is not None else settings.database_pool_recycle
        self.pool_pre_ping = pool_pre_ping if pool_pre_ping is not None else settings.database_pool_pre_ping
        self.echo = echo

    def get_engine_kwargs(self) -> dict:
        """
        Get SQLAlchemy engine configuration.

        Returns:
            Dictionary of engine configuration parameters
        """
        return {
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
            "poolclass": QueuePool,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_timeout": self.pool_timeout,
            "pool_recycle": self.pool_recycle,
        }


class DatabaseConnectionPool:
    """
    Database connection pool manager.

    Manages SQLAlchemy engine and session lifecycle.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        """
        Initialize the connection pool.

        Args:
            config: Database configuration (creates default if None)
        """
        self.config = config or DatabaseConfig()
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._initialized = False

    @property
    def engine(self) -> Engine:
        """Get the SQLAlchemy engine, creating it if necessary."""
        if not self._initialized:
            self.initialize()
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        """Get the session factory, creating it if necessary."""
        if not self._initialized:
            self.initialize()
        return self._session_factory

    def initialize(self) -> None:
        """
        Initialize the database engine and session factory.

        This method is idempotent and safe to call multiple times.
        """
        if self._initialized:
            logger.debug("Database connection pool already initialized")
            return

        logger.info("Initializing database connection pool")

        try:
            self._engine = create_engine(
                self.config.database_url,
                **self.config.get_engine_kwargs()
            )
            self._session_factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self._engine
            )
            self._initialized = True
            logger.info("Database connection pool initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection pool: {e}")
            raise DatabaseConnectionError(str(e)) from e

    def get_session(self) -> Session:
        """
        Create a new database session.

        Note:
            Caller is responsible for closing the session.
        """
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope for a series of operations.

        Yields:
            SQLAlchemy session instance
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Session rolled back due to error: {e}")
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Dispose of the connection pool."""
        if self._engine:
            logger.info("Disposing database connection pool")
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._initialized = False

    def test_connection(self) -> bool:
        """
        Test the database connection.

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            with self.session_scope() as session:
                return session.execute(text("SELECT 1")).scalar() == 1
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False


_connection_pool: Optional[DatabaseConnectionPool] = None


def get_connection_pool(config: Optional[DatabaseConfig] = None) -> DatabaseConnectionPool:
    """
    Get or create the global database connection pool.

    Args:
        config: Database configuration (only used on first call)

    Returns:
        DatabaseConnectionPool instance
    """
    global _connection_pool

    if _connection_pool is None:
        _connection_pool = DatabaseConnectionPool(config)
        _connection_pool.initialize()

    return _connection_pool


def reset_connection_pool() -> None:
    """
    Reset the global connection pool.

    Useful for testing or when database configuration changes.
    """
    global _connection_pool

    if _connection_pool:
        _connection_pool.dispose()
        _connection_pool = None
