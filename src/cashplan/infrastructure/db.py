"""Database infrastructure for the cash-flow engine.

This module exposes concrete helpers to create and reuse the SQLAlchemy
engine connected to the cash-flow database. It belongs to the
infrastructure layer because it deals with external systems (PostgreSQL in
production, SQLite for local runs and tests).
"""

import os
from typing import Optional

import dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import QueuePool

from cashplan.application.ports.database import DatabaseEnginePort

DB_URL_ENV = "CASHPLAN_DB_URL"


def _get_env_var(name: str) -> str:
    """Read an environment variable (after loading .env) or raise.

    Args:
        name: Name of the environment variable to read.

    Returns:
        str: The raw value of the environment variable.

    Raises:
        RuntimeError: If the environment variable is missing or empty.
    """
    dotenv.load_dotenv()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}")
    return value


def _create_engine(db_url: str) -> Engine:
    """Create a configured SQLAlchemy engine.

    Server databases get a small QueuePool with health checks; SQLite keeps
    the dialect's default pool.

    Args:
        db_url: Fully qualified database URL (including driver and credentials)

    Returns:
        Engine: A SQLAlchemy engine instance.
    """
    if make_url(db_url).get_backend_name() == "sqlite":
        return create_engine(db_url, future=True)
    return create_engine(
        db_url,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
        future=True,
    )


_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Get a singleton SQLAlchemy engine for the cash-flow database.

    Returns:
        Engine: Lazily initialized engine.
    """
    global _engine
    if _engine is None:
        db_url = _get_env_var(DB_URL_ENV)
        _engine = _create_engine(db_url)
    return _engine


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """DatabaseEnginePort implementation backed by SQLAlchemy.

    The adapter hides configuration details (environment variables, pooling)
    behind the port so repositories depend only on the protocol. Passing an
    engine pins the adapter to it.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    def get_engine(self) -> Engine:
        """Get the engine for the cash-flow database.

        Returns:
            Engine: SQLAlchemy engine.
        """
        if self._engine is not None:
            return self._engine
        return get_engine()


__all__ = ["DB_URL_ENV", "get_engine", "SqlAlchemyDatabaseEngineAdapter"]
