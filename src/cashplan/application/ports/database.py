"""Database port for the cash-flow engine.

This module defines the application-layer protocol for accessing the
database engine. Infrastructure implementations are expected to provide a
concrete adapter that satisfies this port.
"""

from typing import Protocol

from sqlalchemy.engine import Engine


class DatabaseEnginePort(Protocol):
    """Port exposing the SQLAlchemy engine backing every store."""

    def get_engine(self) -> Engine:
        """Get the engine for the cash-flow database.

        Returns:
            Engine: SQLAlchemy engine connected to the configured backend.
        """


__all__ = ["DatabaseEnginePort"]
