"""Shared helpers for SQLAlchemy-backed repositories."""

from contextlib import contextmanager
from collections.abc import Iterator

from sqlalchemy.exc import SQLAlchemyError

from cashplan.domain.errors import DataAccessError


@contextmanager
def data_access(action: str, logger=None) -> Iterator[None]:
    """Translate SQLAlchemy failures into DataAccessError.

    Args:
        action: Short description used in the error message.
        logger: Optional logger receiving the failure.

    Raises:
        DataAccessError: Wrapping the underlying SQLAlchemy exception.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        if logger is not None:
            logger.error(f"Database error while {action}: {exc}")
        raise DataAccessError(f"Failed {action}: {exc}") from exc


__all__ = ["data_access"]
