"""Translate SQLAlchemy errors into the application error taxonomy.

Driver messages are logged, never returned to clients.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from smart_restaurant.core.errors import AppError, BadRequest, Conflict, UpstreamFailure

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"
_NOT_NULL_VIOLATION = "23502"
_CHECK_VIOLATION = "23514"


def _sqlstate(exc: SQLAlchemyError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _is_unique_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == _UNIQUE_VIOLATION:
        return True
    # SQLite reports constraint kinds only in the message
    return "UNIQUE constraint failed" in str(exc.orig)


def map_sql_error(exc: SQLAlchemyError, conflict_message: Optional[str] = None) -> AppError:
    """Map a SQLAlchemy exception to an ``AppError``."""
    if isinstance(exc, IntegrityError):
        if _is_unique_violation(exc):
            return Conflict(conflict_message or "Resource already exists")
        if _sqlstate(exc) in (_FOREIGN_KEY_VIOLATION, _NOT_NULL_VIOLATION, _CHECK_VIOLATION):
            return BadRequest("Invalid reference or missing required field")
        return BadRequest("Invalid data")
    if isinstance(exc, DataError):
        return BadRequest("Invalid data format")
    logger.error(f"Unexpected database error: {exc}")
    return UpstreamFailure()


@contextmanager
def translate_db_errors(db: Session, conflict_message: Optional[str] = None) -> Iterator[None]:
    """Roll back and re-raise database errors as ``AppError``.

    Usage::

        with translate_db_errors(db, "Category name already exists"):
            db.add(category)
            db.commit()
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.info(f"Database error translated: {type(exc).__name__}: {exc}")
        raise map_sql_error(exc, conflict_message) from exc
