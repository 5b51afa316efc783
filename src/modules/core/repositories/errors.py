"""Translation of database errors into the domain error taxonomy.

Repositories wrap their public methods with ``translates_db_errors`` so
that nothing above the store ever sees a driver exception.  PostgreSQL
errors are classified by SQLSTATE; SQLite does not expose codes, so its
messages are matched instead.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional, TypeVar

import structlog
from django.db import DatabaseError, DataError, IntegrityError

from modules.core.exceptions import (
    AlreadyExistsError,
    DomainError,
    InternalError,
    InvalidInputError,
)

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
INVALID_TEXT_REPRESENTATION = "22P02"
DATATYPE_MISMATCH = "42804"

_INVALID_INPUT_CODES = {
    FOREIGN_KEY_VIOLATION,
    CHECK_VIOLATION,
    INVALID_TEXT_REPRESENTATION,
    DATATYPE_MISMATCH,
}

_SQLITE_INVALID_INPUT_MESSAGES = (
    "FOREIGN KEY constraint failed",
    "CHECK constraint failed",
)
_SQLITE_UNIQUE_MESSAGE = "UNIQUE constraint failed"


def _sqlstate(exc: DatabaseError) -> Optional[str]:
    cause = exc.__cause__
    # psycopg 3 exposes ``sqlstate``, psycopg2 ``pgcode``.
    return getattr(cause, "sqlstate", None) or getattr(cause, "pgcode", None)


def translate_db_error(exc: DatabaseError, operation: str) -> DomainError:
    """Classify *exc* raised during *operation*."""
    code = _sqlstate(exc)
    message = str(exc)

    if code in _INVALID_INPUT_CODES:
        return InvalidInputError(f"{operation}: invalid reference or value")
    if code == UNIQUE_VIOLATION:
        return AlreadyExistsError(f"{operation}: already exists")

    if code is None and isinstance(exc, IntegrityError):
        if any(m in message for m in _SQLITE_INVALID_INPUT_MESSAGES):
            return InvalidInputError(f"{operation}: invalid reference or value")
        if _SQLITE_UNIQUE_MESSAGE in message:
            return AlreadyExistsError(f"{operation}: already exists")

    if isinstance(exc, DataError):
        return InvalidInputError(f"{operation}: invalid value")

    logger.error(
        "db.unclassified_error",
        operation=operation,
        sqlstate=code,
        error_type=type(exc).__name__,
        error=message,
    )
    return InternalError()


def translates_db_errors(operation: str) -> Callable[[F], F]:
    """Decorator: re-raise ``DatabaseError`` as the matching ``DomainError``."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except DatabaseError as exc:
                raise translate_db_error(exc, operation) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
