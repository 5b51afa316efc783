"""Error taxonomy shared by every module.

Each domain exception carries an ``ErrorKind`` tag.  Callers branch on
``exc.kind`` (a closed enumeration) rather than on concrete exception
classes, so the HTTP layer can map every kind exhaustively.
"""

from __future__ import annotations

import enum
from typing import ClassVar, Optional


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_STOCK = "insufficient_stock"
    ALREADY_EXISTS = "already_exists"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


class DomainError(Exception):
    """Base class for classified errors raised by services and repositories."""

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL
    default_detail: ClassVar[str] = "internal error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(DomainError):
    """Entity is absent, or hidden from the caller."""

    kind = ErrorKind.NOT_FOUND
    default_detail = "not found"


class InvalidInputError(DomainError):
    """Malformed request, invalid value or disallowed transition."""

    kind = ErrorKind.INVALID_INPUT
    default_detail = "invalid input"


class AlreadyExistsError(DomainError):
    """Store-level uniqueness violation."""

    kind = ErrorKind.ALREADY_EXISTS
    default_detail = "already exists"


class ForbiddenError(DomainError):
    """Caller knows the entity exists but lacks the rights for the action."""

    kind = ErrorKind.FORBIDDEN
    default_detail = "forbidden"


class InternalError(DomainError):
    """Unclassified failure; details are logged, never returned."""
