"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
is tagged with an ``ErrorKind``; the API layer (Views) maps the kind to
an HTTP response.
"""

from __future__ import annotations

from modules.core.exceptions import (
    DomainError,
    ErrorKind,
    InvalidInputError,
    NotFoundError,
)


class OrderNotFound(NotFoundError):
    """The order does not exist or is hidden from the caller."""

    default_detail = "order not found"


class UnknownProduct(InvalidInputError):
    """An order item references a product that does not exist."""

    default_detail = "invalid user or product"


class InsufficientStock(DomainError):
    """Requested quantity exceeds the product's stock."""

    kind = ErrorKind.INSUFFICIENT_STOCK
    default_detail = "insufficient stock"


class InvalidOrderStatus(InvalidInputError):
    """The target status is not a member of ``OrderStatus``."""

    default_detail = "invalid status"


class InvalidTransition(InvalidInputError):
    """The target status is not reachable from the current one."""

    default_detail = "invalid status transition"


class CancelNotAllowed(InvalidInputError):
    """Only orders awaiting payment can be cancelled."""

    default_detail = "cancel not allowed"


class InvalidStatsRange(InvalidInputError):
    """The statistics window starts after it ends."""

    default_detail = "invalid date range"
