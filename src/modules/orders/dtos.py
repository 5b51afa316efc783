"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: input for a single order line item.
- ``CreateOrderDTO``: input for order creation (nested items).
- ``ExportFilterDTO``: filter and pagination for order export.
- ``OrderStatsDTO``: per-status order count.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from modules.orders.constants import EXPORT_DEFAULT_LIMIT, OrderStatus

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single order item in a creation request.

    ``price`` is the unit price in the smallest currency unit as supplied
    by the caller.
    """

    model_config = ConfigDict(frozen=True)

    product_id: int
    quantity: int
    price: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("price")
    @classmethod
    def price_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @property
    def total_price(self) -> int:
        return self.quantity * self.price


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - ``pickup_point`` must not be blank.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    items: List[CreateOrderItemDTO]
    pickup_point: str
    delivery_date: Optional[datetime] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @field_validator("pickup_point")
    @classmethod
    def pickup_point_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Pickup point is required.")
        return v


class ExportFilterDTO(BaseModel):
    """Conjunction of optional filters plus limit/offset pagination.

    ``limit`` values of zero or below fall back to the default page size
    and a negative ``offset`` is clamped to zero.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None
    limit: int = EXPORT_DEFAULT_LIMIT
    offset: int = 0

    @field_validator("limit")
    @classmethod
    def default_limit(cls, v: int) -> int:
        return v if v > 0 else EXPORT_DEFAULT_LIMIT

    @field_validator("offset")
    @classmethod
    def clamp_offset(cls, v: int) -> int:
        return max(v, 0)


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderStatsDTO(BaseModel):
    """Number of orders in one status within a date window."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    count: int
