"""Unit tests for Order DTOs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.orders.constants import EXPORT_DEFAULT_LIMIT, OrderStatus
from modules.orders.dtos import (
    CreateOrderDTO,
    CreateOrderItemDTO,
    ExportFilterDTO,
    OrderStatsDTO,
)

pytestmark = pytest.mark.unit


class TestCreateOrderItemDTO:
    def test_valid(self):
        item = CreateOrderItemDTO(product_id=1, quantity=3, price=250)
        assert item.total_price == 750

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            CreateOrderItemDTO(product_id=1, quantity=0, price=250)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError, match="Price cannot be negative"):
            CreateOrderItemDTO(product_id=1, quantity=1, price=-1)

    def test_zero_price_allowed(self):
        assert CreateOrderItemDTO(product_id=1, quantity=1, price=0).total_price == 0

    def test_is_frozen(self):
        item = CreateOrderItemDTO(product_id=1, quantity=1, price=1)
        with pytest.raises(ValidationError):
            item.quantity = 5


class TestCreateOrderDTO:
    def _item(self):
        return CreateOrderItemDTO(product_id=1, quantity=1, price=100)

    def test_valid(self):
        dto = CreateOrderDTO(user_id=1, items=[self._item()], pickup_point=" Hub 9 ")
        assert dto.pickup_point == "Hub 9"
        assert dto.delivery_date is None

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            CreateOrderDTO(user_id=1, items=[], pickup_point="Hub")

    def test_blank_pickup_point_rejected(self):
        with pytest.raises(ValidationError, match="Pickup point is required"):
            CreateOrderDTO(user_id=1, items=[self._item()], pickup_point="   ")


class TestExportFilterDTO:
    def test_defaults(self):
        dto = ExportFilterDTO()
        assert dto.limit == EXPORT_DEFAULT_LIMIT
        assert dto.offset == 0
        assert dto.status is None

    def test_zero_limit_falls_back_to_default(self):
        assert ExportFilterDTO(limit=0).limit == EXPORT_DEFAULT_LIMIT

    def test_negative_limit_falls_back_to_default(self):
        assert ExportFilterDTO(limit=-5).limit == EXPORT_DEFAULT_LIMIT

    def test_negative_offset_clamped(self):
        assert ExportFilterDTO(offset=-10).offset == 0

    def test_status_parsed(self):
        assert ExportFilterDTO(status="paid").status == OrderStatus.PAID

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            ExportFilterDTO(status="lost")


class TestOrderStatsDTO:
    def test_dump(self):
        dto = OrderStatsDTO(status=OrderStatus.SHIPPED, count=4)
        assert dto.model_dump(mode="json") == {"status": "shipped", "count": 4}
