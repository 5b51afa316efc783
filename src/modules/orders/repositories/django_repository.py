"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Creation is wrapped in ``transaction.atomic()`` so the Order aggregate
(Order + OrderItems) is persisted atomically; inside a unit of work
this becomes a savepoint of the outer transaction.

Every public method translates driver errors into the domain taxonomy.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from django.db import transaction
from django.db.models import Count
from django.utils import timezone

from modules.core.repositories.errors import translates_db_errors
from modules.orders.dtos import ExportFilterDTO, OrderStatsDTO
from modules.orders.filters import OrderExportFilter
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _queryset(self):
        return Order.objects.using(self.using)

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @translates_db_errors("create order")
    def create(self, data: Dict[str, Any]) -> Order:
        items = data["items"]
        with transaction.atomic(using=self.using):
            order = Order(
                user_id=data["user_id"],
                pickup_point=data["pickup_point"],
                delivery_date=data.get("delivery_date"),
                total_amount=data["total_amount"],
            )
            order.save(using=self.using)

            for item_data in items:
                OrderItem(
                    order=order,
                    product_id=item_data["product_id"],
                    quantity=item_data["quantity"],
                    price=item_data["price"],
                ).save(using=self.using)

        logger.info("order.persisted", order_id=order.pk, item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @translates_db_errors("get order by id")
    def get_by_id(self, id: int) -> Optional[Order]:
        return self._queryset().prefetch_related("items").filter(id=id).first()

    @translates_db_errors("lock order")
    def get_for_update(self, id: int) -> Optional[Order]:
        """Eager-loads items so the caller can iterate them while locked."""
        return (
            self._queryset()
            .select_for_update()
            .prefetch_related("items")
            .filter(id=id)
            .first()
        )

    @translates_db_errors("list user orders")
    def list_by_user(self, user_id: int) -> List[Order]:
        return list(
            self._queryset()
            .prefetch_related("items")
            .filter(user_id=user_id)
            .order_by("-order_date", "-id")
        )

    @translates_db_errors("export orders")
    def export(self, filters: ExportFilterDTO) -> List[Order]:
        params = filters.model_dump(
            include={"user_id", "status", "min_amount", "max_amount"},
            exclude_none=True,
            mode="json",
        )
        filterset = OrderExportFilter(data=params, queryset=self._queryset())
        queryset = filterset.qs.order_by("-order_date", "-id")
        return list(queryset[filters.offset : filters.offset + filters.limit])

    @translates_db_errors("order stats")
    def stats(self, date_from: datetime, date_to: datetime) -> List[OrderStatsDTO]:
        rows = (
            self._queryset()
            .filter(order_date__range=(date_from, date_to))
            .values("status")
            .annotate(count=Count("id"))
            .order_by("status")
        )
        return [OrderStatsDTO(status=row["status"], count=row["count"]) for row in rows]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @translates_db_errors("update order status")
    def update_status(self, id: int, status: str) -> bool:
        updated = (
            self._queryset()
            .filter(id=id)
            .update(status=status, updated_at=timezone.now())
        )
        if updated:
            logger.info("order.status_persisted", order_id=id, status=status)
        return bool(updated)

    @translates_db_errors("delete order")
    def delete(self, id: int) -> bool:
        deleted, _ = self._queryset().filter(id=id).delete()
        if deleted:
            logger.info("order.deleted", order_id=id)
        return bool(deleted)
