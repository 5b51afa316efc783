"""Django ORM implementation of the product stock repository.

Error handling follows the Null Object pattern: look-ups return ``None``
instead of raising, and the Service Layer decides what a missing product
means.  Driver errors are translated into the domain taxonomy.
"""

from __future__ import annotations

from typing import Optional

import structlog
from django.db.models import F
from django.utils import timezone

from modules.core.repositories.errors import translates_db_errors
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductStockRepository

logger = structlog.get_logger(__name__)


class ProductStockDjangoRepository(IProductStockRepository):
    """Concrete stock repository backed by Django ORM."""

    def _queryset(self):
        return Product.objects.using(self.using)

    @translates_db_errors("get product by id")
    def get_by_id(self, id: int) -> Optional[Product]:
        product = self._queryset().filter(id=id).first()
        if product is None:
            logger.warning("product.not_found", product_id=id)
        return product

    @translates_db_errors("lock product")
    def get_for_update(self, id: int) -> Optional[Product]:
        product = self._queryset().select_for_update().filter(id=id).first()
        if product is None:
            logger.warning("product.not_found", product_id=id)
        return product

    @translates_db_errors("reserve stock")
    def reserve(self, id: int, quantity: int) -> bool:
        # Conditional UPDATE: the guard and the decrement are one statement,
        # so two transactions can never both take the last units.
        updated = (
            self._queryset()
            .filter(id=id, stock_quantity__gte=quantity)
            .update(
                stock_quantity=F("stock_quantity") - quantity,
                updated_at=timezone.now(),
            )
        )
        if updated:
            logger.info("product.stock_reserved", product_id=id, quantity=quantity)
        return bool(updated)

    @translates_db_errors("release stock")
    def release(self, id: int, quantity: int) -> None:
        updated = (
            self._queryset()
            .filter(id=id)
            .update(
                stock_quantity=F("stock_quantity") + quantity,
                updated_at=timezone.now(),
            )
        )
        if updated:
            logger.info("product.stock_released", product_id=id, quantity=quantity)
        else:
            logger.warning("product.release_skipped", product_id=id, quantity=quantity)
