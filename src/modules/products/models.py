"""Product model: the stock-relevant projection of the catalog.

The catalog itself is managed elsewhere; the order pipeline only needs the
unit price and the stock quantity.

Business rules implemented:
- Prices are integers in the smallest currency unit, never negative.
- Stock quantity cannot be negative (column type + check constraint).
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class Product(BaseModel):
    name = models.CharField(max_length=255)
    price = models.PositiveBigIntegerField()
    stock_quantity = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} (#{self.pk})"
