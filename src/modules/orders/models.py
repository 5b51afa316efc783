"""Order and OrderItem models.

Business rules implemented:
- ``total_amount`` is computed once at creation and never recomputed.
- ``order_date`` is set at creation and not editable.
- OrderItem snapshots the unit ``price`` at order time.
- OrderItem ``total_price`` is always ``quantity * price`` (calculated on save).
- Items are owned by their order and cascade-delete with it (hard delete).
- Money is stored as integers in the smallest currency unit.
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    CANCELLABLE_STATUS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)


class Order(BaseModel):
    """Order aggregate root.

    ``user_id`` refers to a user of the identity service; it is not a
    foreign key because users are not stored here.
    """

    user_id: models.PositiveBigIntegerField = models.PositiveBigIntegerField()
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING_PAYMENT,
    )
    delivery_date: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    pickup_point: models.CharField = models.CharField(max_length=255)
    order_date: models.DateTimeField = models.DateTimeField(
        default=timezone.now, editable=False
    )
    total_amount: models.PositiveBigIntegerField = models.PositiveBigIntegerField(
        default=0, editable=False
    )
    receipt_url: models.URLField = models.URLField(
        max_length=500, null=True, blank=True
    )

    class Meta:
        db_table = "orders"
        ordering = ["-order_date", "-id"]
        indexes = [
            models.Index(
                fields=["user_id", "-order_date"], name="orders_user_date_idx"
            ),
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-order_date"], name="orders_order_date_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    @property
    def is_cancellable(self) -> bool:
        return self.status == CANCELLABLE_STATUS

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether *new_status* is a forward step from the current one."""
        allowed = VALID_TRANSITIONS.get(self.status, set())
        return new_status in allowed

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id == user_id

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"Order #{self.pk} ({self.status})"


class OrderItem(models.Model):
    """Line item linking an Order to a Product.

    ``price`` is a **snapshot** of the unit price at the time of purchase;
    it never changes even if the catalog price is updated later.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    price: models.PositiveBigIntegerField = models.PositiveBigIntegerField()
    total_price: models.PositiveBigIntegerField = models.PositiveBigIntegerField(
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.total_price = self.quantity * self.price
        super().save(*args, **kwargs)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"product #{self.product_id} x{self.quantity} ({self.total_price})"
