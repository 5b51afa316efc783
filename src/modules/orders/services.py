"""Order service layer (Use Cases).

Orchestrates order creation, reads, cancellation, administrative status
changes and deletion.  Every write runs inside a unit of work that locks
the order row; the service defines that boundary, repositories never commit.

Business rules enforced:
- Every product must exist and hold enough stock for the total quantity
  requested across all items (locked in ascending id order).
- ``total_amount`` is the sum of ``price * quantity`` over the items.
- Only ``pending_payment`` orders can be cancelled by their owner.
- With reservation on, an order holds its stock unless it is cancelled
  or deleted while awaiting payment.
- Non-owners who are not admins cannot tell whether an order exists.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

import structlog
from django.db import DatabaseError
from django.utils import timezone

from modules.core.exceptions import InternalError
from modules.orders.config import OrderPipelineConfig
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import (
    CancelNotAllowed,
    InsufficientStock,
    InvalidOrderStatus,
    InvalidStatsRange,
    InvalidTransition,
    OrderNotFound,
    UnknownProduct,
)
from modules.orders.policies import OrderAccessPolicy

if TYPE_CHECKING:
    from modules.core.identity import Caller
    from modules.orders.dtos import CreateOrderDTO, ExportFilterDTO, OrderStatsDTO
    from modules.orders.models import Order, OrderItem
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.orders.unit_of_work import IUnitOfWork

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives the non-transactional order repository and a factory of
    units of work via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        unit_of_work_factory: Callable[[], IUnitOfWork],
        policy: Optional[OrderAccessPolicy] = None,
        config: Optional[OrderPipelineConfig] = None,
    ) -> None:
        self._order_repo = order_repository
        self._uow_factory = unit_of_work_factory
        self._policy = policy or OrderAccessPolicy()
        self._config = config or OrderPipelineConfig()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> int:
        """Create a new order atomically and return its id.

        Steps:
        1. Open a unit of work.
        2. For each distinct product (sorted by id to avoid deadlocks):
           lock the row, check it exists and has enough stock, and
           reserve the stock when reservation is enabled.
        3. Compute the total and persist order + items.
        4. Commit.

        Raises:
            UnknownProduct: a product does not exist.
            InsufficientStock: not enough stock for a product.
            InternalError: the commit failed.
        """
        log = logger.bind(user_id=dto.user_id, item_count=len(dto.items))
        log.info("order.creation_started")

        try:
            with self._uow_factory() as uow:
                catalog_prices = self._check_stock(uow, dto)

                repo_items = []
                for item in dto.items:
                    price = (
                        catalog_prices[item.product_id]
                        if self._config.reprice_from_catalog
                        else item.price
                    )
                    repo_items.append(
                        {
                            "product_id": item.product_id,
                            "quantity": item.quantity,
                            "price": price,
                        }
                    )
                total = sum(i["price"] * i["quantity"] for i in repo_items)

                order = uow.orders.create(
                    {
                        "user_id": dto.user_id,
                        "pickup_point": dto.pickup_point,
                        "delivery_date": dto.delivery_date,
                        "total_amount": total,
                        "items": repo_items,
                    }
                )
                uow.commit()
        except DatabaseError as exc:
            log.error("order.commit_failed", error=str(exc))
            raise InternalError() from exc

        log.info("order.created", order_id=order.pk, total_amount=total)
        return order.pk

    def cancel_order(self, order_id: int, caller: Caller) -> None:
        """Cancel a ``pending_payment`` order.

        The order row is locked first so two concurrent cancellations
        cannot both release stock.

        Raises:
            OrderNotFound: order does not exist or is hidden from *caller*.
            CancelNotAllowed: the order is past ``pending_payment``.
        """
        log = logger.bind(order_id=order_id, user_id=caller.user_id)

        try:
            with self._uow_factory() as uow:
                order = uow.orders.get_for_update(order_id)
                if order is None:
                    raise OrderNotFound()
                self._policy.ensure_can_cancel(order, caller)

                if not order.is_cancellable:
                    log.warning("order.cancel_not_allowed", current_status=order.status)
                    raise CancelNotAllowed()

                uow.orders.update_status(order.pk, OrderStatus.CANCELLED)

                if self._config.reserve_stock:
                    self._release_items(uow, order.items.all())

                uow.commit()
        except DatabaseError as exc:
            log.error("order.commit_failed", error=str(exc))
            raise InternalError() from exc

        log.info("order.cancelled")

    def admin_update_status(
        self, order_id: int, new_status: str, caller: Caller
    ) -> None:
        """Set an order's status by administrative action.

        Any member of ``OrderStatus`` is accepted unless forward-only
        transitions are enforced by configuration.  The order row is
        locked for the whole change.  With stock reservation enabled,
        moving into ``cancelled`` gives the items' stock back and moving
        out of it takes the stock again.

        Raises:
            InvalidOrderStatus: *new_status* is not a known status.
            OrderNotFound: order does not exist (or is hidden).
            ForbiddenError: *caller* owns the order but is not an admin.
            InvalidTransition: strict mode and not a forward step.
            InsufficientStock: reopening a cancelled order without stock.
        """
        if new_status not in OrderStatus.values:
            raise InvalidOrderStatus()

        log = logger.bind(
            order_id=order_id, new_status=new_status, user_id=caller.user_id
        )

        try:
            with self._uow_factory() as uow:
                order = uow.orders.get_for_update(order_id)
                if order is None:
                    raise OrderNotFound()
                self._policy.ensure_can_administer(order, caller)
                log = log.bind(current_status=order.status)

                if self._config.enforce_forward_transitions:
                    if order.is_terminal:
                        log.warning("order.invalid_transition", reason="terminal")
                        raise InvalidTransition(f"order is already {order.status}")
                    if not order.can_transition_to(new_status):
                        log.warning("order.invalid_transition")
                        raise InvalidTransition(
                            f"cannot transition from {order.status} to {new_status}"
                        )

                if self._config.reserve_stock:
                    self._move_stock_for_transition(uow, order, new_status)

                if not uow.orders.update_status(order.pk, new_status):
                    raise OrderNotFound()
                uow.commit()
        except DatabaseError as exc:
            log.error("order.commit_failed", error=str(exc))
            raise InternalError() from exc

        log.info("order.status_updated")

    def delete_order(self, order_id: int, caller: Caller) -> None:
        """Hard-delete an order and its items.

        An order still awaiting payment gives its reserved stock back.

        Raises:
            OrderNotFound: order does not exist (or is hidden).
            ForbiddenError: *caller* owns the order but is not an admin.
        """
        log = logger.bind(order_id=order_id, user_id=caller.user_id)

        try:
            with self._uow_factory() as uow:
                order = uow.orders.get_for_update(order_id)
                if order is None:
                    raise OrderNotFound()
                self._policy.ensure_can_administer(order, caller)

                if self._config.reserve_stock and order.is_cancellable:
                    self._release_items(uow, order.items.all())

                if not uow.orders.delete(order.pk):
                    raise OrderNotFound()
                uow.commit()
        except DatabaseError as exc:
            log.error("order.commit_failed", error=str(exc))
            raise InternalError() from exc

        log.info("order.deleted_by_admin")


    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int, caller: Caller) -> Order:
        """Retrieve a single order visible to *caller*.

        Raises:
            OrderNotFound: if the order does not exist or is hidden.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound()
        self._policy.ensure_can_view(order, caller)
        return order

    def list_user_orders(self, user_id: int) -> List[Order]:
        return self._order_repo.list_by_user(user_id)

    def export_orders(self, filters: ExportFilterDTO) -> List[Order]:
        """Admin-only at the boundary; not re-checked here."""
        return self._order_repo.export(filters)

    def get_stats(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> List[OrderStatsDTO]:
        """Count orders per status with ``order_date`` in ``[date_from, date_to]``.

        Missing bounds default to the start of the current month (local
        time) and now.
        """
        now = timezone.now()
        if date_from is None:
            date_from = timezone.localtime(now).replace(
                day=1, hour=0, minute=0, second=0, microsecond=0
            )
        if date_to is None:
            date_to = now
        if date_from > date_to:
            raise InvalidStatsRange()
        return self._order_repo.stats(date_from, date_to)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_stock(self, uow: IUnitOfWork, dto: CreateOrderDTO) -> Dict[int, int]:
        """Lock, check and optionally reserve stock; return catalog prices."""
        requested = _requested_quantities(dto.items)

        prices: Dict[int, int] = {}
        for product_id in sorted(requested):
            quantity = requested[product_id]
            product = uow.products.get_for_update(product_id)
            if product is None:
                raise UnknownProduct()
            if product.stock_quantity < quantity:
                logger.warning(
                    "order.insufficient_stock",
                    product_id=product_id,
                    requested=quantity,
                    available=product.stock_quantity,
                )
                raise InsufficientStock()
            if self._config.reserve_stock and not uow.products.reserve(
                product_id, quantity
            ):
                raise InsufficientStock()
            prices[product_id] = product.price
        return prices

    def _move_stock_for_transition(
        self, uow: IUnitOfWork, order: Order, new_status: str
    ) -> None:
        """Keep reserved stock in step with entering or leaving ``cancelled``."""
        was_cancelled = order.status == OrderStatus.CANCELLED
        to_cancelled = new_status == OrderStatus.CANCELLED
        if to_cancelled and not was_cancelled:
            self._release_items(uow, order.items.all())
        elif was_cancelled and not to_cancelled:
            self._reserve_items(uow, order.items.all())

    def _reserve_items(self, uow: IUnitOfWork, items: Iterable[OrderItem]) -> None:
        requested = _requested_quantities(items)
        for product_id in sorted(requested):
            quantity = requested[product_id]
            if not uow.products.reserve(product_id, quantity):
                logger.warning(
                    "order.insufficient_stock",
                    product_id=product_id,
                    requested=quantity,
                )
                raise InsufficientStock()

    def _release_items(self, uow: IUnitOfWork, items: Iterable[OrderItem]) -> None:
        released = _requested_quantities(items)
        for product_id in sorted(released):
            uow.products.release(product_id, released[product_id])


def _requested_quantities(items) -> Dict[int, int]:
    """Total quantity per product id."""
    totals: Dict[int, int] = defaultdict(int)
    for item in items:
        totals[item.product_id] += item.quantity
    return totals
