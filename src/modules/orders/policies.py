"""Access policy for orders.

- Admins may read, transition and delete any order.
- Owners may read and cancel their own orders.
- Anyone else is told the order does not exist.  Read and cancel paths
  never answer ``Forbidden``, so order ids cannot be enumerated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from modules.core.exceptions import ForbiddenError
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.core.identity import Caller
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class OrderAccessPolicy:
    def can_view(self, order: Order, caller: Caller) -> bool:
        return caller.is_admin or order.is_owned_by(caller.user_id)

    def can_cancel(self, order: Order, caller: Caller) -> bool:
        return caller.is_admin or order.is_owned_by(caller.user_id)

    def can_administer(self, order: Order, caller: Caller) -> bool:
        return caller.is_admin

    def ensure_can_view(self, order: Order, caller: Caller) -> None:
        if not self.can_view(order, caller):
            self._conceal(order, caller, "view")

    def ensure_can_cancel(self, order: Order, caller: Caller) -> None:
        if not self.can_cancel(order, caller):
            self._conceal(order, caller, "cancel")

    def ensure_can_administer(self, order: Order, caller: Caller) -> None:
        """Owners already know the order exists, so they get ``Forbidden``."""
        if self.can_administer(order, caller):
            return
        if order.is_owned_by(caller.user_id):
            logger.warning(
                "order.access_forbidden",
                order_id=order.pk,
                user_id=caller.user_id,
            )
            raise ForbiddenError("admin role required")
        self._conceal(order, caller, "administer")

    @staticmethod
    def _conceal(order: Order, caller: Caller, action: str) -> None:
        logger.warning(
            "order.access_concealed",
            order_id=order.pk,
            user_id=caller.user_id,
            action=action,
        )
        raise OrderNotFound()
