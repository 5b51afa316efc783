"""Order repository interface.

Extends ``IRepository[Order]`` with methods required by the Order
aggregate: atomic creation with items, row locking for cancellation,
listing, export filtering and per-status statistics.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.dtos import ExportFilterDTO, OrderStatsDTO
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderItem children.  Mutations
    must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` must include ``user_id``, ``pickup_point``,
        ``total_amount`` and ``items`` (list of dicts with ``product_id``,
        ``quantity``, ``price``); ``delivery_date`` is optional.
        """

    @abstractmethod
    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve an order with prefetched items."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list_by_user(self, user_id: int) -> List[Order]:
        """All orders of *user_id*, most recent first."""

    @abstractmethod
    def export(self, filters: ExportFilterDTO) -> List[Order]:
        """Filtered, paginated orders, most recent first."""

    @abstractmethod
    def stats(self, date_from: datetime, date_to: datetime) -> List[OrderStatsDTO]:
        """Order counts per status with ``order_date`` in the closed window."""

    @abstractmethod
    def update_status(self, id: int, status: str) -> bool:
        """Set the status; ``False`` when the order does not exist."""

    @abstractmethod
    def delete(self, id: int) -> bool:
        """Hard-delete the order and its items; ``False`` when absent."""
