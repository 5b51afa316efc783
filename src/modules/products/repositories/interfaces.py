"""Product stock repository interfaces.

``IProductStockReader`` is the read side used during order creation.
``IProductStockRepository`` adds the guarded stock reservation used
when the pipeline decrements stock inside the creation transaction.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductStockReader(IRepository["Product"]):
    """Price/stock lookup by product id."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a unit of work.  Returns ``None`` if the
        product does not exist.
        """


class IProductStockRepository(IProductStockReader):
    """Stock reader that can also move stock in and out."""

    @abstractmethod
    def reserve(self, id: int, quantity: int) -> bool:
        """Decrement stock by *quantity* if enough is available.

        Returns ``False`` (and changes nothing) when the product is
        missing or its stock is below *quantity*.
        """

    @abstractmethod
    def release(self, id: int, quantity: int) -> None:
        """Return *quantity* units to the product's stock."""
