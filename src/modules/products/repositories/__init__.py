"""Product repositories package."""

from modules.products.repositories.django_repository import (
    ProductStockDjangoRepository,
)
from modules.products.repositories.interfaces import (
    IProductStockReader,
    IProductStockRepository,
)

__all__ = [
    "IProductStockReader",
    "IProductStockRepository",
    "ProductStockDjangoRepository",
]
