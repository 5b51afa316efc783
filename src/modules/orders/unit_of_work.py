"""Unit of Work for the order pipeline.

A unit of work is a context manager that owns one database transaction
and exposes repositories bound to it::

    with DjangoUnitOfWork() as uow:
        product = uow.products.get_for_update(product_id)
        order = uow.orders.create(data)
        uow.commit()

Leaving the block without calling ``commit()`` rolls everything back,
whether the block raised or returned early.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Optional, Type

import structlog
from django.db import DEFAULT_DB_ALIAS, transaction

from modules.orders.repositories import IOrderRepository, OrderDjangoRepository
from modules.products.repositories import (
    IProductStockRepository,
    ProductStockDjangoRepository,
)

logger = structlog.get_logger(__name__)


class IUnitOfWork(ABC):
    orders: IOrderRepository
    products: IProductStockRepository

    @abstractmethod
    def __enter__(self) -> IUnitOfWork: ...

    @abstractmethod
    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> Optional[bool]: ...

    @abstractmethod
    def commit(self) -> None:
        """Mark the work as complete; it is made durable when the block exits."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard all work done inside the block."""


class DjangoUnitOfWork(IUnitOfWork):
    """Unit of work over ``transaction.atomic`` on one database alias.

    Nested inside another atomic block (as in tests) the transaction
    becomes a savepoint, with the same all-or-nothing behavior.
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self.using = using
        self.orders = OrderDjangoRepository(using=using)
        self.products = ProductStockDjangoRepository(using=using)
        self._atomic: Optional[transaction.Atomic] = None
        self._committed = False

    def __enter__(self) -> DjangoUnitOfWork:
        self._committed = False
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None and not self._committed:
            logger.info("uow.rolled_back", reason="no_commit")
            transaction.set_rollback(True, using=self.using)
        atomic, self._atomic = self._atomic, None
        # Atomic.__exit__ performs the actual COMMIT or ROLLBACK and may
        # raise DatabaseError if the commit fails.
        return atomic.__exit__(exc_type, exc, tb)

    def commit(self) -> None:
        self._committed = True

    def rollback(self) -> None:
        self._committed = False
        transaction.set_rollback(True, using=self.using)
