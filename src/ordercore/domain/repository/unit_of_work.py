"""Abstract transaction boundary.

A unit of work hands out repositories that share one transaction.  Nothing
staged through them is visible to anyone else until ``commit()``; leaving
the ``with`` block without committing rolls everything back.

    with uow:
        uow.orders.add(order)
        uow.commit()
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.repository.catalog_repository import CatalogRepository
from ordercore.domain.repository.discount_repository import DiscountRepository
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.repository.reservation_repository import ReservationRepository


class UnitOfWork(ABC):

    catalog: CatalogRepository
    discounts: DiscountRepository
    orders: OrderRepository
    reservations: ReservationRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # commit() is always explicit; anything left over is discarded
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every staged write durable at once."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard staged writes.  Safe to call after commit()."""
