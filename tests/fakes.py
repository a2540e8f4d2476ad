"""In-memory fakes for testing.

These implement the same abstract interfaces as the SQLAlchemy
repositories but keep everything in dicts.  FakeUnitOfWork snapshots the
writable stores on entry and restores them unless ``commit()`` ran, which
is enough to observe atomicity without a database.
"""

from __future__ import annotations

import copy
from datetime import date

from ordercore.domain.exceptions import ConcurrencyError
from ordercore.domain.model.catalog import CatalogItem, CurrentItemRef, LegacyItemRef
from ordercore.domain.model.discount import DiscountCode
from ordercore.domain.model.order import Order
from ordercore.domain.model.reservation import Reservation
from ordercore.domain.repository.catalog_repository import CatalogRepository
from ordercore.domain.repository.discount_repository import DiscountRepository
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.domain.repository.reservation_repository import ReservationRepository
from ordercore.domain.repository.unit_of_work import UnitOfWork


class FakeCatalogRepository(CatalogRepository):

    def __init__(self, items: list[CatalogItem] | None = None) -> None:
        self._current: dict[str, CatalogItem] = {}
        self._legacy: dict[str, CatalogItem] = {}
        self.reads = 0
        for item in items or []:
            self.put(item)

    def put(self, item: CatalogItem) -> None:
        if isinstance(item.ref, CurrentItemRef):
            self._current[item.ref.id] = item
        elif isinstance(item.ref, LegacyItemRef):
            self._legacy[item.ref.id] = item

    def get_current_item(self, item_id: str) -> CatalogItem | None:
        self.reads += 1
        return self._current.get(item_id)

    def get_legacy_item(self, item_id: str) -> CatalogItem | None:
        self.reads += 1
        return self._legacy.get(item_id)


class FakeDiscountRepository(DiscountRepository):
    """``used_by`` seeds earlier uses as (code id, user id) pairs."""

    def __init__(
        self,
        codes: list[DiscountCode] | None = None,
        used_by: list[tuple[str, str]] | None = None,
    ) -> None:
        self._store = {c.code: c for c in codes or []}
        self._usages: list[tuple[str, str | None, int]] = [
            (code_id, user_id, 0) for code_id, user_id in used_by or []
        ]

    def get_by_code(self, code: str) -> DiscountCode | None:
        return self._store.get(code)

    def has_been_used_by(self, code_id: str, user_id: str) -> bool:
        return any(c == code_id and u == user_id for c, u, _ in self._usages)

    def record_usage(self, code_id, user_id, order_id, discount_amount, order_total) -> None:
        self._usages.append((code_id, user_id, order_id))

    def usages(self) -> list[tuple[str, str | None, int]]:
        return list(self._usages)


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1

    def add(self, order: Order) -> None:
        order.check_ownership_invariant()
        order.id = self._next_id
        self._next_id += 1
        self._store[order.id] = order

    def get_by_id(self, order_id: int) -> Order | None:
        return self._store.get(order_id)

    def list_by_user(self, user_id: str) -> list[Order]:
        return [o for o in self.list_all() if o.user_id == user_id and not o.is_guest]

    def list_by_guest_session(self, guest_session_id: str) -> list[Order]:
        return [
            o for o in self.list_all()
            if o.guest_session_id == guest_session_id and o.is_guest and o.user_id is None
        ]

    def list_all(self) -> list[Order]:
        return sorted(self._store.values(), key=lambda o: o.id, reverse=True)

    def update_status(self, order: Order) -> None:
        self._store[order.id] = order

    def count(self) -> int:
        return len(self._store)


class FakeReservationRepository(ReservationRepository):

    def __init__(self, reservations: list[Reservation] | None = None) -> None:
        self._store: dict[int, Reservation] = {}
        self._next_id = 1
        for r in reservations or []:
            self.add(r)

    def add(self, reservation: Reservation) -> None:
        reservation.id = self._next_id
        self._next_id += 1
        self._store[reservation.id] = reservation

    def get_by_id(self, reservation_id: int) -> Reservation | None:
        return self._store.get(reservation_id)

    def list_active_for_email_on(self, email: str, on: date) -> list[Reservation]:
        return [
            r for r in self._store.values()
            if r.customer_email.lower() == email.lower()
            and r.reservation_date == on
            and r.is_active
        ]

    def list_by_user(self, user_id: str) -> list[Reservation]:
        return [r for r in self._store.values() if r.user_id == user_id]

    def list_by_email(self, email: str) -> list[Reservation]:
        return [r for r in self._store.values() if r.customer_email.lower() == email.lower()]

    def list_all(self) -> list[Reservation]:
        return list(self._store.values())

    def save(self, reservation: Reservation) -> None:
        self._store[reservation.id] = reservation

    def count(self) -> int:
        return len(self._store)


class FakeUnitOfWork(UnitOfWork):
    """Atomic in the way the tests need.

    ``conflicts`` makes the next N commits raise ConcurrencyError, as a
    database would on a serialization failure.
    """

    def __init__(
        self,
        catalog: FakeCatalogRepository | None = None,
        discounts: FakeDiscountRepository | None = None,
        orders: FakeOrderRepository | None = None,
        reservations: FakeReservationRepository | None = None,
        conflicts: int = 0,
    ) -> None:
        self.catalog = catalog or FakeCatalogRepository()
        self.discounts = discounts or FakeDiscountRepository()
        self.orders = orders or FakeOrderRepository()
        self.reservations = reservations or FakeReservationRepository()
        self.conflicts = conflicts
        self.commits = 0
        self.rollbacks = 0
        self._snapshot = None
        self._committed = False

    def __enter__(self) -> FakeUnitOfWork:
        self._snapshot = (
            copy.deepcopy(self.orders._store),
            copy.deepcopy(self.reservations._store),
            list(self.discounts._usages),
        )
        self._committed = False
        return self

    def commit(self) -> None:
        if self.conflicts > 0:
            self.conflicts -= 1
            raise ConcurrencyError("could not serialize access")
        self._committed = True
        self.commits += 1

    def rollback(self) -> None:
        if self._snapshot is not None and not self._committed:
            (
                self.orders._store,
                self.reservations._store,
                self.discounts._usages,
            ) = self._snapshot
            self.rollbacks += 1
        self._snapshot = None
