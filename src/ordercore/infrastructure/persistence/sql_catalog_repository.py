"""SQLAlchemy implementation of CatalogRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from ordercore.domain.model.catalog import CatalogItem, CurrentItemRef, LegacyItemRef
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.catalog_repository import CatalogRepository
from ordercore.infrastructure.persistence.tables import DishRow, MenuItemRow


class SqlCatalogRepository(CatalogRepository):
    """Reads take a shared row lock where the database supports one.

    That keeps the price read at checkout valid until the order commits.
    SQLite ignores the lock clause.
    """

    def __init__(self, session: Session, currency: str = "USD") -> None:
        self._session = session
        self._currency = currency

    def get_current_item(self, item_id: str) -> CatalogItem | None:
        row = self._session.execute(
            select(MenuItemRow).where(MenuItemRow.id == item_id).with_for_update(read=True)
        ).scalar_one_or_none()
        if row is None:
            return None
        return CatalogItem(
            ref=CurrentItemRef(row.id),
            name=row.name,
            price=self._price(row.price),
            available=bool(row.is_available),
        )

    def get_legacy_item(self, item_id: str) -> CatalogItem | None:
        row = self._session.execute(
            select(DishRow).where(DishRow.id == item_id).with_for_update(read=True)
        ).scalar_one_or_none()
        if row is None:
            return None
        return CatalogItem(
            ref=LegacyItemRef(row.id),
            name=row.name,
            price=self._price(row.price),
            available=bool(row.is_available),
        )

    def _price(self, raw: Decimal | None) -> Money:
        # a negative or missing price makes the item unpurchasable, not a crash
        amount = Decimal(str(raw)) if raw is not None else Decimal("0")
        return Money(max(amount, Decimal("0")), self._currency)
