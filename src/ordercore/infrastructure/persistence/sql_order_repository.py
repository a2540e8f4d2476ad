"""SQLAlchemy implementation of OrderRepository."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ordercore.domain.model.catalog import CurrentItemRef, ItemRef, LegacyItemRef
from ordercore.domain.model.order import Order, OrderLineItem, OrderStatus
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.repository.order_repository import OrderRepository
from ordercore.infrastructure.persistence.tables import OrderItemRow, OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session, currency: str = "USD") -> None:
        self._session = session
        self._currency = currency

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        row = self._to_row(order)
        self._session.add(row)
        # flush so the database assigns ids inside the open transaction
        self._session.flush()
        order.id = row.id
        order.items = [
            replace(item, id=item_row.id) for item, item_row in zip(order.items, row.items)
        ]

    def get_by_id(self, order_id: int) -> Order | None:
        row = self._session.execute(
            select(OrderRow).options(selectinload(OrderRow.items)).where(OrderRow.id == order_id)
        ).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def list_by_user(self, user_id: str) -> list[Order]:
        return self._list(OrderRow.user_id == user_id, OrderRow.is_guest.is_(False))

    def list_by_guest_session(self, guest_session_id: str) -> list[Order]:
        return self._list(
            OrderRow.guest_session_id == guest_session_id,
            OrderRow.is_guest.is_(True),
            OrderRow.user_id.is_(None),
        )

    def list_all(self) -> list[Order]:
        return self._list()

    def update_status(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        if row is None:
            raise LookupError(f"Order #{order.id} vanished during update")
        row.status = order.status.value
        row.updated_at = order.updated_at or datetime.now(timezone.utc)
        self._session.flush()

    # --- Queries --------------------------------------------------------------

    def _list(self, *criteria) -> list[Order]:
        stmt = (
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .where(*criteria)
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        )
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        return OrderRow(
            user_id=order.user_id,
            guest_session_id=order.guest_session_id,
            is_guest=order.is_guest,
            customer_email=order.customer_email,
            customer_name=order.customer_name,
            shipping_address=order.shipping_address,
            subtotal=order.subtotal.amount,
            discount_code_id=order.discount_code_id,
            discount_amount=order.discount_amount.amount,
            order_total=order.order_total.amount,
            status=order.status.value,
            created_at=order.created_at,
            items=[
                OrderItemRow(
                    menu_item_id=item.item_ref.id
                    if isinstance(item.item_ref, CurrentItemRef) else None,
                    product_id=item.item_ref.id
                    if isinstance(item.item_ref, LegacyItemRef) else None,
                    item_name=item.item_name,
                    quantity=item.quantity.value,
                    price_at_purchase=item.price_at_purchase.amount,
                    variant_id=item.variant_id,
                    combination_id=item.combination_id,
                    variant_metadata=item.variant_metadata,
                )
                for item in order.items
            ],
        )

    def _to_domain(self, row: OrderRow) -> Order:
        return Order(
            id=row.id,
            user_id=row.user_id,
            guest_session_id=row.guest_session_id,
            is_guest=bool(row.is_guest),
            customer_email=row.customer_email,
            customer_name=row.customer_name,
            shipping_address=dict(row.shipping_address or {}),
            items=[
                OrderLineItem(
                    item_ref=_item_ref(item_row),
                    quantity=Quantity(item_row.quantity),
                    price_at_purchase=self._money(item_row.price_at_purchase),
                    item_name=item_row.item_name or "",
                    id=item_row.id,
                    variant_id=item_row.variant_id,
                    combination_id=item_row.combination_id,
                    variant_metadata=item_row.variant_metadata,
                )
                for item_row in row.items
            ],
            subtotal=self._money(row.subtotal),
            discount_amount=self._money(row.discount_amount),
            order_total=self._money(row.order_total),
            discount_code_id=row.discount_code_id,
            status=OrderStatus(row.status),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _money(self, raw) -> Money:
        return Money(Decimal(str(raw)), self._currency)


def _item_ref(row: OrderItemRow) -> ItemRef | None:
    if row.menu_item_id is not None:
        return CurrentItemRef(row.menu_item_id)
    if row.product_id is not None:
        return LegacyItemRef(row.product_id)
    # catalog row deleted; the price snapshot survives
    return None
