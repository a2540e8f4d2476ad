"""Data Transfer Objects: plain containers that cross layer boundaries.

Inputs mirror what a storefront client submits; outputs are what callers
and downstream collaborators get back.  Money leaves this layer as
two-decimal strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ordercore.domain.model.catalog import ItemRef, item_ref_from_ids
from ordercore.domain.model.order import Order
from ordercore.domain.model.reservation import Reservation
from ordercore.domain.model.value_objects import Money
from ordercore.domain.service.pricing_service import CartLine


@dataclass(frozen=True)
class CartItemSpec:
    """Input: one cart row as the client sends it.

    Exactly one of ``menu_item_id`` / ``product_id`` must be set.
    ``expected_price`` is what the client displayed; it is never charged.
    The variant fields are kept on the order line as sent; blank ids count
    as missing.
    """

    quantity: int
    menu_item_id: str | None = None
    product_id: str | None = None
    expected_price: str | None = None
    variant_id: str | None = None
    combination_id: str | None = None
    variant_metadata: dict[str, Any] | None = None

    def to_cart_line(self, currency: str = "USD") -> CartLine:
        ref: ItemRef = item_ref_from_ids(self.menu_item_id, self.product_id)
        expected = (
            Money.of(self.expected_price, currency)
            if self.expected_price not in (None, "")
            else None
        )
        return CartLine(
            item_ref=ref,
            quantity=self.quantity,
            expected_price=expected,
            variant_id=_blank_to_none(self.variant_id),
            combination_id=_blank_to_none(self.combination_id),
            variant_metadata=self.variant_metadata,
        )


@dataclass(frozen=True)
class CheckoutResult:
    """Output of a successful checkout, also handed to post-commit listeners."""

    order_id: int
    customer_email: str
    order_total: str


@dataclass(frozen=True)
class ReservationCreated:
    reservation_id: int
    customer_email: str
    reservation_date: str
    reservation_time: str


@dataclass(frozen=True)
class OrderLineItemDTO:
    item_kind: str | None
    item_id: str | None
    item_name: str
    quantity: int
    price_at_purchase: str
    line_total: str
    variant_id: str | None = None
    combination_id: str | None = None
    variant_metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class OrderDTO:
    id: int
    status: str
    is_guest: bool
    customer_email: str
    customer_name: str
    shipping_address: dict[str, Any]
    subtotal: str
    discount_amount: str
    order_total: str
    created_at: str
    items: list[OrderLineItemDTO] = field(default_factory=list)

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            status=order.status.value,
            is_guest=order.is_guest,
            customer_email=order.customer_email,
            customer_name=order.customer_name,
            shipping_address=dict(order.shipping_address),
            subtotal=_amount(order.subtotal),
            discount_amount=_amount(order.discount_amount),
            order_total=_amount(order.order_total),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            items=[
                OrderLineItemDTO(
                    item_kind=item.item_ref.kind.value if item.item_ref else None,
                    item_id=item.item_ref.id if item.item_ref else None,
                    item_name=item.item_name,
                    quantity=item.quantity.value,
                    price_at_purchase=_amount(item.price_at_purchase),
                    line_total=_amount(item.line_total),
                    variant_id=item.variant_id,
                    combination_id=item.combination_id,
                    variant_metadata=item.variant_metadata,
                )
                for item in order.items
            ],
        )


@dataclass(frozen=True)
class ReservationDTO:
    id: int
    status: str
    customer_name: str
    customer_email: str
    customer_phone: str
    reservation_date: str
    reservation_time: str
    party_size: int
    special_requests: str | None
    table_number: str | None

    @staticmethod
    def from_reservation(reservation: Reservation) -> ReservationDTO:
        return ReservationDTO(
            id=reservation.id,  # type: ignore[arg-type]
            status=reservation.status.value,
            customer_name=reservation.customer_name,
            customer_email=reservation.customer_email,
            customer_phone=reservation.customer_phone,
            reservation_date=reservation.reservation_date.isoformat(),
            reservation_time=reservation.reservation_time.strftime("%H:%M"),
            party_size=reservation.party_size,
            special_requests=reservation.special_requests,
            table_number=reservation.table_number,
        )


def _amount(money: Money) -> str:
    return f"{money.amount:.2f}"


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()
