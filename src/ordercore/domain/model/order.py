"""Order aggregate.

The Order is an aggregate root that owns its line items.  It is created once
per checkout and afterwards only moves through status transitions driven by
the payment webhook or an admin.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ordercore.domain.exceptions import IntegrityError, ValidationError
from ordercore.domain.model.catalog import ItemRef
from ordercore.domain.model.identity import Authenticated, Guest, Identity
from ordercore.domain.model.value_objects import ContactInfo, Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class OrderLineItem:
    """One priced cart line.

    ``price_at_purchase`` is the catalog price read inside the checkout
    transaction and never changes afterwards.  ``item_ref`` becomes None
    once the catalog row it pointed at is deleted.  The variant fields are
    stored as the client sent them and never priced.
    """

    item_ref: ItemRef | None
    quantity: Quantity
    price_at_purchase: Money
    item_name: str = ""
    id: int | None = None
    variant_id: str | None = None
    combination_id: str | None = None
    variant_metadata: dict[str, Any] | None = None

    @property
    def line_total(self) -> Money:
        return self.price_at_purchase * self.quantity.value


@dataclass
class Order:
    """Aggregate root for checkouts.

    Use ``Order.place()`` for new orders; it enforces every invariant.  The
    plain constructor is for repositories rehydrating stored rows.
    """

    id: int | None
    user_id: str | None
    guest_session_id: str | None
    is_guest: bool
    customer_email: str
    customer_name: str
    shipping_address: dict[str, Any]
    items: list[OrderLineItem]
    subtotal: Money
    discount_amount: Money
    order_total: Money
    discount_code_id: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        identity: Identity,
        contact: ContactInfo,
        shipping_address: dict[str, Any],
        items: list[OrderLineItem],
        subtotal: Money,
        discount_amount: Money,
        discount_code_id: str | None = None,
    ) -> Order:
        """Create a new pending order from an already-priced cart."""
        contact = contact.normalized()
        if not contact.email:
            raise ValidationError("customer_email is required")
        if not contact.name:
            raise ValidationError("customer_name is required")
        if not shipping_address:
            raise ValidationError("shipping_address is required")
        if not items:
            raise ValidationError("items array cannot be empty")

        user_id, guest_session_id, is_guest = _owner_fields(identity)

        computed = Money.zero(subtotal.currency)
        for item in items:
            computed = computed + item.line_total
        if computed != subtotal:
            raise IntegrityError(
                f"Subtotal {subtotal} does not match line items ({computed})"
            )

        order = Order(
            id=None,
            user_id=user_id,
            guest_session_id=guest_session_id,
            is_guest=is_guest,
            customer_email=contact.email,
            customer_name=contact.name,
            shipping_address=dict(shipping_address),
            items=list(items),
            subtotal=subtotal,
            discount_amount=discount_amount,
            order_total=subtotal.subtract_floor_zero(discount_amount),
            discount_code_id=discount_code_id,
        )
        order.check_ownership_invariant()
        return order

    # --- State transitions ----------------------------------------------------

    def transition_to(self, new_status: OrderStatus) -> None:
        allowed = ORDER_TRANSITIONS[self.status]
        if new_status not in allowed:
            raise ValidationError(
                f"Cannot move order from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        self.updated_at = datetime.now(timezone.utc)

    def mark_paid(self) -> None:
        """Payment succeeded: pending -> processing."""
        self.transition_to(OrderStatus.PROCESSING)

    def mark_payment_failed(self) -> None:
        self.transition_to(OrderStatus.FAILED)

    # --- Invariants -----------------------------------------------------------

    def check_ownership_invariant(self) -> None:
        """Exactly one of user_id / guest_session_id, with is_guest agreeing."""
        if self.user_id is not None and self.guest_session_id is not None:
            raise IntegrityError("Order cannot belong to both a user and a guest session")
        if self.user_id is None and self.guest_session_id is None:
            raise IntegrityError("Order must belong to a user or a guest session")
        if self.is_guest != (self.guest_session_id is not None):
            raise IntegrityError("is_guest flag disagrees with the order owner")

    @property
    def is_terminal(self) -> bool:
        return not ORDER_TRANSITIONS[self.status]


def _owner_fields(identity: Identity) -> tuple[str | None, str | None, bool]:
    if isinstance(identity, Authenticated):
        return identity.user_id, None, False
    if isinstance(identity, Guest):
        return None, identity.session_id, True
    raise IntegrityError(
        "Checkout requires a signed-in user or a guest session id"
    )
