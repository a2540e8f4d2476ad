"""Application service: Place Order (checkout) use case.

Prices are recomputed inside the same transaction that writes the order, so
the amount charged is whatever the catalog says at commit time.  The header
and every line item are committed together or not at all.  Payment and
email listeners run only after commit and cannot undo it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Sequence

from ordercore.application.dto import CartItemSpec, CheckoutResult
from ordercore.application.listeners import OrderPlacedListener, notify_order_placed
from ordercore.application.transaction import DEFAULT_MAX_ATTEMPTS, run_in_transaction
from ordercore.domain.exceptions import EmptyCartError, IntegrityError, ValidationError
from ordercore.domain.model.identity import Authenticated, Guest, Identity
from ordercore.domain.model.order import Order
from ordercore.domain.model.value_objects import ContactInfo
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.catalog_resolver import CatalogResolver
from ordercore.domain.service.pricing_service import DEFAULT_PRICE_TOLERANCE, PricingService

logger = logging.getLogger(__name__)


class PlaceOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        listeners: Sequence[OrderPlacedListener] = (),
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        price_tolerance: Decimal = DEFAULT_PRICE_TOLERANCE,
        currency: str = "USD",
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._uow_factory = uow_factory
        self._listeners = list(listeners)
        self._max_attempts = max_attempts
        self._price_tolerance = price_tolerance
        self._currency = currency
        self._clock = clock

    def handle(
        self,
        identity: Identity,
        contact: ContactInfo,
        shipping_address: dict[str, Any] | None,
        items: list[CartItemSpec],
        discount_code: str | None = None,
    ) -> CheckoutResult:
        """Price the cart and persist the order atomically.

        Steps:
        1. Reject malformed requests before touching storage.
        2. In one transaction: resolve live prices, apply the discount,
           insert header + line items, record the discount use, commit.
        3. Tell listeners (best effort).
        """
        contact = contact.normalized()
        self._check_preconditions(identity, contact, shipping_address, items)
        cart_lines = [spec.to_cart_line(self._currency) for spec in items]
        customer_id = identity.user_id if isinstance(identity, Authenticated) else None

        def write(uow: UnitOfWork) -> CheckoutResult:
            pricing = PricingService(
                CatalogResolver(uow.catalog),
                uow.discounts,
                price_tolerance=self._price_tolerance,
                currency=self._currency,
            )
            priced = pricing.price_cart(
                cart_lines, discount_code, now=self._clock(), customer_id=customer_id
            )
            order = Order.place(
                identity=identity,
                contact=contact,
                shipping_address=shipping_address or {},
                items=priced.line_items,
                subtotal=priced.subtotal,
                discount_amount=priced.discount_amount,
                discount_code_id=priced.discount_code_id,
            )
            uow.orders.add(order)
            if priced.discount_code_id is not None:
                uow.discounts.record_usage(
                    priced.discount_code_id,
                    customer_id,
                    order.id,  # type: ignore[arg-type]
                    order.discount_amount,
                    order.order_total,
                )
            return CheckoutResult(
                order_id=order.id,  # type: ignore[arg-type]
                customer_email=order.customer_email,
                order_total=f"{order.order_total.amount:.2f}",
            )

        result = run_in_transaction(self._uow_factory, write, self._max_attempts)
        logger.info(
            "Order #%s placed (%s, total %s)",
            result.order_id,
            "guest" if isinstance(identity, Guest) else "customer",
            result.order_total,
        )

        notify_order_placed(self._listeners, result)
        return result

    @staticmethod
    def _check_preconditions(
        identity: Identity,
        contact: ContactInfo,
        shipping_address: dict[str, Any] | None,
        items: list[CartItemSpec],
    ) -> None:
        if not contact.email:
            raise ValidationError("customer_email is required")
        if not contact.name:
            raise ValidationError("customer_name is required")
        if not shipping_address:
            raise ValidationError("shipping_address is required")
        if not items:
            raise EmptyCartError("Cart is empty")
        if not isinstance(identity, (Authenticated, Guest)):
            raise IntegrityError(
                "Checkout requires a signed-in user or a guest session id"
            )
