"""Domain service: Pricing & Discount Calculator.

Turns a list of (item reference, quantity) pairs into authoritative amounts.
Client-submitted prices are only compared against the catalog for logging;
the catalog price is always the one charged.

Any failing line aborts the whole calculation, so there is never a partially
priced cart to persist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from ordercore.domain.exceptions import EmptyCartError, InvalidLineItem, NotFoundError
from ordercore.domain.model.catalog import ItemRef
from ordercore.domain.model.discount import normalize_code
from ordercore.domain.model.order import OrderLineItem
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.domain.repository.discount_repository import DiscountRepository
from ordercore.domain.service.catalog_resolver import CatalogResolver

logger = logging.getLogger(__name__)

DEFAULT_PRICE_TOLERANCE = Decimal("0.01")


@dataclass(frozen=True)
class CartLine:
    """What the client asked for.  ``expected_price`` is advisory only."""

    item_ref: ItemRef
    quantity: int
    expected_price: Money | None = None
    variant_id: str | None = None
    combination_id: str | None = None
    variant_metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class PricedCart:
    subtotal: Money
    discount_amount: Money
    order_total: Money
    line_items: list[OrderLineItem]
    discount_code_id: str | None = None


class PricingService:

    def __init__(
        self,
        resolver: CatalogResolver,
        discount_repo: DiscountRepository,
        price_tolerance: Decimal = DEFAULT_PRICE_TOLERANCE,
        currency: str = "USD",
    ) -> None:
        self._resolver = resolver
        self._discount_repo = discount_repo
        self._price_tolerance = price_tolerance
        self._currency = currency

    def price_cart(
        self,
        lines: list[CartLine],
        discount_code: str | None = None,
        now: datetime | None = None,
        customer_id: str | None = None,
    ) -> PricedCart:
        """Price every line and apply the discount code, if any.

        ``customer_id`` is the signed-in caller; one-per-customer codes are
        checked against it.  Guests are not tracked.
        """
        if not lines:
            raise EmptyCartError("Cart is empty")

        line_items: list[OrderLineItem] = []
        subtotal = Money.zero(self._currency)

        for position, line in enumerate(lines, start=1):
            if (
                not isinstance(line.quantity, int)
                or isinstance(line.quantity, bool)
                or line.quantity <= 0
            ):
                raise InvalidLineItem(f"Invalid quantity for cart item #{position}")

            item = self._resolver.resolve(line.item_ref)
            price = item.price

            if line.expected_price is not None and price.differs_from(
                line.expected_price, self._price_tolerance
            ):
                logger.warning(
                    "Client price for %s differs from catalog (client=%s, catalog=%s); "
                    "using catalog price",
                    line.item_ref,
                    line.expected_price,
                    price,
                )

            line_item = OrderLineItem(
                item_ref=line.item_ref,
                quantity=Quantity(line.quantity),
                price_at_purchase=price,
                item_name=item.name,
                variant_id=line.variant_id,
                combination_id=line.combination_id,
                variant_metadata=line.variant_metadata,
            )
            line_items.append(line_item)
            subtotal = subtotal + line_item.line_total

        discount_amount = Money.zero(self._currency)
        discount_code_id = None
        if discount_code and discount_code.strip():
            discount_amount, discount_code_id = self._apply_discount(
                discount_code, subtotal, now or datetime.now(timezone.utc), customer_id
            )

        return PricedCart(
            subtotal=subtotal,
            discount_amount=discount_amount,
            order_total=subtotal.subtract_floor_zero(discount_amount),
            line_items=line_items,
            discount_code_id=discount_code_id,
        )

    def _apply_discount(
        self, raw_code: str, subtotal: Money, now: datetime, customer_id: str | None
    ) -> tuple[Money, str]:
        code = self._discount_repo.get_by_code(normalize_code(raw_code))
        if code is None or not code.is_active:
            raise NotFoundError("This discount code does not exist or is not active.")
        code.check_applicable(subtotal, now)
        if code.one_per_customer and customer_id is not None:
            code.check_not_used_before(
                self._discount_repo.has_been_used_by(code.id, customer_id)
            )
        return code.amount_for(subtotal), code.id
