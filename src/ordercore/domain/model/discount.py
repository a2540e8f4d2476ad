"""Discount codes, as consumed by checkout.

Codes are managed elsewhere; checkout only looks them up and computes the
amount.  The amount a client claims is never trusted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.value_objects import Money


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


@dataclass
class DiscountCode:
    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    is_active: bool = True
    min_order_amount: Money | None = None
    max_discount_amount: Money | None = None
    starts_at: datetime | None = None
    expires_at: datetime | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    one_per_customer: bool = False

    def check_applicable(self, subtotal: Money, now: datetime) -> None:
        """Raise ValidationError if the code cannot be used on this cart."""
        if self.expires_at is not None and now > _aware(self.expires_at):
            raise ValidationError("This discount code has expired.")
        if self.starts_at is not None and now < _aware(self.starts_at):
            raise ValidationError("This discount code is not yet active.")
        if self.min_order_amount is not None and subtotal < self.min_order_amount:
            raise ValidationError(
                f"Minimum order amount of {self.min_order_amount} required."
            )
        if self.usage_limit is not None and self.usage_count >= self.usage_limit:
            raise ValidationError("This discount code has reached its usage limit.")

    def check_not_used_before(self, already_used: bool) -> None:
        if self.one_per_customer and already_used:
            raise ValidationError("You have already used this discount code.")

    def amount_for(self, subtotal: Money) -> Money:
        """Discount for a given subtotal, clamped to ``[0, subtotal]``."""
        if self.discount_type is DiscountType.PERCENTAGE:
            amount = subtotal.percentage(self.discount_value)
            if self.max_discount_amount is not None and amount > self.max_discount_amount:
                amount = self.max_discount_amount
        else:
            amount = Money(max(self.discount_value, Decimal("0")), subtotal.currency)
        amount = amount.rounded()
        if amount > subtotal:
            return subtotal
        return amount


def _aware(value: datetime) -> datetime:
    # naive timestamps from the database are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
