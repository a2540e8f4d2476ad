"""Small immutable values used by orders and reservations.

Each one validates itself on construction, so a Money or Quantity that
exists is already a legal amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from ordercore.domain.exceptions import ValidationError

CENT = Decimal("0.01")
_ZERO = Decimal("0")


@total_ordering
@dataclass(frozen=True, eq=True)
class Money:
    """A non-negative amount in one currency.

    Amounts are Decimal end to end; line totals and discounts are summed
    exactly and only rounded where a percentage produces fractions of a cent.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < _ZERO:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")

    @classmethod
    def of(cls, amount: str | float | int | Decimal, currency: str = "USD") -> Money:
        """Parse user or database input; floats go through str to keep their printed value."""
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc
        if not value.is_finite():
            raise ValidationError(f"Invalid money amount: {amount!r}")
        return cls(value, currency)

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls(Decimal("0.00"), currency)

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._same(other).amount, self.currency)

    def __mul__(self, quantity: int) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError(f"Money can only be multiplied by a whole quantity, not {quantity!r}")
        return Money(self.amount * quantity, self.currency)

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._same(other).amount

    def subtract_floor_zero(self, other: Money) -> Money:
        """``self - other``, or zero when the result would be negative."""
        return Money(max(self.amount - self._same(other).amount, _ZERO), self.currency)

    def percentage(self, percent: Decimal) -> Money:
        return Money(self.amount * percent / Decimal(100), self.currency).rounded()

    def rounded(self) -> Money:
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    def differs_from(self, other: Money, tolerance: Decimal) -> bool:
        return abs(self.amount - self._same(other).amount) > tolerance

    @property
    def is_zero(self) -> bool:
        return self.amount == _ZERO

    def _same(self, other: Money) -> Money:
        if other.currency != self.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")
        return other

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


@dataclass(frozen=True)
class Quantity:
    """How many units of one item a cart line asks for."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True must not pass as a quantity of 1
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(f"Quantity must be an integer, got {self.value!r}")
        if self.value < 1:
            raise ValidationError("Quantity must be positive")


@dataclass(frozen=True)
class ContactInfo:
    """Who to reach about an order or booking. Phone is only needed for bookings."""

    email: str
    name: str
    phone: str | None = None

    def normalized(self) -> ContactInfo:
        return ContactInfo(
            email=(self.email or "").strip(),
            name=(self.name or "").strip(),
            phone=self.phone.strip() if self.phone else self.phone,
        )
