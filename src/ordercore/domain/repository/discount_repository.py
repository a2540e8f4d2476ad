"""Abstract lookup of discount codes and their per-customer usage."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.discount import DiscountCode
from ordercore.domain.model.value_objects import Money


class DiscountRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> DiscountCode | None:
        """Return the code (already upper-cased by the caller), or None."""

    @abstractmethod
    def has_been_used_by(self, code_id: str, user_id: str) -> bool:
        ...

    @abstractmethod
    def record_usage(
        self,
        code_id: str,
        user_id: str | None,
        order_id: int,
        discount_amount: Money,
        order_total: Money,
    ) -> None:
        """Count one use of the code by this order.

        Must run in the same transaction as the order insert.
        """
