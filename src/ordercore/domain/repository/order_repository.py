"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ordercore.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Stage a new order with its line items; assigns ``order.id``."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID regardless of who owns it, or None."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Order]:
        """Orders placed by a signed-in user, newest first."""

    @abstractmethod
    def list_by_guest_session(self, guest_session_id: str) -> list[Order]:
        """Guest orders (``is_guest`` and no ``user_id``) for one session, newest first."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Every order, newest first."""

    @abstractmethod
    def update_status(self, order: Order) -> None:
        """Persist the order's current status; nothing else on the header changes."""
