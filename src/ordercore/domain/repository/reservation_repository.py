"""Abstract repository for the Reservation aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from ordercore.domain.model.reservation import Reservation


class ReservationRepository(ABC):

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        """Stage a new reservation; assigns ``reservation.id``."""

    @abstractmethod
    def get_by_id(self, reservation_id: int) -> Reservation | None:
        """Return a reservation by its ID, or None."""

    @abstractmethod
    def list_active_for_email_on(self, email: str, on: date) -> list[Reservation]:
        """Pending or confirmed bookings for an email (case-insensitive) on one date."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Reservation]:
        """Bookings made by a signed-in user."""

    @abstractmethod
    def list_by_email(self, email: str) -> list[Reservation]:
        """Bookings made under an email address (case-insensitive)."""

    @abstractmethod
    def list_all(self) -> list[Reservation]:
        """Every booking."""

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        """Persist status and admin fields of an existing reservation."""
