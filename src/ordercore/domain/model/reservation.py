"""Reservation aggregate: a table booking.

Status flow::

    pending -> confirmed | declined | cancelled
    confirmed -> completed | no_show | cancelled

``declined``, ``completed``, ``no_show`` and ``cancelled`` are terminal for
every actor, admins included.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.value_objects import ContactInfo

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20
DUPLICATE_WINDOW = timedelta(minutes=30)


class ReservationStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


RESERVATION_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.DECLINED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.NO_SHOW, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.DECLINED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}

# Statuses that still hold a slot for duplicate detection.
ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})


@dataclass
class Reservation:
    id: int | None
    user_id: str | None
    customer_name: str
    customer_email: str
    customer_phone: str
    reservation_date: date
    reservation_time: time
    party_size: int
    special_requests: str | None = None
    status: ReservationStatus = ReservationStatus.PENDING
    admin_notes: str | None = None
    table_number: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime | None = None

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def book(
        user_id: str | None,
        contact: ContactInfo,
        reservation_date: date,
        reservation_time: time,
        party_size: int,
        now: datetime,
        special_requests: str | None = None,
    ) -> Reservation:
        """Validate a booking request and build a pending reservation.

        Checks run in a fixed order and the first failure wins: contact
        fields, party size, then date/time against ``now``.  The duplicate
        window needs the other bookings, so it is checked by the caller via
        ``conflicts_with``.
        """
        contact = contact.normalized()
        if not contact.name:
            raise ValidationError("customer_name is required")
        if not contact.email:
            raise ValidationError("customer_email is required")
        if not contact.phone:
            raise ValidationError("customer_phone is required")
        if reservation_date is None:
            raise ValidationError("reservation_date is required")
        if reservation_time is None:
            raise ValidationError("reservation_time is required")

        if (
            not isinstance(party_size, int)
            or isinstance(party_size, bool)
            or not MIN_PARTY_SIZE <= party_size <= MAX_PARTY_SIZE
        ):
            raise ValidationError(
                f"party_size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}"
            )

        today = now.date()
        if reservation_date < today:
            raise ValidationError("Cannot make reservations for past dates")
        if reservation_date == today and reservation_time < now.time():
            raise ValidationError("Cannot make reservations for past times")

        notes = special_requests.strip() if special_requests else None
        return Reservation(
            id=None,
            user_id=user_id,
            customer_name=contact.name,
            customer_email=contact.email,
            customer_phone=contact.phone,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            party_size=party_size,
            special_requests=notes or None,
        )

    # --- Queries --------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not RESERVATION_TRANSITIONS[self.status]

    def follows_normal_flow(self, new_status: ReservationStatus) -> bool:
        """False when an admin jumps outside the usual status flow."""
        return new_status in RESERVATION_TRANSITIONS[self.status]

    def conflicts_with(self, other: Reservation, window: timedelta = DUPLICATE_WINDOW) -> bool:
        """Same email, same date, active, and less than ``window`` apart."""
        if not other.is_active:
            return False
        if other.customer_email.lower() != self.customer_email.lower():
            return False
        if other.reservation_date != self.reservation_date:
            return False
        gap = abs(_seconds(self.reservation_time) - _seconds(other.reservation_time))
        return gap < window.total_seconds()

    # --- State transitions ----------------------------------------------------

    def transition_to(self, new_status: ReservationStatus) -> None:
        if self.is_terminal:
            raise ValidationError(
                f"Reservation is {self.status.value} and can no longer change"
            )
        if new_status is self.status:
            raise ValidationError(f"Reservation is already {new_status.value}")
        self.status = new_status
        self.updated_at = datetime.now(timezone.utc)

    def cancel(self) -> None:
        """Owner cancellation, only from pending or confirmed."""
        if self.status not in ACTIVE_STATUSES:
            raise ValidationError(
                f"Cannot cancel a reservation that is {self.status.value}"
            )
        self.transition_to(ReservationStatus.CANCELLED)


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second
