"""Application service: Create Reservation use case.

The duplicate-window check and the insert share one transaction.  Run it
with a unit of work at SERIALIZABLE isolation so two concurrent requests
for the same email cannot both pass the check; the loser is aborted by the
database and retried, at which point it sees the winner's row.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Callable, Sequence

from ordercore.application.dto import ReservationCreated
from ordercore.application.listeners import (
    ReservationCreatedListener,
    notify_reservation_created,
)
from ordercore.application.transaction import DEFAULT_MAX_ATTEMPTS, run_in_transaction
from ordercore.domain.exceptions import ConflictError
from ordercore.domain.model.identity import Authenticated, Identity
from ordercore.domain.model.reservation import DUPLICATE_WINDOW, Reservation
from ordercore.domain.model.value_objects import ContactInfo
from ordercore.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CreateReservationHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        listeners: Sequence[ReservationCreatedListener] = (),
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window: timedelta = DUPLICATE_WINDOW,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._uow_factory = uow_factory
        self._listeners = list(listeners)
        self._max_attempts = max_attempts
        self._window = window
        self._clock = clock

    def handle(
        self,
        identity: Identity,
        contact: ContactInfo,
        reservation_date: date,
        reservation_time: time,
        party_size: int,
        special_requests: str | None = None,
    ) -> ReservationCreated:
        user_id = identity.user_id if isinstance(identity, Authenticated) else None

        # Field, party size and date checks need no storage
        reservation = Reservation.book(
            user_id=user_id,
            contact=contact,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            party_size=party_size,
            now=self._clock(),
            special_requests=special_requests,
        )

        def write(uow: UnitOfWork) -> ReservationCreated:
            existing = uow.reservations.list_active_for_email_on(
                reservation.customer_email, reservation.reservation_date
            )
            if any(reservation.conflicts_with(other, self._window) for other in existing):
                raise ConflictError(
                    "You already have a reservation around this time. "
                    "Please choose a different time."
                )
            # fresh copy per attempt so a retried insert never reuses a stale id
            row = replace(reservation, id=None)
            uow.reservations.add(row)
            return ReservationCreated(
                reservation_id=row.id,  # type: ignore[arg-type]
                customer_email=row.customer_email,
                reservation_date=row.reservation_date.isoformat(),
                reservation_time=row.reservation_time.strftime("%H:%M"),
            )

        result = run_in_transaction(self._uow_factory, write, self._max_attempts)
        logger.info(
            "Reservation #%s created for %s at %s",
            result.reservation_id,
            result.reservation_date,
            result.reservation_time,
        )

        notify_reservation_created(self._listeners, result)
        return result
