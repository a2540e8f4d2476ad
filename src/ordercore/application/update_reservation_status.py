"""Application service: reservation status changes.

Owners may cancel a pending or confirmed booking.  Staff may move any
booking that is not yet finished to any status and attach notes or a
table number.  Finished bookings never change.
"""

from __future__ import annotations

import logging
from typing import Callable

from ordercore.application.dto import ReservationDTO
from ordercore.application.transaction import DEFAULT_MAX_ATTEMPTS, run_in_transaction
from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.identity import Identity, is_admin
from ordercore.domain.model.reservation import ReservationStatus
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.access_policy import AccessPolicy

logger = logging.getLogger(__name__)


class UpdateReservationStatusHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccessPolicy | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._policy = policy or AccessPolicy()
        self._max_attempts = max_attempts

    def handle(
        self,
        actor: Identity,
        reservation_id: int,
        new_status: str | ReservationStatus,
        admin_notes: str | None = None,
        table_number: str | None = None,
    ) -> ReservationDTO:
        status = _parse_status(new_status)
        if (admin_notes is not None or table_number is not None) and not is_admin(actor):
            raise ValidationError("Only staff can set notes or a table number")

        def write(uow: UnitOfWork) -> ReservationDTO:
            reservation = self._policy.require_reservation_visible(
                actor, uow.reservations.get_by_id(reservation_id), reservation_id
            )
            self._policy.require_reservation_transition(actor, reservation, status)

            if status is ReservationStatus.CANCELLED and not is_admin(actor):
                reservation.cancel()
            else:
                if not reservation.follows_normal_flow(status):
                    logger.info(
                        "Staff override on reservation #%s: %s -> %s",
                        reservation_id,
                        reservation.status.value,
                        status.value,
                    )
                reservation.transition_to(status)

            if admin_notes is not None:
                reservation.admin_notes = admin_notes.strip() or None
            if table_number is not None:
                reservation.table_number = table_number.strip() or None

            uow.reservations.save(reservation)
            return ReservationDTO.from_reservation(reservation)

        return run_in_transaction(self._uow_factory, write, self._max_attempts)


def _parse_status(value: str | ReservationStatus) -> ReservationStatus:
    if isinstance(value, ReservationStatus):
        return value
    try:
        return ReservationStatus((value or "").strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown reservation status: {value!r}") from exc
