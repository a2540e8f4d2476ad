"""Application service: reservation queries.

Signed-in customers see the bookings tied to their account.  Anyone else
must name the email the booking was made under and only gets those rows.
"""

from __future__ import annotations

from typing import Callable

from ordercore.application.dto import ReservationDTO
from ordercore.domain.model.identity import Authenticated, Identity, is_admin
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.access_policy import AccessPolicy


class ListReservationsHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccessPolicy | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._policy = policy or AccessPolicy()

    def handle(self, actor: Identity, email: str | None = None) -> list[ReservationDTO]:
        with self._uow_factory() as uow:
            if is_admin(actor):
                candidates = uow.reservations.list_all()
            elif isinstance(actor, Authenticated):
                candidates = uow.reservations.list_by_user(actor.user_id)
            elif email and email.strip():
                candidates = uow.reservations.list_by_email(email.strip())
            else:
                candidates = []

            visible = self._policy.visible_reservations(actor, candidates, email)
            visible.sort(key=lambda r: (r.reservation_date, r.reservation_time))
            return [ReservationDTO.from_reservation(r) for r in visible]


class ShowReservationHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccessPolicy | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._policy = policy or AccessPolicy()

    def handle(
        self, actor: Identity, reservation_id: int, email: str | None = None
    ) -> ReservationDTO:
        with self._uow_factory() as uow:
            reservation = self._policy.require_reservation_visible(
                actor, uow.reservations.get_by_id(reservation_id), reservation_id, email
            )
            return ReservationDTO.from_reservation(reservation)
