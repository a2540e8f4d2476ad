"""Domain service: row-level access rules for orders and reservations.

Every handler asks this policy before it returns or mutates a row.  The
rules, per actor:

==========================  =======  ===============  ======================  =====
Action                      Public   Owner (signed)   Guest (session match)   Admin
==========================  =======  ===============  ======================  =====
read order / its items      no       user_id match    session filter match    all
place order                 guest    yes              yes                     yes
change order status         no       no               no                      yes
read reservation            email    user_id match    email filter match      all
cancel reservation          no       owner, active    no                      yes
other reservation changes   no       no               no                      yes
==========================  =======  ===============  ======================  =====

Guest identity is never ambient.  A guest who does not pass a matching
``guest_session_id`` (or ``email`` for reservations) as a read filter gets
an empty result, not an error and not everybody else's guest rows.

Rows the actor cannot see raise the same NotFoundError as rows that do not
exist, so callers cannot fish for ids.
"""

from __future__ import annotations

import logging

from ordercore.domain.exceptions import AuthorizationError, NotFoundError
from ordercore.domain.model.identity import Authenticated, Guest, Identity, is_admin
from ordercore.domain.model.order import Order
from ordercore.domain.model.reservation import ACTIVE_STATUSES, Reservation, ReservationStatus

logger = logging.getLogger(__name__)


class AccessPolicy:

    # --- Orders ---------------------------------------------------------------

    def can_read_order(
        self, actor: Identity, order: Order, guest_session_id: str | None = None
    ) -> bool:
        if is_admin(actor):
            return True
        if isinstance(actor, Authenticated):
            return order.user_id == actor.user_id and not order.is_guest
        if isinstance(actor, Guest):
            return (
                bool(guest_session_id)
                and guest_session_id == actor.session_id
                and order.is_guest
                and order.user_id is None
                and order.guest_session_id == guest_session_id
            )
        return False

    def visible_orders(
        self, actor: Identity, orders: list[Order], guest_session_id: str | None = None
    ) -> list[Order]:
        return [o for o in orders if self.can_read_order(actor, o, guest_session_id)]

    def require_order_visible(
        self,
        actor: Identity,
        order: Order | None,
        order_id: int,
        guest_session_id: str | None = None,
    ) -> Order:
        if order is None or not self.can_read_order(actor, order, guest_session_id):
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    def require_order_status_change(self, actor: Identity, order: Order) -> None:
        if not is_admin(actor):
            logger.info("Denied order status change on #%s", order.id)
            raise AuthorizationError("Only staff can change an order's status")

    # --- Reservations ---------------------------------------------------------

    def can_read_reservation(
        self, actor: Identity, reservation: Reservation, email: str | None = None
    ) -> bool:
        if is_admin(actor):
            return True
        if isinstance(actor, Authenticated):
            return reservation.user_id is not None and reservation.user_id == actor.user_id
        # Public and guest callers only ever see bookings under the email they name
        return _same_email(email, reservation.customer_email)

    def visible_reservations(
        self, actor: Identity, reservations: list[Reservation], email: str | None = None
    ) -> list[Reservation]:
        return [r for r in reservations if self.can_read_reservation(actor, r, email)]

    def require_reservation_visible(
        self,
        actor: Identity,
        reservation: Reservation | None,
        reservation_id: int,
        email: str | None = None,
    ) -> Reservation:
        if reservation is None or not self.can_read_reservation(actor, reservation, email):
            raise NotFoundError(f"Reservation #{reservation_id} not found")
        return reservation

    def require_reservation_transition(
        self, actor: Identity, reservation: Reservation, new_status: ReservationStatus
    ) -> None:
        if is_admin(actor):
            return
        is_owner = (
            isinstance(actor, Authenticated)
            and reservation.user_id is not None
            and reservation.user_id == actor.user_id
        )
        if not is_owner:
            logger.info("Denied reservation change on #%s", reservation.id)
            raise AuthorizationError("Sign in to the account that made this booking to change it")
        if new_status is not ReservationStatus.CANCELLED:
            raise AuthorizationError("You can only cancel your own reservation")
        if reservation.status not in ACTIVE_STATUSES:
            raise AuthorizationError(
                f"A {reservation.status.value} reservation can no longer be cancelled"
            )


def _same_email(filter_email: str | None, row_email: str) -> bool:
    if not filter_email or not filter_email.strip():
        return False
    return filter_email.strip().lower() == (row_email or "").strip().lower()
