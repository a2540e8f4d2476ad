"""Application service: order queries.

Guests read their orders by passing the guest session id they checked out
with.  Without it they get nothing back.
"""

from __future__ import annotations

from typing import Callable

from ordercore.application.dto import OrderDTO
from ordercore.domain.model.identity import Authenticated, Guest, Identity, is_admin
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.access_policy import AccessPolicy


class ShowOrderHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccessPolicy | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._policy = policy or AccessPolicy()

    def handle(
        self, actor: Identity, order_id: int, guest_session_id: str | None = None
    ) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
            order = self._policy.require_order_visible(
                actor, order, order_id, guest_session_id
            )
            return OrderDTO.from_order(order)


class ListOrdersHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccessPolicy | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._policy = policy or AccessPolicy()

    def handle(
        self, actor: Identity, guest_session_id: str | None = None
    ) -> list[OrderDTO]:
        with self._uow_factory() as uow:
            if is_admin(actor):
                candidates = uow.orders.list_all()
            elif isinstance(actor, Authenticated):
                candidates = uow.orders.list_by_user(actor.user_id)
            elif isinstance(actor, Guest) and guest_session_id:
                candidates = uow.orders.list_by_guest_session(guest_session_id)
            else:
                candidates = []

            # the repository query narrows, the policy decides
            visible = self._policy.visible_orders(actor, candidates, guest_session_id)
            return [OrderDTO.from_order(o) for o in visible]
