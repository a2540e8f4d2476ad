"""Application service: order status changes.

Customers never edit an order after checkout.  Staff move it through the
lifecycle, and the payment webhook reports the outcome of the charge.
Status lives on the header row, which is what change notifications watch.
"""

from __future__ import annotations

import logging
from typing import Callable

from ordercore.application.transaction import DEFAULT_MAX_ATTEMPTS, run_in_transaction
from ordercore.domain.exceptions import NotFoundError, ValidationError
from ordercore.domain.model.identity import Identity
from ordercore.domain.model.order import OrderStatus
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.domain.service.access_policy import AccessPolicy

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        policy: AccessPolicy | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._policy = policy or AccessPolicy()
        self._max_attempts = max_attempts

    def handle(self, actor: Identity, order_id: int, new_status: str | OrderStatus) -> str:
        status = _parse_status(new_status)

        def write(uow: UnitOfWork) -> str:
            order = self._policy.require_order_visible(
                actor, uow.orders.get_by_id(order_id), order_id
            )
            self._policy.require_order_status_change(actor, order)
            old = order.status
            order.transition_to(status)
            uow.orders.update_status(order)
            logger.info("Order #%s status %s -> %s", order_id, old.value, status.value)
            return order.status.value

        return run_in_transaction(self._uow_factory, write, self._max_attempts)


class RecordPaymentResultHandler:
    """Called by the payment webhook, which runs with service credentials."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._uow_factory = uow_factory
        self._max_attempts = max_attempts

    def handle(self, order_id: int, succeeded: bool) -> str:
        def write(uow: UnitOfWork) -> str:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order #{order_id} not found")
            if succeeded:
                order.mark_paid()
            else:
                order.mark_payment_failed()
            uow.orders.update_status(order)
            return order.status.value

        status = run_in_transaction(self._uow_factory, write, self._max_attempts)
        logger.info("Payment for order #%s %s", order_id, "succeeded" if succeeded else "failed")
        return status


def _parse_status(value: str | OrderStatus) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown order status: {value!r}") from exc
