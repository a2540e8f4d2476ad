"""Post-commit listeners.

Payment intents, confirmation emails and staff alerts live outside this
core.  They are told about new orders and bookings only after the
transaction has committed, and a listener that blows up is logged and
ignored: the order or reservation stands.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from ordercore.application.dto import CheckoutResult, ReservationCreated

logger = logging.getLogger(__name__)


class OrderPlacedListener(ABC):

    @abstractmethod
    def order_placed(self, result: CheckoutResult) -> None:
        """Called once per committed order."""


class ReservationCreatedListener(ABC):

    @abstractmethod
    def reservation_created(self, result: ReservationCreated) -> None:
        """Called once per committed reservation."""


def notify_order_placed(
    listeners: Iterable[OrderPlacedListener], result: CheckoutResult
) -> None:
    for listener in listeners:
        try:
            listener.order_placed(result)
        except Exception:
            logger.exception(
                "%s failed for order #%s; order is kept",
                type(listener).__name__,
                result.order_id,
            )


def notify_reservation_created(
    listeners: Iterable[ReservationCreatedListener], result: ReservationCreated
) -> None:
    for listener in listeners:
        try:
            listener.reservation_created(result)
        except Exception:
            logger.exception(
                "%s failed for reservation #%s; reservation is kept",
                type(listener).__name__,
                result.reservation_id,
            )
