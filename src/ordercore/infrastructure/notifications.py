"""Default post-commit listeners.

The real payment-intent and email services are separate deployments; until
they are wired in, these record what would have been sent.
"""

from __future__ import annotations

import logging

from ordercore.application.dto import CheckoutResult, ReservationCreated
from ordercore.application.listeners import OrderPlacedListener, ReservationCreatedListener

logger = logging.getLogger(__name__)


class LoggingOrderConfirmation(OrderPlacedListener):

    def order_placed(self, result: CheckoutResult) -> None:
        logger.info(
            "Order confirmation queued",
            extra={"order_id": result.order_id, "customer_email": result.customer_email},
        )


class LoggingPaymentIntent(OrderPlacedListener):

    def order_placed(self, result: CheckoutResult) -> None:
        logger.info(
            "Payment intent requested",
            extra={"order_id": result.order_id, "amount": result.order_total},
        )


class LoggingReservationAlert(ReservationCreatedListener):

    def reservation_created(self, result: ReservationCreated) -> None:
        logger.info(
            "New reservation for staff review",
            extra={
                "reservation_id": result.reservation_id,
                "reservation_date": result.reservation_date,
                "reservation_time": result.reservation_time,
            },
        )
