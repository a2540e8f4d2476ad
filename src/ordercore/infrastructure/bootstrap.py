"""Composition root: wires concrete implementations to the handlers.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Callable

from sqlalchemy.orm import Session, sessionmaker

from ordercore.application.create_reservation import CreateReservationHandler
from ordercore.application.place_order import PlaceOrderHandler
from ordercore.application.show_order import ListOrdersHandler, ShowOrderHandler
from ordercore.application.show_reservations import (
    ListReservationsHandler,
    ShowReservationHandler,
)
from ordercore.application.update_order_status import (
    RecordPaymentResultHandler,
    UpdateOrderStatusHandler,
)
from ordercore.application.update_reservation_status import UpdateReservationStatusHandler
from ordercore.infrastructure.config import Settings, get_settings
from ordercore.infrastructure.logging_config import setup_logging
from ordercore.infrastructure.notifications import (
    LoggingOrderConfirmation,
    LoggingPaymentIntent,
    LoggingReservationAlert,
)
from ordercore.infrastructure.persistence.database import (
    DEFAULT_SQLITE_LOCK_TIMEOUT,
    create_engine_from_url,
    create_session_factory,
    create_tables,
)
from ordercore.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork



def configure(settings: Settings | None = None) -> Settings:
    """Process startup: install logging from the settings and return them."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)
    return settings


@lru_cache
def session_factory(
    database_url: str, echo: bool = False, lock_timeout: float = DEFAULT_SQLITE_LOCK_TIMEOUT
) -> sessionmaker[Session]:
    engine = create_engine_from_url(database_url, echo=echo, lock_timeout=lock_timeout)
    create_tables(engine)
    return create_session_factory(engine)


def uow_factory(
    settings: Settings | None = None, isolation_level: str | None = None
) -> Callable[[], SqlAlchemyUnitOfWork]:
    settings = settings or get_settings()
    factory = session_factory(
        settings.database_url, settings.database_echo, settings.database_lock_timeout
    )
    return lambda: SqlAlchemyUnitOfWork(
        factory, isolation_level=isolation_level, currency=settings.currency
    )


def place_order_handler(settings: Settings | None = None) -> PlaceOrderHandler:
    settings = settings or get_settings()
    return PlaceOrderHandler(
        uow_factory(settings),
        listeners=[LoggingPaymentIntent(), LoggingOrderConfirmation()],
        max_attempts=settings.max_transaction_retries,
        price_tolerance=settings.price_tolerance,
        currency=settings.currency,
    )


def show_order_handler(settings: Settings | None = None) -> ShowOrderHandler:
    return ShowOrderHandler(uow_factory(settings))


def list_orders_handler(settings: Settings | None = None) -> ListOrdersHandler:
    return ListOrdersHandler(uow_factory(settings))


def update_order_status_handler(settings: Settings | None = None) -> UpdateOrderStatusHandler:
    settings = settings or get_settings()
    return UpdateOrderStatusHandler(
        uow_factory(settings), max_attempts=settings.max_transaction_retries
    )


def record_payment_result_handler(
    settings: Settings | None = None,
) -> RecordPaymentResultHandler:
    settings = settings or get_settings()
    return RecordPaymentResultHandler(
        uow_factory(settings), max_attempts=settings.max_transaction_retries
    )


def create_reservation_handler(settings: Settings | None = None) -> CreateReservationHandler:
    settings = settings or get_settings()
    return CreateReservationHandler(
        uow_factory(settings, isolation_level="SERIALIZABLE"),
        listeners=[LoggingReservationAlert()],
        max_attempts=settings.max_transaction_retries,
        window=timedelta(minutes=settings.reservation_window_minutes),
    )


def list_reservations_handler(settings: Settings | None = None) -> ListReservationsHandler:
    return ListReservationsHandler(uow_factory(settings))


def show_reservation_handler(settings: Settings | None = None) -> ShowReservationHandler:
    return ShowReservationHandler(uow_factory(settings))


def update_reservation_status_handler(
    settings: Settings | None = None,
) -> UpdateReservationStatusHandler:
    settings = settings or get_settings()
    return UpdateReservationStatusHandler(
        uow_factory(settings), max_attempts=settings.max_transaction_retries
    )
