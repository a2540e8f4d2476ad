"""SQLAlchemy unit of work: one session, one transaction.

Database errors leaving the ``with`` block are translated into domain
errors: serialization failures and deadlocks become ConcurrencyError (the
caller retries), constraint violations become IntegrityError.  On SQLite a
SERIALIZABLE unit of work opens with BEGIN IMMEDIATE, so a second writer
waits for the first (or fails as busy) instead of reading a stale snapshot.
"""

from __future__ import annotations

import logging

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session, sessionmaker

from ordercore.domain.exceptions import ConcurrencyError, IntegrityError
from ordercore.domain.repository.unit_of_work import UnitOfWork
from ordercore.infrastructure.persistence.database import SQLITE_BEGIN_MODE
from ordercore.infrastructure.persistence.sql_catalog_repository import SqlCatalogRepository
from ordercore.infrastructure.persistence.sql_discount_repository import SqlDiscountRepository
from ordercore.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from ordercore.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        isolation_level: str | None = None,
        currency: str = "USD",
    ) -> None:
        self._session_factory = session_factory
        self._isolation_level = isolation_level
        self._currency = currency
        self.session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self._session_factory()
        options = self._connection_options()
        if options:
            # must be the first thing the session does to take effect
            try:
                self.session.connection(execution_options=options)
            except sa_exc.DBAPIError as exc:
                self.session.close()
                self.session = None
                translated = _translate(exc)
                if translated is not None:
                    raise translated from exc
                raise
        self.catalog = SqlCatalogRepository(self.session, self._currency)
        self.discounts = SqlDiscountRepository(self.session, self._currency)
        self.orders = SqlOrderRepository(self.session, self._currency)
        self.reservations = SqlReservationRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self.session.close()
            self.session = None

        if isinstance(exc, sa_exc.DBAPIError):
            translated = _translate(exc)
            if translated is not None:
                raise translated from exc

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        if self.session is not None:
            self.session.rollback()

    def _connection_options(self) -> dict[str, str]:
        if self._isolation_level is None:
            return {}
        if self.session.get_bind().dialect.name == "sqlite":
            # SQLite is always serializable; what matters is taking the
            # write lock before the first read, not after it
            if self._isolation_level.upper() == "SERIALIZABLE":
                return {SQLITE_BEGIN_MODE: "IMMEDIATE"}
            return {}
        return {"isolation_level": self._isolation_level}


def _translate(error: sa_exc.DBAPIError) -> Exception | None:
    if _is_retryable(error):
        logger.warning("Database aborted the transaction: %s", error.orig)
        return ConcurrencyError("The database was busy; please try again")
    if isinstance(error, sa_exc.IntegrityError):
        return IntegrityError(f"Write rejected by a database constraint: {error.orig}")
    return None


def _is_retryable(error: sa_exc.DBAPIError) -> bool:
    orig = error.orig
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in RETRYABLE_SQLSTATES:
        return True
    return isinstance(error, sa_exc.OperationalError) and "database is locked" in str(orig)
