"""Engine and session factory construction.

SQLite needs help to be transactional.  The pysqlite driver only opens a
transaction right before the first INSERT/UPDATE/DELETE, so SELECTs issued
earlier in a unit of work would read outside it.  Driver-level transaction
handling is switched off and SQLAlchemy emits BEGIN itself, as in the
SQLAlchemy pysqlite documentation.  A connection carrying the
``SQLITE_BEGIN_MODE`` execution option begins with that mode instead, e.g.
``BEGIN IMMEDIATE`` to take the write lock before the first read.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ordercore.infrastructure.persistence.tables import Base

logger = logging.getLogger(__name__)

SQLITE_BEGIN_MODE = "sqlite_begin_mode"

DEFAULT_SQLITE_LOCK_TIMEOUT = 5.0


def create_engine_from_url(
    database_url: str,
    echo: bool = False,
    lock_timeout: float = DEFAULT_SQLITE_LOCK_TIMEOUT,
) -> Engine:
    """Build an engine; in-memory SQLite shares one connection across sessions.

    ``lock_timeout`` is how long a SQLite connection waits for another
    writer before failing with "database is locked".
    """
    logger.info("Initializing database connection")

    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False, "timeout": lock_timeout}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, **kwargs)
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_transaction)
        return engine

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    # objects stay readable after commit; each unit of work opens a new session
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    logger.info("Creating database tables")
    Base.metadata.create_all(bind=engine)


def _configure_sqlite_connection(dbapi_connection, connection_record) -> None:
    # no implicit BEGIN from the driver; _begin_sqlite_transaction owns it
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(conn: Connection) -> None:
    mode = conn.get_execution_options().get(SQLITE_BEGIN_MODE, "DEFERRED")
    conn.exec_driver_sql(f"BEGIN {mode}")
