"""Run a unit of work, retrying when the database aborts it.

Checkout and booking are safe to retry: a rolled-back transaction leaves
nothing behind, so the whole block is simply executed again.  Only
ConcurrencyError (serialization failure, deadlock, busy database) is
retried; every other error goes straight back to the caller.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from ordercore.domain.exceptions import ConcurrencyError
from ordercore.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3


def run_in_transaction(
    uow_factory: Callable[[], UnitOfWork],
    work: Callable[[UnitOfWork], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> T:
    """Call ``work(uow)`` inside a fresh unit of work and commit.

    ``work`` must not commit itself.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            with uow_factory() as uow:
                result = work(uow)
                uow.commit()
                return result
        except ConcurrencyError:
            if attempt >= max_attempts:
                logger.error("Transaction aborted %d times, giving up", attempt)
                raise
            logger.warning(
                "Transaction aborted by the database (attempt %d/%d), retrying",
                attempt,
                max_attempts,
            )
            attempt += 1
