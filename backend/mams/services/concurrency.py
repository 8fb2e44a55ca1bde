# Overview: Row locking and retry helpers for balance-changing units of work.

"""
Two requests moving stock on the same asset must not both read the old
balance. Movement services load the asset through lock_for_update(); routes
run the service call and its commit through commit_unit_of_work(), which
rolls back and reruns both when the database reports a lock conflict or a
stale row.
"""

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    # SELECT ... FOR UPDATE; a no-op on SQLite
    return query.with_for_update()


def run_with_retry(unit_of_work, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Call unit_of_work(), rolling back and retrying on RETRYABLE_ERRORS.

    Sleeps backoff_base * 2**n between tries; the last failure propagates.
    """
    for attempt in range(1, attempts + 1):
        try:
            return unit_of_work()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt == attempts:
                raise
            current_app.logger.warning(
                "Concurrency conflict (%s); retry %d of %d",
                type(exc).__name__, attempt, attempts - 1,
            )
            time.sleep(backoff_base * (2 ** (attempt - 1)))


def commit_unit_of_work(operation, *args, **kwargs):
    """Run operation(*args, **kwargs) then commit; a retry reruns both."""
    def _op():
        result = operation(*args, **kwargs)
        db.session.commit()
        return result

    return run_with_retry(_op)
