"""Utility helpers for working with the SQLAlchemy session.

SQLite places a write lock on the database for the duration of a transaction,
which can surface as ``database is locked`` when two requests write at roughly
the same time. :func:`safe_commit` retries the commit with exponential backoff
so short lived locks are retried transparently. :func:`store_transaction`
wraps a unit of work so that any database failure is rolled back, logged and
re-raised as a :class:`~hebrewduo_app.core.error_handlers.StoreError`.
"""

from __future__ import annotations

import time
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.session import Session

from ....core.error_handlers import StoreError

LOCKED_MESSAGES = {"database is locked", "database is busy"}


def _is_lock_error(error: OperationalError) -> bool:
    """Return ``True`` if the OperationalError was caused by a lock."""

    message = str(error).lower()
    return any(token in message for token in LOCKED_MESSAGES)


def safe_commit(
    session: Session,
    retries: int = 5,
    initial_delay: float = 0.1,
) -> None:
    """Commit the current transaction, retrying when SQLite is locked.

    Args:
        session: The SQLAlchemy session to commit.
        retries: Maximum number of attempts before the error is re-raised.
        initial_delay: The delay (in seconds) before the first retry. The
            delay is doubled after every attempt.

    Raises:
        OperationalError: Re-raised if the session cannot be committed after
            the configured number of retries or if the error is unrelated to
            SQLite locking.
    """

    delay = initial_delay
    for attempt in range(retries):
        try:
            session.commit()
            return
        except OperationalError as exc:  # pragma: no cover - retriable path
            session.rollback()
            if attempt == retries - 1 or not _is_lock_error(exc):
                raise

            time.sleep(delay)
            delay *= 2


@contextmanager
def store_transaction(session: Session, action: str):
    """Run a unit of work and commit it, mapping database errors to ``StoreError``.

    Nothing inside the block is persisted when an error is raised.
    """

    try:
        yield session
        safe_commit(session)
    except SQLAlchemyError as exc:
        session.rollback()
        current_app.logger.error("Store failure during %s: %s", action, exc, exc_info=True)
        raise StoreError(f"Impossible d'enregistrer ({action}).") from exc
