"""Shared plumbing for SQLAlchemy-backed stores.

Idempotent reads are retried with backoff when the database is briefly
unreachable. Writes are never retried here: once a request has written
anything, a transient failure fails the whole request and the transaction is
rolled back by the caller.
"""
from collections.abc import Callable
import logging
import time
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from app.services.errors import StoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS = (OperationalError, InterfaceError)
PENDING_WRITES_KEY = "pending_writes"


class SqlStore:
    """Base class wrapping a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session, read_retries: int = 1, retry_backoff_seconds: float = 0.05):
        self.db = db
        self.read_retries = read_retries
        self.retry_backoff_seconds = retry_backoff_seconds

    @property
    def has_pending_writes(self) -> bool:
        return bool(self.db.info.get(PENDING_WRITES_KEY))

    def _read(self, operation: Callable[[], T], description: str) -> T:
        attempt = 0
        while True:
            try:
                return operation()
            except TRANSIENT_ERRORS as exc:
                # A retry needs a rollback, which would discard earlier writes
                if self.has_pending_writes or attempt >= self.read_retries:
                    logger.error(f"Store read failed ({description}): {exc.__class__.__name__}")
                    raise StoreUnavailable() from exc
                attempt += 1
                logger.warning(f"Store read failed ({description}), retry {attempt}/{self.read_retries}")
                self.db.rollback()
                time.sleep(self.retry_backoff_seconds * (2 ** (attempt - 1)))

    def _write(self, operation: Callable[[], T], description: str) -> T:
        self.db.info[PENDING_WRITES_KEY] = True
        try:
            return operation()
        except TRANSIENT_ERRORS as exc:
            logger.error(f"Store write failed ({description}): {exc.__class__.__name__}")
            raise StoreUnavailable() from exc

    def commit(self) -> None:
        try:
            self.db.commit()
        except DBAPIError as exc:
            self.db.rollback()
            logger.error(f"Store commit failed: {exc.__class__.__name__}")
            raise StoreUnavailable() from exc
        finally:
            self.db.info.pop(PENDING_WRITES_KEY, None)

    def rollback(self) -> None:
        self.db.rollback()
        self.db.info.pop(PENDING_WRITES_KEY, None)
