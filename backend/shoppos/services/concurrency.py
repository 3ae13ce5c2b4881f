# Overview: Unit of work, row locking and retry helpers for database writes.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import AppError, ConflictError, StorageError
from ..extensions import db

# Driver messages for a lock wait that ran out (SQLite busy timeout, PostgreSQL lock_timeout)
_LOCK_TIMEOUT_MARKERS = ("database is locked", "lock timeout")


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; UnitOfWork takes the database
    write lock up front with BEGIN IMMEDIATE instead.
    """
    return query.with_for_update()


def _is_lock_timeout(exc: OperationalError) -> bool:
    message = str(exc.orig).lower()
    return any(marker in message for marker in _LOCK_TIMEOUT_MARKERS)


class UnitOfWork:
    """
    One all-or-nothing group of reads and writes on the shared session.

    Used as a context manager: the block either ends with commit() or every
    staged change is rolled back on the way out, whatever the exception.
    Store operations receive the instance explicitly and call check_deadline()
    so a stuck transaction is abandoned instead of holding its locks.

    With a timeout, lock waits are bounded by the time left as well: SQLite
    gets a busy_timeout for the duration of the unit of work, PostgreSQL a
    transaction-local lock_timeout.
    """

    def __init__(self, *, timeout: float | None = None, label: str = "unit of work"):
        self.session = db.session
        self.timeout = timeout
        self.label = label
        self.committed = False
        self._deadline: float | None = None
        self._saved_busy_timeout: int | None = None
        self._raw_connection = None

    def __enter__(self) -> "UnitOfWork":
        if self.timeout is not None:
            self._deadline = time.monotonic() + self.timeout
        dialect = self.session.get_bind().dialect.name
        try:
            self._bound_lock_wait(dialect)
            if dialect == "sqlite":
                self.session.execute(text("BEGIN IMMEDIATE"))
        except SQLAlchemyError as exc:
            self._restore_lock_wait(raise_errors=False)
            self.session.rollback()
            raise self.translate_error(exc) from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None or not self.committed:
            try:
                # An error already leaving the block takes precedence over a failed restore
                self._restore_lock_wait(raise_errors=exc_type is None)
            finally:
                self.session.rollback()
        return False

    def remaining(self) -> float | None:
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def _bound_lock_wait(self, dialect: str) -> None:
        remaining = self.remaining()
        if remaining is None:
            return
        wait_ms = max(int(remaining * 1000), 1)
        if dialect == "sqlite":
            # Set on the driver connection so it can be put back whatever state
            # the session transaction ends up in
            self._raw_connection = self.session.connection().connection.driver_connection
            self._saved_busy_timeout = self._raw_connection.execute("PRAGMA busy_timeout").fetchone()[0]
            self._raw_connection.execute(f"PRAGMA busy_timeout = {wait_ms}")
        elif dialect == "postgresql":
            self.session.execute(text(f"SET LOCAL lock_timeout = {wait_ms}"))

    def _restore_lock_wait(self, *, raise_errors: bool) -> None:
        # Runs before the transaction ends, while the session still holds the
        # connection whose busy_timeout was changed
        if self._saved_busy_timeout is None:
            return
        saved, self._saved_busy_timeout = self._saved_busy_timeout, None
        raw, self._raw_connection = self._raw_connection, None
        try:
            raw.execute(f"PRAGMA busy_timeout = {int(saved)}")
        except self.session.get_bind().dialect.loaded_dbapi.Error:
            if raise_errors:
                raise

    def translate_error(self, exc: SQLAlchemyError) -> AppError:
        """
        Map a store exception to the error callers see.

        CHECK violations and stale versions mean another writer got there
        first; everything else is a storage failure with a generic message.
        """
        if isinstance(exc, (IntegrityError, StaleDataError)):
            return ConflictError(
                f"{self.label.capitalize()} conflicted with a concurrent change, please retry"
            )
        if isinstance(exc, OperationalError) and _is_lock_timeout(exc):
            return StorageError(f"{self.label.capitalize()} timed out")
        return StorageError("Storage failure")

    def check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise StorageError(f"{self.label.capitalize()} timed out")

    def flush(self) -> None:
        self.check_deadline()
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise self.translate_error(exc) from exc

    def commit(self) -> None:
        self.check_deadline()
        self._restore_lock_wait(raise_errors=True)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self.translate_error(exc) from exc
        self.committed = True


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts).
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
