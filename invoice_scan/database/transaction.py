"""Explicit transaction handles.

A transaction is opened by a repository's begin() and passed to repository calls
through their ``tx`` parameter. Calls made with a transaction never commit on
their own; the owner finalizes it with commit(), rollback(), end() or by using it
as a context manager.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType
from typing import Any

import psycopg

from invoice_scan.database.connection import acquire_connection, release_connection
from invoice_scan.invoices.exceptions import PersistenceError
from invoice_scan.logging.logger import Log


class BaseTransaction(ABC):
    """Idempotent finalization shared by every transaction implementation.

    Once committed or rolled back, further commit()/rollback() calls are no-ops.
    """

    def __init__(self) -> None:
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def commit(self) -> None:
        """Commit the transaction. On failure roll back and raise PersistenceError."""
        if self._done:
            return
        try:
            self._commit()
        except Exception as exc:
            Log.error(f"transaction: commit failed, rolling back: {exc}")
            self.rollback()
            raise PersistenceError(f"Transaction commit failed: {exc}") from exc
        self._finish()

    def rollback(self) -> None:
        if self._done:
            return
        try:
            self._rollback()
        finally:
            self._finish()

    def end(self, error: BaseException | None) -> None:
        """Roll back when ``error`` is set, commit otherwise."""
        if error is not None:
            Log.error(f"transaction: found error, rolling back: {error}")
            self.rollback()
            return
        self.commit()

    def __enter__(self) -> "BaseTransaction":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.end(exc)
        return False

    def _finish(self) -> None:
        self._done = True
        self._release()

    @abstractmethod
    def _commit(self) -> None:
        """Make the transaction's writes durable."""

    @abstractmethod
    def _rollback(self) -> None:
        """Discard the transaction's writes."""

    def _release(self) -> None:
        """Free resources held by the transaction. Called once, after finalization."""


class PostgresTransaction(BaseTransaction):
    """Transaction bound to one pooled psycopg connection."""

    def __init__(
        self,
        conn: psycopg.Connection[Any],
        release: Callable[[psycopg.Connection[Any]], None],
    ) -> None:
        super().__init__()
        self._conn = conn
        self._release_conn = release

    @property
    def connection(self) -> psycopg.Connection[Any]:
        if self._done:
            raise RuntimeError("Transaction already finalized")
        return self._conn

    def _commit(self) -> None:
        self._conn.commit()

    def _rollback(self) -> None:
        self._conn.rollback()

    def _release(self) -> None:
        self._release_conn(self._conn)


def begin_postgres_transaction() -> PostgresTransaction:
    """Open a transaction on a connection checked out of the global pool."""
    return PostgresTransaction(acquire_connection(), release_connection)
