from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from invoice_scan.config.settings import Settings

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_pool: ConnectionPool | None = None


def init_pool(settings: Settings) -> None:
    """Initialize the global connection pool from settings."""
    global _pool  # noqa: PLW0603
    conninfo = (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )
    _pool = ConnectionPool(conninfo, min_size=1, max_size=settings.db_pool_max_size)


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


def _require_pool() -> ConnectionPool:
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    return _pool


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    with _require_pool().connection() as conn:
        yield conn


def acquire_connection() -> psycopg.Connection[Any]:
    """Check a connection out of the pool for a long-lived transaction.

    The caller must hand it back with release_connection().
    """
    return _require_pool().getconn()


def release_connection(conn: psycopg.Connection[Any]) -> None:
    """Return a connection obtained from acquire_connection() to the pool."""
    _require_pool().putconn(conn)


def apply_schema(schema_path: Path | None = None) -> None:
    """Create the tables and indexes this service needs, if missing."""
    path = schema_path if schema_path is not None else SCHEMA_PATH
    ddl = path.read_text(encoding="utf-8")
    with get_connection() as conn:
        conn.execute(ddl)
        conn.commit()
