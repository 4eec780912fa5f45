import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from invoice_scan.config.settings import Settings
from invoice_scan.database.connection import (
    apply_schema,
    close_pool,
    get_connection,
    init_pool,
)
from invoice_scan.database.repositories.invoice_repository import PostgresInvoiceRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "invoice_scan_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a scratch database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def pg_repo(integration_pool: None) -> Generator[PostgresInvoiceRepository, None, None]:
    """Repository over an emptied invoices table."""
    with get_connection() as conn:
        conn.execute("DELETE FROM invoices")
        conn.commit()
    yield PostgresInvoiceRepository()
    with get_connection() as conn:
        conn.execute("DELETE FROM invoices")
        conn.commit()
