import json
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row

from invoice_scan.database.connection import get_connection
from invoice_scan.database.transaction import (
    BaseTransaction,
    PostgresTransaction,
    begin_postgres_transaction,
)
from invoice_scan.invoices.exceptions import (
    InvoiceConflictError,
    InvoiceNotFoundError,
    PersistenceError,
)
from invoice_scan.invoices.models import (
    Invoice,
    InvoiceStatus,
    PaginatedResult,
    PaginationParams,
)
from invoice_scan.invoices.repository import BaseInvoiceRepository, InvoiceMutation

_SELECT_COLUMNS = """
    SELECT id, status, image_path, extracted_data, error_message,
           created_at, updated_at
    FROM invoices
"""


@contextmanager
def _connection(
    tx: BaseTransaction | None,
) -> Generator[tuple[psycopg.Connection[Any], bool], None, None]:
    """Yield (connection, owned). Owned connections must be committed by the caller."""
    if tx is None:
        with get_connection() as conn:
            yield conn, True
        return
    if not isinstance(tx, PostgresTransaction):
        raise ValueError(f"Unsupported transaction type: {type(tx).__name__}")
    yield tx.connection, False


def _row_to_invoice(row: dict[str, Any]) -> Invoice:
    extracted = row["extracted_data"]
    return Invoice(
        id=row["id"],
        status=InvoiceStatus(row["status"]),
        image_path=row["image_path"],
        extracted_data=json.dumps(extracted) if extracted is not None else None,
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresInvoiceRepository(BaseInvoiceRepository):
    """Database operations for the invoices table."""

    def begin(self) -> PostgresTransaction:
        return begin_postgres_transaction()

    def create(self, invoice: Invoice, tx: BaseTransaction | None = None) -> None:
        try:
            with _connection(tx) as (conn, owned):
                conn.execute(
                    """
                    INSERT INTO invoices
                    (id, status, image_path, extracted_data, error_message,
                     created_at, updated_at)
                    VALUES (%s, %s, %s, %s::jsonb, %s, %s, %s)
                    """,
                    (
                        invoice.id,
                        invoice.status.value,
                        invoice.image_path,
                        invoice.extracted_data,
                        invoice.error_message,
                        invoice.created_at,
                        invoice.updated_at,
                    ),
                )
                if owned:
                    conn.commit()
        except psycopg.errors.UniqueViolation as exc:
            raise InvoiceConflictError(f"Invoice {invoice.id} already exists") from exc
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to create invoice {invoice.id}: {exc}") from exc

    def get_by_id(self, invoice_id: str, tx: BaseTransaction | None = None) -> Invoice:
        try:
            with _connection(tx) as (conn, _owned):
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(_SELECT_COLUMNS + " WHERE id = %s", (invoice_id,))
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to load invoice {invoice_id}: {exc}") from exc

        if row is None:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
        return _row_to_invoice(row)

    def update(
        self,
        invoice: Invoice,
        mutate: InvoiceMutation,
        tx: BaseTransaction | None = None,
    ) -> None:
        mutate(invoice)
        try:
            with _connection(tx) as (conn, owned):
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE invoices
                        SET status = %s,
                            image_path = %s,
                            extracted_data = %s::jsonb,
                            error_message = %s,
                            updated_at = %s
                        WHERE id = %s
                        """,
                        (
                            invoice.status.value,
                            invoice.image_path,
                            invoice.extracted_data,
                            invoice.error_message,
                            invoice.updated_at,
                            invoice.id,
                        ),
                    )
                    if cur.rowcount == 0:
                        raise InvoiceNotFoundError(f"Invoice {invoice.id} not found")
                if owned:
                    conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to update invoice {invoice.id}: {exc}") from exc

    def delete(self, invoice_id: str, tx: BaseTransaction | None = None) -> None:
        try:
            with _connection(tx) as (conn, owned):
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM invoices WHERE id = %s", (invoice_id,))
                    if cur.rowcount == 0:
                        raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
                if owned:
                    conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to delete invoice {invoice_id}: {exc}") from exc

    def list(self, params: PaginationParams) -> PaginatedResult:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute("SELECT COUNT(*) AS total FROM invoices")
                    count_row = cur.fetchone()
                    cur.execute(
                        _SELECT_COLUMNS
                        + " ORDER BY created_at DESC, id DESC LIMIT %s OFFSET %s",
                        (params.page_size, params.offset),
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise PersistenceError(f"Failed to list invoices: {exc}") from exc

        total = int(count_row["total"]) if count_row is not None else 0
        invoices = [_row_to_invoice(row) for row in rows]
        return PaginatedResult.build(invoices, total, params)
