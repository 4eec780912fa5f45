from datetime import datetime, timedelta, timezone

import psycopg
import pytest

from invoice_scan.database.connection import get_connection
from invoice_scan.database.repositories.invoice_repository import PostgresInvoiceRepository
from invoice_scan.invoices.exceptions import (
    InvalidStatusTransitionError,
    InvoiceConflictError,
    InvoiceNotFoundError,
)
from invoice_scan.invoices.models import Invoice, InvoiceStatus, PaginationParams


def _seed(repo: PostgresInvoiceRepository, count: int) -> list[Invoice]:
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    invoices = []
    for i in range(count):
        created = base + timedelta(seconds=i)
        invoice = Invoice(
            id=repo.next_id(),
            image_path=f"./uploads/{i}.jpg",
            created_at=created,
            updated_at=created,
        )
        repo.create(invoice)
        invoices.append(invoice)
    return invoices


@pytest.mark.integration
class TestInvoiceRepositoryCrud:
    def test_create_and_get(self, pg_repo: PostgresInvoiceRepository) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        pg_repo.create(invoice)

        loaded = pg_repo.get_by_id(invoice.id)

        assert loaded.id == invoice.id
        assert loaded.status is InvoiceStatus.PENDING
        assert loaded.extracted_data is None
        assert loaded.created_at == invoice.created_at

    def test_duplicate_id(self, pg_repo: PostgresInvoiceRepository) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        pg_repo.create(invoice)
        with pytest.raises(InvoiceConflictError):
            pg_repo.create(Invoice.new(invoice.id, "./uploads/b.jpg"))

    def test_lifecycle_to_completed(self, pg_repo: PostgresInvoiceRepository) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        pg_repo.create(invoice)

        pg_repo.update(invoice, lambda inv: inv.mark_processing())
        pg_repo.update(invoice, lambda inv: inv.mark_completed('{"confidence": 0.9}'))

        loaded = pg_repo.get_by_id(invoice.id)
        assert loaded.status is InvoiceStatus.COMPLETED
        assert loaded.extracted_data == '{"confidence": 0.9}'

    def test_illegal_transition_writes_nothing(
        self, pg_repo: PostgresInvoiceRepository
    ) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        pg_repo.create(invoice)

        with pytest.raises(InvalidStatusTransitionError):
            pg_repo.update(invoice, lambda inv: inv.mark_failed("boom"))

        assert pg_repo.get_by_id(invoice.id).status is InvoiceStatus.PENDING

    def test_delete_then_not_found(self, pg_repo: PostgresInvoiceRepository) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        pg_repo.create(invoice)

        pg_repo.delete(invoice.id)

        with pytest.raises(InvoiceNotFoundError):
            pg_repo.get_by_id(invoice.id)
        with pytest.raises(InvoiceNotFoundError):
            pg_repo.delete(invoice.id)

    def test_status_constraint_enforced_by_schema(
        self, pg_repo: PostgresInvoiceRepository
    ) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        pg_repo.create(invoice)
        with get_connection() as conn:
            with pytest.raises(psycopg.errors.CheckViolation):
                conn.execute(
                    "UPDATE invoices SET status = 'archived' WHERE id = %s", (invoice.id,)
                )
            conn.rollback()


@pytest.mark.integration
class TestInvoiceRepositoryList:
    def test_twenty_five_records_in_three_pages(
        self, pg_repo: PostgresInvoiceRepository
    ) -> None:
        invoices = _seed(pg_repo, 25)
        newest_first = [inv.id for inv in reversed(invoices)]

        pages = [pg_repo.list(PaginationParams(page=p, page_size=10)) for p in (1, 2, 3)]

        assert all(page.total == 25 and page.total_pages == 3 for page in pages)
        assert [len(page.invoices) for page in pages] == [10, 10, 5]
        listed = [inv.id for page in pages for inv in page.invoices]
        assert listed == newest_first


@pytest.mark.integration
class TestInvoiceRepositoryTransactions:
    def test_commit(self, pg_repo: PostgresInvoiceRepository) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        with pg_repo.begin() as tx:
            pg_repo.create(invoice, tx=tx)
            pg_repo.update(invoice, lambda inv: inv.mark_processing(), tx=tx)

        assert pg_repo.get_by_id(invoice.id).status is InvoiceStatus.PROCESSING

    def test_rollback(self, pg_repo: PostgresInvoiceRepository) -> None:
        invoice = Invoice.new(pg_repo.next_id(), "./uploads/a.jpg")
        tx = pg_repo.begin()
        pg_repo.create(invoice, tx=tx)
        tx.rollback()
        tx.rollback()

        with pytest.raises(InvoiceNotFoundError):
            pg_repo.get_by_id(invoice.id)
