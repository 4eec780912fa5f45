from datetime import datetime, timedelta, timezone

import pytest

from invoice_scan.database.repositories.memory_invoice_repository import (
    InMemoryInvoiceRepository,
)
from invoice_scan.invoices.exceptions import (
    InvalidStatusTransitionError,
    InvoiceConflictError,
    InvoiceNotFoundError,
)
from invoice_scan.invoices.models import Invoice, InvoiceStatus, PaginationParams


def _seed(repo: InMemoryInvoiceRepository, count: int) -> list[Invoice]:
    """Create invoices with strictly increasing created_at."""
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    invoices = []
    for i in range(count):
        created = base + timedelta(seconds=i)
        invoice = Invoice(
            id=repo.next_id(),
            image_path=f"/uploads/{i}.jpg",
            created_at=created,
            updated_at=created,
        )
        repo.create(invoice)
        invoices.append(invoice)
    return invoices


class TestCreateAndGet:
    def test_get_returns_created_invoice(self, memory_repo: InMemoryInvoiceRepository) -> None:
        invoice = Invoice.new(memory_repo.next_id(), "/uploads/a.jpg")
        memory_repo.create(invoice)

        loaded = memory_repo.get_by_id(invoice.id)

        assert loaded == invoice
        assert loaded is not invoice

    def test_duplicate_id_conflicts(self, memory_repo: InMemoryInvoiceRepository) -> None:
        invoice = Invoice.new("dup", "/uploads/a.jpg")
        memory_repo.create(invoice)
        with pytest.raises(InvoiceConflictError, match="already exists"):
            memory_repo.create(Invoice.new("dup", "/uploads/b.jpg"))

    def test_missing_invoice(self, memory_repo: InMemoryInvoiceRepository) -> None:
        with pytest.raises(InvoiceNotFoundError, match="Invoice nope not found"):
            memory_repo.get_by_id("nope")

    def test_caller_mutation_does_not_leak(self, memory_repo: InMemoryInvoiceRepository) -> None:
        invoice = Invoice.new("a", "/uploads/a.jpg")
        memory_repo.create(invoice)
        invoice.error_message = "changed outside"
        assert memory_repo.get_by_id("a").error_message is None


class TestUpdate:
    def test_applies_mutation(self, memory_repo: InMemoryInvoiceRepository) -> None:
        memory_repo.create(Invoice.new("a", "/uploads/a.jpg"))
        invoice = memory_repo.get_by_id("a")

        memory_repo.update(invoice, lambda inv: inv.mark_processing())

        assert memory_repo.get_by_id("a").status is InvoiceStatus.PROCESSING

    def test_failed_mutation_writes_nothing(self, memory_repo: InMemoryInvoiceRepository) -> None:
        memory_repo.create(Invoice.new("a", "/uploads/a.jpg"))
        invoice = memory_repo.get_by_id("a")

        with pytest.raises(InvalidStatusTransitionError):
            memory_repo.update(invoice, lambda inv: inv.mark_completed("{}"))

        assert memory_repo.get_by_id("a").status is InvoiceStatus.PENDING

    def test_missing_invoice(self, memory_repo: InMemoryInvoiceRepository) -> None:
        with pytest.raises(InvoiceNotFoundError):
            memory_repo.update(Invoice.new("gone", "/x.jpg"), lambda inv: inv.mark_processing())


class TestDelete:
    def test_delete_then_get_is_not_found(self, memory_repo: InMemoryInvoiceRepository) -> None:
        memory_repo.create(Invoice.new("a", "/uploads/a.jpg"))
        memory_repo.delete("a")
        with pytest.raises(InvoiceNotFoundError):
            memory_repo.get_by_id("a")

    def test_delete_missing(self, memory_repo: InMemoryInvoiceRepository) -> None:
        with pytest.raises(InvoiceNotFoundError):
            memory_repo.delete("nope")


class TestList:
    def test_newest_first(self, memory_repo: InMemoryInvoiceRepository) -> None:
        invoices = _seed(memory_repo, 3)
        result = memory_repo.list(PaginationParams())
        assert [inv.id for inv in result.invoices] == [inv.id for inv in reversed(invoices)]

    def test_pages_of_twenty_five(self, memory_repo: InMemoryInvoiceRepository) -> None:
        invoices = _seed(memory_repo, 25)
        newest_first = [inv.id for inv in reversed(invoices)]

        page3 = memory_repo.list(PaginationParams(page=3, page_size=10))

        assert page3.total == 25
        assert page3.total_pages == 3
        assert page3.page == 3
        assert [inv.id for inv in page3.invoices] == newest_first[20:]

    def test_page_past_end_is_empty(self, memory_repo: InMemoryInvoiceRepository) -> None:
        _seed(memory_repo, 5)
        result = memory_repo.list(PaginationParams(page=4, page_size=10))
        assert result.invoices == []
        assert result.total == 5
        assert result.total_pages == 1

    def test_same_timestamp_orders_by_id(self, memory_repo: InMemoryInvoiceRepository) -> None:
        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for invoice_id in ("A", "C", "B"):
            memory_repo.create(
                Invoice(id=invoice_id, image_path="/x", created_at=created, updated_at=created)
            )
        result = memory_repo.list(PaginationParams())
        assert [inv.id for inv in result.invoices] == ["C", "B", "A"]


class TestTransactions:
    def test_commit_keeps_writes(self, memory_repo: InMemoryInvoiceRepository) -> None:
        with memory_repo.begin() as tx:
            memory_repo.create(Invoice.new("a", "/uploads/a.jpg"), tx=tx)
        assert tx.done
        assert memory_repo.get_by_id("a").id == "a"

    def test_rollback_undoes_create(self, memory_repo: InMemoryInvoiceRepository) -> None:
        tx = memory_repo.begin()
        memory_repo.create(Invoice.new("a", "/uploads/a.jpg"), tx=tx)
        tx.rollback()
        with pytest.raises(InvoiceNotFoundError):
            memory_repo.get_by_id("a")

    def test_rollback_undoes_update_and_delete(
        self, memory_repo: InMemoryInvoiceRepository
    ) -> None:
        memory_repo.create(Invoice.new("a", "/uploads/a.jpg"))
        memory_repo.create(Invoice.new("b", "/uploads/b.jpg"))

        tx = memory_repo.begin()
        invoice = memory_repo.get_by_id("a", tx=tx)
        memory_repo.update(invoice, lambda inv: inv.mark_processing(), tx=tx)
        memory_repo.delete("b", tx=tx)
        tx.rollback()

        assert memory_repo.get_by_id("a").status is InvoiceStatus.PENDING
        assert memory_repo.get_by_id("b").id == "b"

    def test_error_in_block_rolls_back(self, memory_repo: InMemoryInvoiceRepository) -> None:
        with pytest.raises(RuntimeError, match="boom"):
            with memory_repo.begin() as tx:
                memory_repo.create(Invoice.new("a", "/uploads/a.jpg"), tx=tx)
                raise RuntimeError("boom")
        with pytest.raises(InvoiceNotFoundError):
            memory_repo.get_by_id("a")

    def test_rejects_foreign_transaction(self, memory_repo: InMemoryInvoiceRepository) -> None:
        other = InMemoryInvoiceRepository()
        with pytest.raises(ValueError, match="does not belong"):
            memory_repo.create(Invoice.new("a", "/uploads/a.jpg"), tx=other.begin())

    def test_write_after_finalize_is_rejected(
        self, memory_repo: InMemoryInvoiceRepository
    ) -> None:
        tx = memory_repo.begin()
        tx.commit()
        with pytest.raises(RuntimeError, match="already finalized"):
            memory_repo.create(Invoice.new("a", "/uploads/a.jpg"), tx=tx)
