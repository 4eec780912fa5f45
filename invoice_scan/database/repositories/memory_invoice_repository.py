import copy
import threading
from collections.abc import Callable

from invoice_scan.database.transaction import BaseTransaction
from invoice_scan.invoices.exceptions import InvoiceConflictError, InvoiceNotFoundError
from invoice_scan.invoices.models import Invoice, PaginatedResult, PaginationParams
from invoice_scan.invoices.repository import BaseInvoiceRepository, InvoiceMutation


class InMemoryTransaction(BaseTransaction):
    """Undo journal for InMemoryInvoiceRepository.

    Writes are applied immediately and are visible to other readers; rollback
    replays the recorded undo actions in reverse order.
    """

    def __init__(self, owner: "InMemoryInvoiceRepository") -> None:
        super().__init__()
        self.owner = owner
        self._undo: list[Callable[[], None]] = []

    def record_undo(self, action: Callable[[], None]) -> None:
        if self._done:
            raise RuntimeError("Transaction already finalized")
        self._undo.append(action)

    def _commit(self) -> None:
        self._undo.clear()

    def _rollback(self) -> None:
        while self._undo:
            self._undo.pop()()


class InMemoryInvoiceRepository(BaseInvoiceRepository):
    """Thread-safe, process-local invoice store.

    Stored records are copies; callers never hold a reference to stored state.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[str, Invoice] = {}

    def begin(self) -> InMemoryTransaction:
        return InMemoryTransaction(self)

    def create(self, invoice: Invoice, tx: BaseTransaction | None = None) -> None:
        journal = self._journal(tx)
        with self._lock:
            if invoice.id in self._records:
                raise InvoiceConflictError(f"Invoice {invoice.id} already exists")
            self._records[invoice.id] = copy.deepcopy(invoice)
            if journal is not None:
                journal.record_undo(lambda: self._discard(invoice.id))

    def get_by_id(self, invoice_id: str, tx: BaseTransaction | None = None) -> Invoice:
        self._journal(tx)
        with self._lock:
            stored = self._records.get(invoice_id)
            if stored is None:
                raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
            return copy.deepcopy(stored)

    def update(
        self,
        invoice: Invoice,
        mutate: InvoiceMutation,
        tx: BaseTransaction | None = None,
    ) -> None:
        journal = self._journal(tx)
        mutate(invoice)
        with self._lock:
            previous = self._records.get(invoice.id)
            if previous is None:
                raise InvoiceNotFoundError(f"Invoice {invoice.id} not found")
            self._records[invoice.id] = copy.deepcopy(invoice)
            if journal is not None:
                journal.record_undo(lambda: self._restore(previous))

    def delete(self, invoice_id: str, tx: BaseTransaction | None = None) -> None:
        journal = self._journal(tx)
        with self._lock:
            previous = self._records.pop(invoice_id, None)
            if previous is None:
                raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
            if journal is not None:
                journal.record_undo(lambda: self._restore(previous))

    def list(self, params: PaginationParams) -> PaginatedResult:
        with self._lock:
            ordered = sorted(
                self._records.values(),
                key=lambda inv: (inv.created_at, inv.id),
                reverse=True,
            )
            total = len(ordered)
            page = [
                copy.deepcopy(inv)
                for inv in ordered[params.offset : params.offset + params.page_size]
            ]
        return PaginatedResult.build(page, total, params)

    def _journal(self, tx: BaseTransaction | None) -> InMemoryTransaction | None:
        if tx is None:
            return None
        if not isinstance(tx, InMemoryTransaction) or tx.owner is not self:
            raise ValueError("Transaction does not belong to this repository")
        if tx.done:
            raise RuntimeError("Transaction already finalized")
        return tx

    def _discard(self, invoice_id: str) -> None:
        with self._lock:
            self._records.pop(invoice_id, None)

    def _restore(self, invoice: Invoice) -> None:
        with self._lock:
            self._records[invoice.id] = invoice
