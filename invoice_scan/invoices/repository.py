from abc import ABC, abstractmethod
from collections.abc import Callable

from invoice_scan.database.transaction import BaseTransaction
from invoice_scan.invoices.ids import new_ulid
from invoice_scan.invoices.models import Invoice, PaginatedResult, PaginationParams

InvoiceMutation = Callable[[Invoice], None]


class BaseInvoiceRepository(ABC):
    """Contract for durable invoice storage.

    Write operations accept an optional transaction from begin(). Without one,
    each call commits on its own.
    """

    def next_id(self) -> str:
        """Allocate a new, time-ordered invoice id."""
        return new_ulid()

    @abstractmethod
    def begin(self) -> BaseTransaction:
        """Open a transaction that can be passed to the write operations."""

    @abstractmethod
    def create(self, invoice: Invoice, tx: BaseTransaction | None = None) -> None:
        """Insert a new invoice.

        Raises:
            InvoiceConflictError: if an invoice with the same id exists.
            PersistenceError: on storage failure.
        """

    @abstractmethod
    def get_by_id(self, invoice_id: str, tx: BaseTransaction | None = None) -> Invoice:
        """Fetch an invoice by id.

        Raises:
            InvoiceNotFoundError: if no invoice with this id exists.
            PersistenceError: on storage failure.
        """

    @abstractmethod
    def list(self, params: PaginationParams) -> PaginatedResult:
        """Return one page of invoices, most recently created first."""

    @abstractmethod
    def update(
        self,
        invoice: Invoice,
        mutate: InvoiceMutation,
        tx: BaseTransaction | None = None,
    ) -> None:
        """Apply ``mutate`` to ``invoice`` in memory, then persist the whole record.

        If ``mutate`` raises, nothing is written and the error propagates. This is
        read-modify-write: concurrent updates to one id are last-writer-wins.

        Raises:
            InvoiceNotFoundError: if the invoice no longer exists.
            PersistenceError: on storage failure.
        """

    @abstractmethod
    def delete(self, invoice_id: str, tx: BaseTransaction | None = None) -> None:
        """Delete an invoice.

        Raises:
            InvoiceNotFoundError: if no invoice with this id exists.
            PersistenceError: on storage failure.
        """
