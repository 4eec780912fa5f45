from invoice_scan.config.settings import Settings
from invoice_scan.database.repositories.invoice_repository import PostgresInvoiceRepository
from invoice_scan.database.repositories.memory_invoice_repository import (
    InMemoryInvoiceRepository,
)
from invoice_scan.invoices.repository import BaseInvoiceRepository


class InvoiceRepositoryFactory:
    """Creates the configured invoice record store."""

    STORES: dict[str, type[BaseInvoiceRepository]] = {
        "postgres": PostgresInvoiceRepository,
        "memory": InMemoryInvoiceRepository,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseInvoiceRepository:
        store = settings.record_store.lower()
        store_cls = cls.STORES.get(store)
        if store_cls is None:
            raise ValueError(
                f"Unknown record store '{store}'. Choose from: {list(cls.STORES)}"
            )
        return store_cls()
