import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from invoice_scan.invoices.exceptions import InvalidStatusTransitionError


class InvoiceStatus(str, Enum):
    """Lifecycle status of an invoice record."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


_ALLOWED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.PENDING: frozenset({InvoiceStatus.PROCESSING}),
    InvoiceStatus.PROCESSING: frozenset({InvoiceStatus.COMPLETED, InvoiceStatus.FAILED}),
    InvoiceStatus.COMPLETED: frozenset(),
    InvoiceStatus.FAILED: frozenset(),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Invoice:
    """An uploaded invoice image and the state of its extraction.

    Status changes go through the mark_* methods, which enforce the lifecycle
    pending -> processing -> completed | failed.
    """

    id: str
    image_path: str
    status: InvoiceStatus = InvoiceStatus.PENDING
    extracted_data: str | None = None
    error_message: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def new(cls, invoice_id: str, image_path: str) -> "Invoice":
        """Create a pending invoice with matching created/updated timestamps."""
        now = utcnow()
        return cls(id=invoice_id, image_path=image_path, created_at=now, updated_at=now)

    def mark_processing(self) -> None:
        self._transition(InvoiceStatus.PROCESSING)

    def mark_completed(self, data: str) -> None:
        if not data:
            raise ValueError("Completed invoice requires extracted data")
        self._transition(InvoiceStatus.COMPLETED)
        self.extracted_data = data
        self.error_message = None

    def mark_failed(self, message: str) -> None:
        self._transition(InvoiceStatus.FAILED)
        self.error_message = message or "unknown error"
        self.extracted_data = None

    def replace_extracted_data(self, data: str) -> None:
        """Overwrite extracted data as a manual edit. Status is left untouched."""
        if not data:
            raise ValueError("Edited extracted data must not be empty")
        self.extracted_data = data
        self.updated_at = utcnow()

    def _transition(self, target: InvoiceStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(
                f"Invoice {self.id}: cannot move from {self.status.value} to {target.value}"
            )
        self.status = target
        self.updated_at = utcnow()


@dataclass(frozen=True)
class PaginationParams:
    """1-indexed page request. The store does not cap page_size."""

    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass
class PaginatedResult:
    """One page of invoices plus paging metadata."""

    invoices: list[Invoice]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(
        cls, invoices: list[Invoice], total: int, params: PaginationParams
    ) -> "PaginatedResult":
        return cls(
            invoices=invoices,
            total=total,
            page=params.page,
            page_size=params.page_size,
            total_pages=math.ceil(total / params.page_size),
        )
