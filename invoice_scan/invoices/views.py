import json
from dataclasses import dataclass

from invoice_scan.invoices.models import Invoice, InvoiceStatus, PaginatedResult
from invoice_scan.logging.logger import Log


@dataclass(frozen=True)
class InvoiceView:
    """Caller-facing representation of an invoice record."""

    id: str
    status: InvoiceStatus
    image_url: str
    created_at: str
    updated_at: str
    extracted_data: object | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize for JSON responses, omitting absent optional fields."""
        data: dict[str, object] = {
            "id": self.id,
            "status": self.status.value,
            "image_path": self.image_url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.extracted_data is not None:
            data["extracted_data"] = self.extracted_data
        if self.error_message is not None:
            data["error_message"] = self.error_message
        return data


@dataclass(frozen=True)
class InvoicePage:
    invoices: list[InvoiceView]
    total: int
    page: int
    page_size: int
    total_pages: int


def build_view(invoice: Invoice, image_url: str) -> InvoiceView:
    """Build the view of one invoice.

    Extracted data is shown only for completed invoices and only when it decodes;
    an undecodable payload is hidden rather than reported.
    """
    extracted: object | None = None
    if invoice.status is InvoiceStatus.COMPLETED and invoice.extracted_data:
        try:
            extracted = json.loads(invoice.extracted_data)
        except ValueError as exc:
            Log.debug(f"Invoice {invoice.id}: hiding undecodable extracted data: {exc}")

    error_message = invoice.error_message if invoice.status is InvoiceStatus.FAILED else None

    return InvoiceView(
        id=invoice.id,
        status=invoice.status,
        image_url=image_url,
        created_at=invoice.created_at.isoformat(),
        updated_at=invoice.updated_at.isoformat(),
        extracted_data=extracted,
        error_message=error_message,
    )


def build_page(result: PaginatedResult, views: list[InvoiceView]) -> InvoicePage:
    return InvoicePage(
        invoices=views,
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )
