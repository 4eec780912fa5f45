import json

from invoice_scan.extraction.base import BaseExtractor
from invoice_scan.invoices.exceptions import InvoiceError
from invoice_scan.invoices.models import Invoice
from invoice_scan.invoices.repository import BaseInvoiceRepository
from invoice_scan.logging.logger import Log


class ExtractionJobRunner:
    """Run extraction for one uploaded invoice and record the outcome.

    Transitions are pending -> processing -> completed | failed, applied one after
    another through the repository. Failures to record a transition are logged and
    end the run; the record then keeps its last committed status.
    """

    def __init__(self, repo: BaseInvoiceRepository, extractor: BaseExtractor) -> None:
        self._repo = repo
        self._extractor = extractor

    def run(self, invoice_id: str, image_bytes: bytes, mime_type: str) -> None:
        try:
            invoice = self._repo.get_by_id(invoice_id)
        except InvoiceError as exc:
            Log.error(f"Failed to get invoice {invoice_id}: {exc}")
            return

        try:
            self._repo.update(invoice, lambda inv: inv.mark_processing())
        except InvoiceError as exc:
            Log.error(f"Failed to update invoice {invoice_id} to processing: {exc}")
            return
        Log.info(f"Invoice {invoice_id} marked as processing")

        try:
            result = self._extractor.extract(image_bytes, mime_type)
        except Exception as exc:
            Log.error(
                f"Extraction failed for invoice {invoice_id}: {exc}",
                error_type=type(exc).__name__,
            )
            self._mark_failed(invoice, str(exc) or type(exc).__name__)
            return

        try:
            payload = json.dumps(result.to_dict())
        except (TypeError, ValueError) as exc:
            self._mark_failed(invoice, f"Failed to serialize extracted data: {exc}")
            return

        try:
            self._repo.update(invoice, lambda inv: inv.mark_completed(payload))
        except InvoiceError as exc:
            Log.error(f"Failed to update invoice {invoice_id} to completed: {exc}")
            return
        Log.info(f"Invoice {invoice_id} completed successfully")

    def _mark_failed(self, invoice: Invoice, message: str) -> None:
        try:
            self._repo.update(invoice, lambda inv: inv.mark_failed(message))
        except InvoiceError as exc:
            Log.error(f"Failed to update invoice {invoice.id} to failed: {exc}")
            return
        Log.warning(f"Invoice {invoice.id} marked as failed: {message}")
