import json

from invoice_scan.extraction.base import BaseExtractor
from invoice_scan.extraction.models import ExtractedData
from invoice_scan.invoices.exceptions import (
    InvoiceError,
    InvoiceValidationError,
    PersistenceError,
)
from invoice_scan.invoices.models import Invoice, PaginationParams
from invoice_scan.invoices.repository import BaseInvoiceRepository
from invoice_scan.invoices.upload import validate_image_upload
from invoice_scan.invoices.views import InvoicePage, InvoiceView, build_page, build_view
from invoice_scan.logging.logger import Log
from invoice_scan.storage.base import BaseFileStorage
from invoice_scan.storage.exceptions import StorageError
from invoice_scan.worker.extraction_job import ExtractionJobRunner
from invoice_scan.worker.launcher import BaseTaskLauncher

DEFAULT_MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024


class InvoiceService:
    """Orchestrates invoice uploads, background extraction and record access.

    Upload: validate -> save image -> create pending record -> launch extraction.
    The upload returns as soon as the record exists; extraction results are only
    visible by reading the record again.
    """

    def __init__(
        self,
        repo: BaseInvoiceRepository,
        storage: BaseFileStorage,
        extractor: BaseExtractor,
        launcher: BaseTaskLauncher,
        max_upload_size_bytes: int = DEFAULT_MAX_UPLOAD_SIZE_BYTES,
    ) -> None:
        self._repo = repo
        self._storage = storage
        self._extractor = extractor
        self._launcher = launcher
        self._max_upload_size_bytes = max_upload_size_bytes
        self._job_runner = ExtractionJobRunner(repo, extractor)

    @property
    def max_upload_size_bytes(self) -> int:
        return self._max_upload_size_bytes

    def upload(
        self,
        filename: str | None,
        content: bytes | None,
        content_type: str | None,
    ) -> InvoiceView:
        """Store an uploaded image, create its record and start extraction.

        Raises:
            InvoiceValidationError: if the upload is missing, empty, too large
                or not an image. Nothing is stored in that case.
            PersistenceError: if the image or the record cannot be saved.
        """
        upload = validate_image_upload(
            filename, content, content_type, self._max_upload_size_bytes
        )

        invoice_id = self._repo.next_id()
        blob_name = f"{invoice_id}{upload.extension}"
        try:
            locator = self._storage.save(blob_name, upload.content, upload.mime_type)
        except StorageError as exc:
            raise PersistenceError(f"Failed to save image: {exc}") from exc

        invoice = Invoice.new(invoice_id, locator)
        try:
            self._repo.create(invoice)
        except InvoiceError as exc:
            self._delete_blob(locator)
            raise PersistenceError(f"Failed to create invoice: {exc}") from exc

        Log.info(
            f"Invoice {invoice_id} created",
            upload_name=upload.filename or "-",
            size_bytes=len(upload.content),
            mime_type=upload.mime_type,
        )
        self._launcher.launch(
            self._job_runner.run, invoice_id, upload.content, upload.mime_type
        )
        return self._view(invoice)

    def get_invoice(self, invoice_id: str) -> InvoiceView:
        """Raises InvoiceNotFoundError if the invoice does not exist."""
        return self._view(self._repo.get_by_id(invoice_id))

    def list_invoices(self, params: PaginationParams) -> InvoicePage:
        result = self._repo.list(params)
        return build_page(result, [self._view(inv) for inv in result.invoices])

    def delete_invoice(self, invoice_id: str) -> None:
        """Delete the record and, best effort, its image.

        An extraction still running for this invoice is not cancelled; its next
        status update fails and is logged.

        Raises:
            InvoiceNotFoundError: if the invoice does not exist.
        """
        invoice = self._repo.get_by_id(invoice_id)
        if invoice.image_path:
            self._delete_blob(invoice.image_path)
        self._repo.delete(invoice_id)
        Log.info(f"Invoice {invoice_id} deleted")

    def update_extracted_data(self, invoice_id: str, data: object) -> InvoiceView:
        """Overwrite extracted data by hand. This is not a status transition.

        Raises:
            InvoiceNotFoundError: if the invoice does not exist.
            InvoiceValidationError: if ``data`` is null or empty.
        """
        invoice = self._repo.get_by_id(invoice_id)
        if data is None or data in ({}, [], ""):
            raise InvoiceValidationError("extracted_data must not be empty")
        payload = json.dumps(data)
        self._repo.update(invoice, lambda inv: inv.replace_extracted_data(payload))
        Log.info(f"Invoice {invoice_id} extracted data edited")
        return self._view(invoice)

    def extract_preview(
        self,
        filename: str | None,
        content: bytes | None,
        content_type: str | None,
    ) -> ExtractedData:
        """Validate an upload and extract it inline. Nothing is stored.

        Raises:
            InvoiceValidationError: if the upload fails validation.
            ExtractionError: subclasses identify input, upstream and timeout failures.
        """
        upload = validate_image_upload(
            filename, content, content_type, self._max_upload_size_bytes
        )
        return self._extractor.extract(upload.content, upload.mime_type)

    def _view(self, invoice: Invoice) -> InvoiceView:
        return build_view(invoice, self._storage.url_for(invoice.image_path))

    def _delete_blob(self, locator: str) -> None:
        try:
            self._storage.delete(locator)
        except StorageError as exc:
            Log.warning(f"Failed to delete image file {locator}: {exc}")
