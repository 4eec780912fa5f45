from fastapi import APIRouter, Depends, File, UploadFile

from invoice_scan.api.dependencies import get_invoice_service
from invoice_scan.api.schemas import (
    DeleteResponse,
    ErrorResponse,
    InvoiceData,
    InvoiceListResponse,
    InvoiceResponse,
    UpdateInvoiceRequest,
)
from invoice_scan.invoices.models import PaginationParams
from invoice_scan.invoices.service import InvoiceService
from invoice_scan.invoices.views import InvoiceView

MAX_PAGE_SIZE = 100
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

router = APIRouter(tags=["Invoices"])


def parse_pagination(page: str | None, page_size: str | None) -> PaginationParams:
    """Build pagination from raw query values.

    Non-numeric or non-positive values fall back to the defaults; page_size is
    capped at MAX_PAGE_SIZE.
    """
    return PaginationParams(
        page=_positive_int(page, DEFAULT_PAGE),
        page_size=min(_positive_int(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE),
    )


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def read_upload(
    image: UploadFile | None, max_size_bytes: int
) -> tuple[str | None, bytes | None, str | None]:
    """Read at most one byte past the limit so oversized uploads are still rejected."""
    if image is None:
        return None, None, None
    content = image.file.read(max_size_bytes + 1)
    return image.filename, content, image.content_type


def _invoice_data(view: InvoiceView) -> InvoiceData:
    return InvoiceData(**view.to_dict())


@router.post(
    "/invoices/upload",
    response_model=InvoiceResponse,
    response_model_exclude_unset=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Upload an invoice image",
)
def upload_invoice(
    image: UploadFile | None = File(default=None, description="Invoice image"),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResponse:
    """Store the image and create a pending invoice.

    Extraction runs in the background; poll GET /invoices/{id} for the result.
    """
    filename, content, content_type = read_upload(image, service.max_upload_size_bytes)
    view = service.upload(filename, content, content_type)
    return InvoiceResponse(success=True, data=_invoice_data(view))


@router.get(
    "/invoices",
    response_model=InvoiceListResponse,
    response_model_exclude_unset=True,
    summary="List invoices",
)
def list_invoices(
    page: str | None = None,
    page_size: str | None = None,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceListResponse:
    """List invoices, most recent first."""
    result = service.list_invoices(parse_pagination(page, page_size))
    return InvoiceListResponse(
        success=True,
        data=[_invoice_data(view) for view in result.invoices],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@router.get(
    "/invoices/{invoice_id}",
    response_model=InvoiceResponse,
    response_model_exclude_unset=True,
    responses={404: {"model": ErrorResponse}},
)
def get_invoice(
    invoice_id: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResponse:
    return InvoiceResponse(success=True, data=_invoice_data(service.get_invoice(invoice_id)))


@router.put(
    "/invoices/{invoice_id}",
    response_model=InvoiceResponse,
    response_model_exclude_unset=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Edit extracted data",
)
def update_invoice(
    invoice_id: str,
    body: UpdateInvoiceRequest,
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceResponse:
    """Overwrite the invoice's extracted data. The status is not changed."""
    view = service.update_extracted_data(invoice_id, body.extracted_data)
    return InvoiceResponse(success=True, data=_invoice_data(view))


@router.delete(
    "/invoices/{invoice_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse}},
)
def delete_invoice(
    invoice_id: str,
    service: InvoiceService = Depends(get_invoice_service),
) -> DeleteResponse:
    """Delete the invoice record and its stored image."""
    service.delete_invoice(invoice_id)
    return DeleteResponse(success=True, data=None)
