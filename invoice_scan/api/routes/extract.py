import time

from fastapi import APIRouter, Depends, File, UploadFile

from invoice_scan.api.dependencies import get_invoice_service
from invoice_scan.api.routes.invoices import read_upload
from invoice_scan.api.schemas import ErrorResponse, ExtractResponse
from invoice_scan.invoices.service import InvoiceService

router = APIRouter(tags=["Extraction"])


@router.post(
    "/extract",
    response_model=ExtractResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Extract an invoice image without storing it",
)
def extract_invoice(
    image: UploadFile | None = File(default=None, description="Invoice image"),
    service: InvoiceService = Depends(get_invoice_service),
) -> ExtractResponse:
    """Run extraction inline and return the structured result.

    Provider failures map to 502, timeouts to 504 and bad images to 400.
    """
    started = time.monotonic()
    filename, content, content_type = read_upload(image, service.max_upload_size_bytes)
    data = service.extract_preview(filename, content, content_type)
    return ExtractResponse(
        success=True,
        data=data.to_dict(),
        processing_time_ms=int((time.monotonic() - started) * 1000),
    )
