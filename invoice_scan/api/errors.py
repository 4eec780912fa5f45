"""Maps domain exceptions to HTTP error responses."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from invoice_scan.extraction.exceptions import ExtractionError
from invoice_scan.invoices.exceptions import (
    InvoiceConflictError,
    InvoiceError,
    InvoiceNotFoundError,
    InvoiceValidationError,
    PersistenceError,
)
from invoice_scan.logging.logger import Log


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _invoice_error_status(exc: InvoiceError) -> int:
    if isinstance(exc, InvoiceValidationError):
        return 400
    if isinstance(exc, InvoiceNotFoundError):
        return 404
    if isinstance(exc, InvoiceConflictError):
        return 409
    return 500


async def handle_invoice_error(request: Request, exc: InvoiceError) -> JSONResponse:
    status_code = _invoice_error_status(exc)
    if isinstance(exc, InvoiceNotFoundError):
        return error_response(status_code, "Invoice not found")
    if isinstance(exc, PersistenceError) or status_code >= 500:
        Log.error(f"{request.method} {request.url.path} failed: {exc}")
    return error_response(status_code, str(exc))


async def handle_extraction_error(request: Request, exc: ExtractionError) -> JSONResponse:
    Log.warning(f"{request.method} {request.url.path} extraction failed: {exc}")
    return error_response(exc.http_status, str(exc))


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return error_response(400, f"Invalid request: {details}")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvoiceError, handle_invoice_error)  # type: ignore[arg-type]
    app.add_exception_handler(ExtractionError, handle_extraction_error)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, handle_request_validation_error  # type: ignore[arg-type]
    )
