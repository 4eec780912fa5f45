from fastapi import Request

from invoice_scan.invoices.service import InvoiceService


def get_invoice_service(request: Request) -> InvoiceService:
    return request.app.state.invoice_service
