"""Request and response models for the HTTP API."""

from typing import Any

from pydantic import BaseModel, Field


class InvoiceData(BaseModel):
    """One invoice record as returned to clients."""

    id: str
    status: str
    image_path: str = Field(description="URL of the uploaded image")
    created_at: str
    updated_at: str
    extracted_data: Any = None
    error_message: str | None = None


class InvoiceResponse(BaseModel):
    success: bool
    data: InvoiceData


class InvoiceListResponse(BaseModel):
    success: bool
    data: list[InvoiceData]
    total: int
    page: int
    page_size: int
    total_pages: int


class DeleteResponse(BaseModel):
    success: bool
    data: None = None


class UpdateInvoiceRequest(BaseModel):
    """Manual edit of an invoice's extracted data."""

    extracted_data: Any

    model_config = {
        "json_schema_extra": {
            "examples": [{
                "extracted_data": {
                    "key_value_pairs": [
                        {"key": "Invoice Number", "value": "INV-001", "confidence": 1.0}
                    ],
                    "table": None,
                    "summary": [{"key": "Total", "value": "1100.00", "confidence": 1.0}],
                    "confidence": 1.0,
                }
            }]
        }
    }


class ExtractResponse(BaseModel):
    success: bool
    data: dict[str, Any]
    processing_time_ms: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
