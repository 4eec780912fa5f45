"""Example vision client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseVisionClient and register the provider in ExtractionClientFactory.
"""

import json
from typing import ClassVar

from invoice_scan.extraction.client_base import BaseVisionClient


class ExampleVisionClientAdapter(BaseVisionClient):
    """Example adapter that returns a fixed valid extraction JSON.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "key_value_pairs": [
            {"key": "Invoice Number", "value": "INV-0001", "confidence": 0.99},
            {"key": "Vendor", "value": "Example Supplies Ltd", "confidence": 0.95},
        ],
        "table": {
            "headers": ["Item", "Quantity", "Unit Price", "Amount"],
            "rows": [["Paper A4", "2", "5.00", "10.00"]],
        },
        "summary": [{"key": "Total", "value": "10.00", "confidence": 0.97}],
        "confidence": 0.95,
    }

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        mime_type: str,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt, image_bytes, mime_type
        return json.dumps(self.DEFAULT_RESPONSE)
