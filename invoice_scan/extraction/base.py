from abc import ABC, abstractmethod

from invoice_scan.extraction.models import ExtractedData


class BaseExtractor(ABC):
    """Contract for all invoice extraction adapters."""

    @abstractmethod
    def extract(self, image_bytes: bytes, mime_type: str) -> ExtractedData:
        """Turn an invoice image into structured fields.

        Args:
            image_bytes: Raw image content.
            mime_type: Image MIME type, e.g. ``image/jpeg``.

        Raises:
            ExtractionInputError: if the image is empty, too large or not an image.
            ExtractionTimeoutError: if the provider exceeds the timeout.
            ExtractionUpstreamError: on provider failure or malformed output.
        """
