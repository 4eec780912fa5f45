from invoice_scan.extraction.base import BaseExtractor
from invoice_scan.extraction.extractor import InvoiceExtractor
from invoice_scan.extraction.factory import ExtractionClientFactory

__all__ = ["BaseExtractor", "ExtractionClientFactory", "InvoiceExtractor"]
