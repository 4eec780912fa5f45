from typing import ClassVar


class ExtractionError(Exception):
    """Raised when invoice extraction fails."""

    http_status: ClassVar[int] = 500


class ExtractionInputError(ExtractionError):
    """Raised when the image is empty, too large or not an image."""

    http_status: ClassVar[int] = 400


class ExtractionUpstreamError(ExtractionError):
    """Raised when the AI provider call fails or returns an error."""

    http_status: ClassVar[int] = 502


class ExtractionResponseError(ExtractionUpstreamError):
    """Raised when the AI provider response cannot be parsed or validated."""


class ExtractionTimeoutError(ExtractionError):
    """Raised when the AI provider does not answer within the configured timeout."""

    http_status: ClassVar[int] = 504
