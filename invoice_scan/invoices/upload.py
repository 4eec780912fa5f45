"""Validation of uploaded invoice images."""

from dataclasses import dataclass
from pathlib import PurePath

from invoice_scan.invoices.exceptions import InvoiceValidationError

GENERIC_CONTENT_TYPES = frozenset({"", "application/octet-stream"})
UNKNOWN_CONTENT_TYPE = "application/octet-stream"

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/heic": ".heic",
}


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded file that passed validation."""

    filename: str
    content: bytes
    mime_type: str

    @property
    def extension(self) -> str:
        """Original file extension, or one derived from the MIME type."""
        suffix = PurePath(self.filename).suffix.lower()
        if suffix:
            return suffix
        return _EXTENSIONS.get(self.mime_type, "")


def sniff_image_type(content: bytes) -> str:
    """Guess an image MIME type from magic bytes."""
    if content.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if content[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    if content.startswith(b"BM"):
        return "image/bmp"
    if content[:4] in (b"II*\x00", b"MM\x00*"):
        return "image/tiff"
    if content[4:8] == b"ftyp" and content[8:12] in (b"heic", b"heix", b"mif1"):
        return "image/heic"
    return UNKNOWN_CONTENT_TYPE


def validate_image_upload(
    filename: str | None,
    content: bytes | None,
    content_type: str | None,
    max_size_bytes: int,
) -> ImageUpload:
    """Check that an uploaded file is present, non-empty, small enough and an image.

    The declared content type wins unless it is missing or generic, in which case
    the type is sniffed from the content.

    Raises:
        InvoiceValidationError: describing the first failed check.
    """
    if content is None:
        raise InvoiceValidationError("Image file is required")
    if len(content) == 0:
        raise InvoiceValidationError("Image file is empty")
    if len(content) > max_size_bytes:
        raise InvoiceValidationError(
            f"Image file too large (max {max_size_bytes // (1024 * 1024)}MB)"
        )

    mime_type = (content_type or "").split(";", 1)[0].strip().lower()
    if mime_type in GENERIC_CONTENT_TYPES:
        mime_type = sniff_image_type(content)
    if not mime_type.startswith("image/"):
        raise InvoiceValidationError("Invalid file type. Only images are allowed")

    return ImageUpload(filename=filename or "", content=content, mime_type=mime_type)
