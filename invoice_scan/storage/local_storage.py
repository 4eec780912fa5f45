from pathlib import Path

from invoice_scan.storage.base import BaseFileStorage
from invoice_scan.storage.exceptions import StorageError

URL_PREFIX = "/uploads"


class LocalFileStorage(BaseFileStorage):
    """Stores blobs as files in a single directory on local disk.

    Locators are file paths; URLs point at the directory mounted under /uploads.
    """

    def __init__(self, base_path: Path | str, base_url: str) -> None:
        self._base_path = Path(base_path)
        self._base_url = base_url.rstrip("/")
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create upload directory: {exc}") from exc

    def save(self, name: str, data: bytes, content_type: str) -> str:
        if not content_type.startswith("image/"):
            raise StorageError(f"Invalid content type: {content_type}")
        if not name or Path(name).name != name or name in {".", ".."}:
            raise StorageError(f"Invalid file name: {name!r}")

        path = self._base_path / name
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to write file: {exc}") from exc
        return str(path)

    def get(self, locator: str) -> bytes:
        try:
            return Path(locator).read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read file: {exc}") from exc

    def delete(self, locator: str) -> None:
        try:
            Path(locator).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete file: {exc}") from exc

    def url_for(self, locator: str) -> str:
        return f"{self._base_url}{URL_PREFIX}/{Path(locator).name}"
