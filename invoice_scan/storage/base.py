from abc import ABC, abstractmethod


class BaseFileStorage(ABC):
    """Contract for blob stores holding uploaded invoice images."""

    @abstractmethod
    def save(self, name: str, data: bytes, content_type: str) -> str:
        """Persist ``data`` under ``name``.

        Returns:
            An opaque locator for get(), delete() and url_for().

        Raises:
            StorageError: if the content type is not an image or the write fails.
        """

    @abstractmethod
    def get(self, locator: str) -> bytes:
        """Read a stored blob.

        Raises:
            StorageError: if the blob cannot be read.
        """

    @abstractmethod
    def delete(self, locator: str) -> None:
        """Remove a stored blob. Deleting a missing blob is not an error."""

    @abstractmethod
    def url_for(self, locator: str) -> str:
        """Return an externally reachable URL for a locator."""
