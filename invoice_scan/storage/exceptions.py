class StorageError(Exception):
    """Raised when a blob cannot be saved, read or deleted."""
