class InvoiceError(Exception):
    """Base exception for all invoice-related errors."""


class InvoiceNotFoundError(InvoiceError):
    """Raised when an invoice record does not exist."""


class InvoiceConflictError(InvoiceError):
    """Raised when creating an invoice whose id already exists."""


class InvoiceValidationError(InvoiceError):
    """Raised when an upload or an edit carries missing or unusable input."""


class InvalidStatusTransitionError(InvoiceError):
    """Raised when a lifecycle transition is not allowed from the current status."""


class PersistenceError(InvoiceError):
    """Raised when the record store or blob store fails to read or write."""
