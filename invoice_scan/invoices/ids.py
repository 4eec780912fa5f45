"""ULID generation for invoice identifiers.

Identifiers created in later milliseconds sort after earlier ones as plain strings.
"""

from ulid import ULID


def new_ulid() -> str:
    """Return a new 26-character ULID string."""
    return str(ULID())
