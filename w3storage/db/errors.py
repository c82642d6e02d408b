"""
Database errors.
"""

from w3storage.exceptions import W3StorageError


class DBError(W3StorageError):
    """Raised when a database operation fails."""

    pass
