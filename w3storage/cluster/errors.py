"""
Pinning cluster errors.
"""

from w3storage.exceptions import W3StorageError


class ClusterError(W3StorageError):
    """Base exception for pinning cluster errors."""

    pass


class ClusterAddError(ClusterError):
    """Raised when content cannot be added to the cluster."""

    pass


class ClusterStatusError(ClusterError):
    """Raised when the pin status of a CID cannot be retrieved."""

    pass
