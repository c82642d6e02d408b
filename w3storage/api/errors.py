"""
HTTP API errors.
"""

from w3storage.exceptions import W3StorageError


class ApiError(W3StorageError):
    """Base exception for errors rendered as HTTP responses."""

    status_code = 500


class InvalidCIDError(ApiError):
    """Raised when a request path does not contain a valid CID."""

    status_code = 400


class MissingAuthorizationError(ApiError):
    """Raised when a request has no bearer token."""

    status_code = 401


class InvalidTokenError(ApiError):
    """Raised when a bearer token does not match any user."""

    status_code = 401


class NoPinningPeersError(ApiError):
    """Raised when the cluster reports no peer pinning freshly added content."""

    status_code = 500


class UpstreamFetchError(ApiError):
    """Raised when the gateway cannot be reached."""

    status_code = 502
