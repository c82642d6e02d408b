"""
HTTP API for CAR upload and retrieval.
"""

from .app import create_app
from .background import BackgroundTasks
from .cache import CachedResponse, ResponseCache
from .env import Env
from .errors import (
    ApiError,
    InvalidCIDError,
    InvalidTokenError,
    MissingAuthorizationError,
    NoPinningPeersError,
    UpstreamFetchError,
)

__all__ = [
    "create_app",
    "BackgroundTasks",
    "CachedResponse",
    "ResponseCache",
    "Env",
    # Errors
    "ApiError",
    "InvalidCIDError",
    "InvalidTokenError",
    "MissingAuthorizationError",
    "NoPinningPeersError",
    "UpstreamFetchError",
]
