"""
Bearer token authentication for the HTTP API.
"""

import logging

from fastapi import Request

from w3storage.db.models import AuthContext

from .errors import InvalidTokenError, MissingAuthorizationError

logger = logging.getLogger(__name__)


def parse_authorization_header(header: str) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        MissingAuthorizationError: if the header is empty or not a bearer token

    """
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MissingAuthorizationError("missing bearer token in Authorization header")
    return token


async def require_auth(request: Request) -> AuthContext:
    """
    FastAPI dependency resolving the caller of a request.

    Raises:
        MissingAuthorizationError: if no bearer token is present
        InvalidTokenError: if the token does not belong to a user

    """
    token = parse_authorization_header(request.headers.get("Authorization", ""))
    env = request.app.state.env
    auth = await env.db.get_auth_context(token)
    if auth is None:
        raise InvalidTokenError("invalid token")
    logger.debug(f"Authenticated user {auth.user.id}")
    return auth
