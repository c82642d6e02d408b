"""
FastAPI application exposing the CAR endpoints.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from w3storage.car.errors import CarError
from w3storage.exceptions import ValidationError, W3StorageError

from .car import router as car_router
from .env import Env
from .errors import ApiError

logger = logging.getLogger(__name__)


def status_code_for(exc: W3StorageError) -> int:
    if isinstance(exc, ApiError):
        return exc.status_code
    if isinstance(exc, (CarError, ValidationError)):
        return 400
    return 500


async def handle_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_code_for(exc) if isinstance(exc, W3StorageError) else 500
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(
        {"name": type(exc).__name__, "message": str(exc)}, status_code=status_code
    )


def create_app(env: Env) -> FastAPI:
    """
    Build the API application.

    The caller owns ``env``: its background task executor must be running
    (see :meth:`BackgroundTasks.run`) for cache population and DAG sizing to
    happen.
    """
    app = FastAPI(title="w3storage", docs_url=None, redoc_url=None)
    app.state.env = env
    app.include_router(car_router)
    app.add_exception_handler(W3StorageError, handle_error)
    return app
