"""Domain errors and their mapping onto HTTP responses.

Workflows raise the exceptions defined here; ``register_exception_handlers``
turns them into JSON bodies of the form ``{"detail": ...}``. Anything that is
not an ``AppError`` is logged with its traceback and reported as a generic
internal error so that nothing about the failure leaks to the caller.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists"


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials.

    ``should_refresh`` tells the client whether calling the refresh endpoint
    may recover the session or whether it has to log in again.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"

    def __init__(self, message: str | None = None, should_refresh: bool = False) -> None:
        super().__init__(message)
        self.should_refresh = should_refresh

    def to_dict(self) -> dict:
        return {"detail": self.message, "shouldRefresh": self.should_refresh}


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class MediaStoreError(AppError):
    pass


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
            return JSONResponse(status_code=exc.status_code, content={"detail": INTERNAL_ERROR_MESSAGE})
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": INTERNAL_ERROR_MESSAGE},
        )
