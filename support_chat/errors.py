"""Error types for the support chat API.

Each error carries the HTTP status it maps to. Handlers registered by
``register_error_handlers`` turn them into ``{"error": message}`` bodies;
nothing else in the package knows about status codes.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .schemas import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for all API errors."""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        body = ErrorResponse(error=self.message)
        return JSONResponse(status_code=self.status_code, content=body.model_dump())


class ValidationError(APIError):
    """A required request field is missing or empty."""

    status_code = 400
    default_message = "Missing sessionId or message"


class RateLimitError(APIError):
    """The client sent too many requests in the current window."""

    status_code = 429
    default_message = "Rate limit exceeded"


class StorageError(APIError):
    """A database read or write failed."""

    status_code = 500
    default_message = "DB error"


class CollaboratorError(APIError):
    """The completion service failed."""

    status_code = 500
    default_message = "Completion service error"


class InternalError(APIError):
    status_code = 500
    default_message = "Internal server error"


def register_error_handlers(app: FastAPI) -> None:
    """Register the API error handlers with the FastAPI application."""

    @app.exception_handler(APIError)
    async def handle_api_error(request: Request, error: APIError) -> JSONResponse:
        level = logging.WARNING if error.status_code < 500 else logging.ERROR
        logger.log(level, "API error (%s) on %s: %s", error.__class__.__name__, request.url.path, error.message)
        return error.to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, error: RequestValidationError) -> JSONResponse:
        logger.warning("Rejected request body on %s: %s", request.url.path, error.errors())
        return ValidationError().to_response()
