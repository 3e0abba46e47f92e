"""FastAPI routes and API modules for calldesk.

Provides the response envelope, error classes and exception handlers.
"""

from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


# =========================
# Response Models
# =========================


class APIResponse(BaseModel):
    """Response envelope shared by the admin endpoints."""

    OK: bool = True
    message: str = "OK"
    data: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    OK: bool = False
    message: str
    error_code: str


# =========================
# Exception Classes
# =========================


class APIError(HTTPException):
    """Base API error with structured response."""

    def __init__(self, status_code: int, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(status_code=status_code, detail=message)


class BadRequestError(APIError):
    """Malformed request or parameter."""

    def __init__(self, message: str = "Missing parameters"):
        super().__init__(
            status_code=400,
            error_code="BAD_REQUEST",
            message=message,
        )


class AuthenticationError(APIError):
    """Admin code rejected."""

    def __init__(self, message: str = "Wrong admin code"):
        super().__init__(
            status_code=401,
            error_code="AUTHENTICATION_FAILED",
            message=message,
        )


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, message: str):
        super().__init__(
            status_code=404,
            error_code="NOT_FOUND",
            message=message,
        )


class ServiceUnavailableError(APIError):
    """A backing service could not answer."""

    def __init__(self, message: str):
        super().__init__(
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            message=message,
        )


# =========================
# Exception Handlers
# =========================


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            message=exc.message,
            error_code=exc.error_code,
        ).model_dump(),
        headers={"X-Error-Code": exc.error_code},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report body validation failures as 400 Missing parameters."""
    fields = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    message = "Missing parameters"
    if fields:
        message = f"Missing parameters: {', '.join(fields)}"
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(message=message, error_code="BAD_REQUEST").model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle generic HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            message=str(exc.detail),
            error_code="HTTP_ERROR",
        ).model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    from calldesk.logging import get_logger

    logger = get_logger(__name__)
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            message="An unexpected error occurred",
            error_code="INTERNAL_ERROR",
        ).model_dump(),
    )


def register_exception_handlers(app):
    """Register exception handlers with the FastAPI app."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
