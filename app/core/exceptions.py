"""
Custom exception classes and structured error responses.

This module provides:
- Structured error response format
- Specific exception classes for different error types
- Error codes for programmatic error handling
- Exception handlers that render every error as ``{"error": ...}``
"""

from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.correlation import get_correlation_id
from app.log.logging import logger


class ErrorCode:
    """Error codes for programmatic error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "ERR_1000"
    INVALID_INPUT = "ERR_1001"
    MALFORMED_REQUEST = "ERR_1002"

    # Rate limit errors (7xxx)
    RATE_LIMIT_EXCEEDED = "ERR_7001"


class ErrorResponse(BaseModel):
    """Structured error response for API."""

    error: str  # Human-readable message
    code: str  # Error code for programmatic handling
    correlation_id: str | None = None  # Request correlation ID
    timestamp: str  # ISO 8601 timestamp

    @classmethod
    def create(cls, message: str, code: str) -> "ErrorResponse":
        """Create an error response with current timestamp and correlation ID."""
        return cls(
            error=message,
            code=code,
            correlation_id=get_correlation_id(),
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )


class LoadTestServiceException(HTTPException):
    """Base exception for all load test service errors."""

    error_code: str = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error_code: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        error_response = ErrorResponse.create(message=message, code=self.error_code)
        super().__init__(
            status_code=status_code, detail=error_response.model_dump(), headers=headers
        )


class InvalidInputError(LoadTestServiceException):
    """Raised when load test configuration is missing or out of range after clamping."""

    error_code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST)


class RateLimitExceededError(LoadTestServiceException):
    """Raised when a client starts too many load tests."""

    error_code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(self, retry_after: int, headers: dict[str, str] | None = None):
        self.retry_after = retry_after
        super().__init__(
            message=f"Rate limit exceeded. Try again in {retry_after} seconds.",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": str(retry_after), **(headers or {})},
        )


# =============================================================================
# Exception handlers
# =============================================================================


async def service_exception_handler(
    request: Request, exc: LoadTestServiceException
) -> JSONResponse:
    """Render a service exception with its structured body."""
    return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies as 400 errors instead of FastAPI's 422."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    body = ErrorResponse.create(
        message=f"Invalid request body: {'; '.join(messages)}",
        code=ErrorCode.MALFORMED_REQUEST,
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected internal faults as structured 500 errors."""
    logger.exception(
        "Unhandled error while serving request",
        path=request.url.path,
        error=str(exc),
        event_type="internal_error",
    )
    body = ErrorResponse.create(message="Internal server error", code=ErrorCode.INTERNAL_ERROR)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the service exception handlers to the application."""
    app.add_exception_handler(LoadTestServiceException, service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
