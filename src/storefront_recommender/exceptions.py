"""Error types raised by the recommender and their HTTP rendering.

Every error reaches the client as ``{"success": false, "message": ...}``,
with an ``errors`` mapping of field -> message for validation failures.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = structlog.get_logger()


class RecommenderError(Exception):
    """Base exception for recommender errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional context, logged but not returned
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class NotFoundError(RecommenderError):
    """Raised when a referenced product does not exist."""

    def __init__(self, message: str = "Resource not found", details: dict[str, Any] | None = None):
        super().__init__(message, status_code=404, details=details)


class ProductNotFoundError(NotFoundError):
    """Raised when a product id is absent from the catalog."""

    def __init__(self, product_id: str):
        super().__init__("Product not found", details={"product_id": product_id})
        self.product_id = product_id


class UnauthorizedError(RecommenderError):
    """Raised when the caller identity is missing."""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, status_code=401)


class ForbiddenError(RecommenderError):
    """Raised when the caller may not perform the operation."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class ValidationError(RecommenderError):
    """Raised on malformed input. ``errors`` maps field name to message."""

    def __init__(self, message: str = "Validation Error", errors: dict[str, str] | None = None):
        super().__init__(message, status_code=422)
        self.errors = errors or {}

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(errors={field: message})


class RateLimitedError(RecommenderError):
    """Raised when a caller exceeds the activity logging rate."""

    def __init__(self, retry_after: int):
        super().__init__(
            "Too many requests, please try again later",
            status_code=429,
            details={"retry_after": retry_after},
        )
        self.retry_after = retry_after


def _error_body(message: str, errors: dict[str, str] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def recommender_error_handler(request: Request, exc: RecommenderError) -> JSONResponse:
    logger.info(
        "request_failed",
        path=request.url.path,
        status=exc.status_code,
        error=exc.message,
        **exc.details,
    )
    errors = exc.errors if isinstance(exc, ValidationError) else None
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, errors),
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        errors.setdefault(field, error["msg"])
    return JSONResponse(status_code=422, content=_error_body("Validation Error", errors))


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render slowapi's limit error in the common envelope."""
    retry_after = exc.limit.limit.get_expiry()
    return await recommender_error_handler(request, RateLimitedError(retry_after=retry_after))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope handlers on the application."""
    app.add_exception_handler(RecommenderError, recommender_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
