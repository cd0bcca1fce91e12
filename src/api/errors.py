"""Standardized error responses for the API.

Every error leaves the API in one envelope so the front-end can decide
whether to retry or show a message:

    {"error": {"code": "NOT_FOUND", "message": "...", "retryable": false,
               "details": {...}}}

Routes raise APIError (via the raise_* helpers); the handler registered in
register_error_handlers() renders it.
"""

from enum import Enum
from typing import Any, NoReturn

from flask import Flask
from werkzeug.exceptions import HTTPException

from src.utils.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """Error codes for API responses."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"  # Invalid input data
    INVALID_FORMAT = "INVALID_FORMAT"  # Body is not JSON

    # Resource errors
    NOT_FOUND = "NOT_FOUND"

    # Server errors (potentially retryable)
    SERVER_ERROR = "SERVER_ERROR"
    RATE_LIMITED = "RATE_LIMITED"

    # Weather providers, geocoders, push services
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


RETRYABLE_ERRORS = {
    ErrorCode.RATE_LIMITED,
    ErrorCode.SERVER_ERROR,
    ErrorCode.EXTERNAL_SERVICE_ERROR,
}


def is_retryable(code: ErrorCode) -> bool:
    """Check if an error code indicates a retryable error."""
    return code in RETRYABLE_ERRORS


def create_error_response(
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the error envelope.

    Args:
        code: Error code enum value
        message: Human-readable message, safe to show to users
        details: Optional extra context (e.g. the invalid field)
    """
    error_data: dict[str, Any] = {
        "code": code.value,
        "message": message,
        "retryable": is_retryable(code),
    }
    if details:
        error_data["details"] = details
    return {"error": error_data}


class APIError(Exception):
    """An error that maps directly onto an HTTP error response."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    def to_response(self) -> tuple[dict[str, Any], int]:
        return create_error_response(self.code, self.message, self.details), self.status_code


# Convenience functions returning (body, status) for handlers that return


def validation_error(message: str, field: str | None = None) -> tuple[dict[str, Any], int]:
    """Validation error response (400)."""
    details = {"field": field} if field else None
    return create_error_response(ErrorCode.VALIDATION_ERROR, message, details), 400


def invalid_json_error() -> tuple[dict[str, Any], int]:
    """Invalid JSON error response (400)."""
    return create_error_response(ErrorCode.INVALID_FORMAT, "Invalid JSON in request body"), 400


def not_found_error(resource: str = "Resource") -> tuple[dict[str, Any], int]:
    """Not found error response (404)."""
    return create_error_response(ErrorCode.NOT_FOUND, f"{resource} not found"), 404


def server_error(
    message: str = "An unexpected error occurred. Please try again.",
) -> tuple[dict[str, Any], int]:
    """Generic server error response (500). Internal details are logged, never returned."""
    return create_error_response(ErrorCode.SERVER_ERROR, message), 500


def rate_limited_error(retry_after: int | None = None) -> tuple[dict[str, Any], int]:
    """Rate limited error response (429)."""
    details = {"retry_after": retry_after} if retry_after else None
    return create_error_response(ErrorCode.RATE_LIMITED, "Too many requests. Please slow down.", details), 429


# Raising variants for use inside routes


def raise_validation_error(message: str, field: str | None = None) -> NoReturn:
    details = {"field": field} if field else None
    raise APIError(400, ErrorCode.VALIDATION_ERROR, message, details)


def raise_not_found_error(resource: str = "Resource", message: str | None = None) -> NoReturn:
    raise APIError(404, ErrorCode.NOT_FOUND, message or f"{resource} not found")


def raise_external_service_error(
    message: str = "External service error. Please try again.",
    service: str | None = None,
    details: dict[str, Any] | None = None,
) -> NoReturn:
    merged = dict(details or {})
    if service:
        merged["service"] = service
    raise APIError(502, ErrorCode.EXTERNAL_SERVICE_ERROR, message, merged or None)


def register_error_handlers(app: Flask) -> None:
    """Render APIError and stray exceptions in the standard envelope."""

    @app.errorhandler(APIError)
    def handle_api_error(e: APIError) -> tuple[dict[str, Any], int]:
        if e.status_code >= 500:
            logger.warning("API error", extra={"code": e.code.value, "error_message": e.message})
        return e.to_response()

    @app.errorhandler(404)
    def handle_not_found(e: HTTPException) -> tuple[dict[str, Any], int]:
        return not_found_error()

    @app.errorhandler(405)
    def handle_method_not_allowed(e: HTTPException) -> tuple[dict[str, Any], int]:
        return create_error_response(ErrorCode.VALIDATION_ERROR, "Method not allowed"), 405

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception) -> tuple[dict[str, Any], int] | HTTPException:
        if isinstance(e, HTTPException):
            return e
        logger.error("Unhandled exception", extra={"error": str(e)}, exc_info=True)
        return server_error()
