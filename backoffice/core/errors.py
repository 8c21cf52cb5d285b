"""Error taxonomy and standardized error responses.

Client-side and backend failures are raised as ``BackofficeError``
subclasses. Views catch them at the call site and surface a transient
notification; the HTTP layer converts them to an ``AppException`` carrying
an ``ErrorResponse`` with a suggested action.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from pydantic import BaseModel


# =============================================================================
# Exceptions
# =============================================================================


class BackofficeError(Exception):
    """Base exception for all back-office errors."""
    pass


class NetworkError(BackofficeError):
    """Raised when the backend cannot be reached or the response is unreadable."""
    pass


class ResponseError(BackofficeError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ResponseError):
    """Raised when the requested record does not exist (404)."""

    def __init__(self, message: str, status_code: int = 404):
        super().__init__(message, status_code)


class ConflictError(ResponseError):
    """Raised when the backend refuses an operation on a referenced record."""

    def __init__(self, message: str, status_code: int = 409):
        super().__init__(message, status_code)


class ValidationError(BackofficeError):
    """Raised when client-side validation fails.

    Attributes:
        field: Name of the offending field, when known
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


# =============================================================================
# Error codes and responses
# =============================================================================


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    NETWORK_ERROR = "NETWORK_ERROR"
    BACKEND_ERROR = "BACKEND_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standardized error response format.

    Attributes:
        error: Short error description
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Additional error details
        suggested_action: Actionable suggestion for the user
    """
    error: str
    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    suggested_action: Optional[str] = None


SUGGESTED_ACTIONS = {
    ErrorCode.NETWORK_ERROR: "Cannot reach the server. Please check that the backend is running and try again.",
    ErrorCode.BACKEND_ERROR: "The server could not process the request. Please try again later.",
    ErrorCode.NOT_FOUND: "The record was not found. It may have been deleted; refresh the list.",
    ErrorCode.CONFLICT: "The record is referenced by other entries and cannot be changed or deleted.",
    ErrorCode.VALIDATION_ERROR: "The submitted data is invalid. Please check the form and correct any errors.",
    ErrorCode.MISSING_REQUIRED_FIELD: "A required field is missing. Please fill in all required fields.",
    ErrorCode.INTERNAL_ERROR: "An internal error occurred. Please try again.",
}


def error_code_for(exc: BaseException) -> ErrorCode:
    """Map an exception to its error code."""
    if isinstance(exc, NetworkError):
        return ErrorCode.NETWORK_ERROR
    if isinstance(exc, NotFoundError):
        return ErrorCode.NOT_FOUND
    if isinstance(exc, ConflictError):
        return ErrorCode.CONFLICT
    if isinstance(exc, ValidationError):
        if exc.field and "required" in str(exc):
            return ErrorCode.MISSING_REQUIRED_FIELD
        return ErrorCode.VALIDATION_ERROR
    if isinstance(exc, ResponseError):
        return ErrorCode.BACKEND_ERROR
    return ErrorCode.INTERNAL_ERROR


def create_error_response(
    error_code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorResponse:
    """Create a standardized error response.

    Args:
        error_code: The error code
        message: Optional custom message (uses default if not provided)
        details: Optional additional details

    Returns:
        ErrorResponse with suggested action
    """
    suggested_action = SUGGESTED_ACTIONS.get(error_code)

    return ErrorResponse(
        error=error_code.value,
        error_code=error_code.value,
        message=message or suggested_action or "An error occurred",
        details=details,
        suggested_action=suggested_action,
    )


class AppException(HTTPException):
    """Application exception with standardized error response."""

    def __init__(
        self,
        error_code: ErrorCode,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code
        self.error_response = create_error_response(
            error_code=error_code,
            message=message,
            details=details,
        )

        super().__init__(
            status_code=status_code,
            detail=self.error_response.model_dump(),
        )


STATUS_FOR_CODE = {
    ErrorCode.NETWORK_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.BACKEND_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.MISSING_REQUIRED_FIELD: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_app_exception(exc: BackofficeError) -> AppException:
    """Convert a back-office error into an HTTP exception."""
    error_code = error_code_for(exc)
    details = None
    if isinstance(exc, ValidationError) and exc.field:
        details = {"field": exc.field}
    elif isinstance(exc, ResponseError):
        details = {"backend_status": exc.status_code}

    return AppException(
        error_code=error_code,
        status_code=STATUS_FOR_CODE[error_code],
        message=str(exc),
        details=details,
    )
