"""
Shared exception classes and error handling utilities for Health Records Service API.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import RecordNotFoundError, RecordValidationError

    # In service layer - raise domain exceptions
    raise RecordNotFoundError(record_id=42)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class RecordServiceError(Exception):
    """
    Base exception for all Health Records Service domain errors.

    All custom exceptions should inherit from this class.
    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# RECORD EXCEPTIONS
# =============================================================================

class RecordNotFoundError(RecordServiceError):
    """Raised when no live health record exists for an id."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Health record not found"

    def __init__(self, record_id: Optional[int] = None, detail: Optional[str] = None, **kwargs: Any):
        if detail is None and record_id is not None:
            detail = f"a health record with id={record_id} not found"
        super().__init__(detail=detail, record_id=record_id, **kwargs)


class RecordValidationError(RecordServiceError):
    """Raised when a required record field fails validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid record data"

    def __init__(self, field: Optional[str] = None, detail: Optional[str] = None, **kwargs: Any):
        super().__init__(detail=detail, field=field, **kwargs)


class InsertionFailedError(RecordServiceError):
    """Raised when the primary store rejects or cannot complete a write."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Failed to insert health record"

    def __init__(self, record_id: Optional[int] = None, detail: Optional[str] = None, **kwargs: Any):
        super().__init__(detail=detail, record_id=record_id, **kwargs)


class RecordTooLargeError(InsertionFailedError):
    """Raised when a record's encoded form exceeds the configured size bound."""

    status_code = status.HTTP_413_CONTENT_TOO_LARGE
    detail = "Health record exceeds maximum allowed size"

    def __init__(
        self,
        record_id: Optional[int] = None,
        size: Optional[int] = None,
        max_size: Optional[int] = None,
        **kwargs: Any
    ):
        detail = None
        if size is not None and max_size is not None:
            detail = f"Health record is {size} bytes, maximum allowed is {max_size} bytes"
        super().__init__(record_id=record_id, detail=detail, size=size, max_size=max_size, **kwargs)


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(RecordServiceError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.detail
        super().__init__(detail=detail, operation=operation, **kwargs)


class IdCounterError(DatabaseError):
    """Raised when the persisted identifier counter cannot be advanced."""

    detail = "Cannot increment id counter"


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def record_service_exception_handler(
    request: Request,
    exc: RecordServiceError
) -> JSONResponse:
    """
    Handle RecordServiceError exceptions and return consistent JSON responses.

    This handler logs the error and returns a standardized JSON error response.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"RecordServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Call this function during app initialization to enable consistent
    error handling across all endpoints.

    Args:
        app: The FastAPI application instance.

    Example:
        app = FastAPI()
        setup_exception_handlers(app)
    """
    app.add_exception_handler(RecordServiceError, record_service_exception_handler)
