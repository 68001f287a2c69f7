"""
Standardized error handling for WOPI API.
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import traceback
from typing import Dict, Any, Optional
import logging

from ..domain.exceptions import (
    AuthError,
    CheckFileInfoError,
    NotFoundError,
)
from ..infrastructure.structured_logger import wopi_logger

logger = logging.getLogger(__name__)


class WOPIError(HTTPException):
    """Base WOPI error class."""

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(status_code=status_code, detail=message)


class TokenError(WOPIError):
    """Token-related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="TOKEN_ERROR",
            message=message,
            details=details
        )


class WOPIFileNotFoundError(WOPIError):
    """File not found error."""

    def __init__(self, file_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="FILE_NOT_FOUND",
            message=f"File not found: {file_id}",
            details={"file_id": file_id}
        )


class RepositoryError(WOPIError):
    """Metadata or version store failure."""

    def __init__(self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code=error_code,
            message=message,
            details=details
        )


def to_http_error(exc: CheckFileInfoError, differentiated: bool = False) -> HTTPException:
    """
    Map a CheckFileInfo failure to an HTTP error. By default every failure
    is a plain 400 Bad Request whose message carries the underlying cause.
    """
    if not differentiated:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"error returning file info: {exc.cause_message}"
        )
    if isinstance(exc, AuthError):
        return TokenError(exc.cause_message, details=exc.details)
    if isinstance(exc, NotFoundError):
        return WOPIFileNotFoundError(exc.file_id)
    return RepositoryError(exc.error_code, exc.cause_message, details=exc.details)


def create_error_response(
    error_code: str,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None
) -> JSONResponse:
    """Create standardized error response."""

    error_response = {
        "error": {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": details or {}
        }
    }

    if request_id:
        error_response["error"]["request_id"] = request_id

    wopi_logger.log_error(
        error_type=error_code,
        error_message=message,
        context={
            "status_code": status_code,
            "details": details,
            "request_id": request_id
        }
    )

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


async def wopi_error_handler(request: Request, exc: WOPIError) -> JSONResponse:
    """Handle WOPI errors."""
    request_id = getattr(request.state, "request_id", None)

    return create_error_response(
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        request_id=request_id
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic errors."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(f"Unhandled error: {str(exc)}\n{traceback.format_exc()}")

    # In production, don't expose internal errors
    if request.app.debug:
        message = str(exc)
        details = {"traceback": traceback.format_exc()}
    else:
        message = "Internal server error"
        details = {}

    return create_error_response(
        error_code="INTERNAL_ERROR",
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details=details,
        request_id=request_id
    )


# Error response models for OpenAPI documentation
ERROR_RESPONSES = {
    400: {
        "description": "Bad Request",
        "content": {
            "application/json": {
                "example": {
                    "detail": "error returning file info: Invalid or expired access token"
                }
            }
        }
    },
    401: {
        "description": "Unauthorized (differentiated errors only)",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "TOKEN_ERROR",
                        "message": "Invalid or expired access token",
                        "timestamp": "2024-01-01T00:00:00+00:00",
                        "details": {}
                    }
                }
            }
        }
    },
    404: {
        "description": "Not Found (differentiated errors only)",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "FILE_NOT_FOUND",
                        "message": "File not found: 42",
                        "timestamp": "2024-01-01T00:00:00+00:00",
                        "details": {"file_id": "42"}
                    }
                }
            }
        }
    },
    500: {
        "description": "Internal Server Error",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": "Internal server error",
                        "timestamp": "2024-01-01T00:00:00+00:00",
                        "details": {}
                    }
                }
            }
        }
    }
}
