"""
Custom exceptions and handlers for docvid API.

This module defines custom exception classes and handlers for API error management.
Every error leaves the service as ``{"error": "<message>"}``.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from typing import Optional, Dict, Any
from .models.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIException(Exception):
    """Base API exception."""
    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(APIException):
    """Validation error (missing field/file, bad type, oversized upload)."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 400, details)


class NotFoundError(APIException):
    """Resource not found error."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 404, details)


class ProcessingError(APIException):
    """Video processing error."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, 500, details)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions."""
    if exc.details:
        logger.debug(f"{exc.__class__.__name__} details: {exc.details}")
    return _error_response(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return _error_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Handle malformed requests FastAPI rejects before reaching a route."""
    return _error_response(400, "Invalid request.")


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.exception(f"Unhandled error for {request.method} {request.url.path}: {exc}")
    return _error_response(500, "An internal server error occurred")
