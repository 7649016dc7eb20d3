"""
Custom exceptions for the Interview Assistant application.

This module defines a hierarchy of exceptions to provide specific error handling
and better error messages throughout the application, plus the FastAPI handlers
that turn them into JSON responses.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class AppError(Exception):
    """Base exception for all application errors."""
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(AppError):
    """Exception raised when a user-supplied value (URL, message) is empty or malformed."""
    status_code = 400


class AccessDeniedError(AppError):
    """Exception raised when a fetched document sits behind a sign-in wall."""
    status_code = 403


class TransientNetworkError(AppError):
    """Exception raised when the transport fails while fetching a document."""
    status_code = 502


class UnsupportedEncodingError(AppError):
    """Exception raised when downloaded bytes cannot be decoded as text."""
    status_code = 422


class ConversionError(AppError):
    """Exception raised when document-to-markdown conversion is unavailable or yields nothing."""
    pass


class ConfigurationError(AppError):
    """Exception raised when configuration is invalid or missing."""
    pass


# ============================================================================
# FastAPI Exception Handlers
# ============================================================================

def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"Application error on {request.url.path}: {exc.message}", exc_info=True)
    else:
        logger.warning(f"Rejected request on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "message": exc.message, "timestamp": _timestamp()},
    )

async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error", "message": str(exc), "timestamp": _timestamp()},
    )

async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTP exception: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
