"""
Custom exceptions and error handlers for the imagechain API.
Provides consistent error handling across all endpoints.
"""

import asyncio
import logging
import traceback
from functools import wraps
from typing import Dict, List, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from imagechain.core.enums import Status
from imagechain.schemas import ErrorDetails, StepResult

logger = logging.getLogger(__name__)


# HTTP status codes reported for failed handle operations
STATUS_HTTP_CODES = {
    Status.ENGINE_INIT_FAILURE: 503,
    Status.INVALID_HANDLE: 500,
    Status.INVALID_INPUT: 400,
    Status.ENGINE_ERROR: 422,
    Status.INVALID_DIMENSIONS: 400,
    Status.INVALID_POSITION: 400,
    Status.INVALID_BOUNDS: 400,
    Status.ALLOCATION_FAILURE: 507,
    Status.UNKNOWN_ERROR: 500,
}


# Custom exception classes
class ImageChainException(Exception):
    """Base exception for the imagechain API."""

    def __init__(self, message: str, status_code: int = 500, details: Optional[Dict] = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class PipelineException(ImageChainException):
    """Exception raised when a handle operation reports a failure status."""

    def __init__(
        self,
        result_status: Status,
        failed_step: Optional[int] = None,
        steps: Optional[List[StepResult]] = None,
    ):
        details = ErrorDetails(
            status=result_status,
            message=result_status.message,
            failed_step=failed_step,
            steps=steps or [],
        )
        where = f" at step {failed_step}" if failed_step is not None else ""
        super().__init__(
            message=f"Image processing failed{where}: {result_status.message}",
            status_code=STATUS_HTTP_CODES.get(result_status, 500),
            details=details.model_dump(mode="json"),
        )
        self.result_status = result_status


class InputTooLargeException(ImageChainException):
    """Exception raised when an uploaded image exceeds the size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            message=f"Input image too large: {size} bytes (limit {limit} bytes)",
            status_code=413,
            details={"size": size, "limit": limit},
        )


# Exception handlers for FastAPI
async def imagechain_exception_handler(
    request: Request, exc: ImageChainException
) -> JSONResponse:
    """
    Handler for custom imagechain exceptions.

    Args:
        request: FastAPI request
        exc: ImageChainException instance

    Returns:
        JSON response with error details
    """
    logger.error(f"ImageChainException: {exc.message}", extra={"details": exc.details})

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details, "type": exc.__class__.__name__},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for request validation errors.

    Args:
        request: FastAPI request
        exc: Validation exception

    Returns:
        JSON response with validation error details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"][1:]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    logger.warning(f"Validation error: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Validation failed", "details": errors, "type": "ValidationError"},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for unexpected exceptions.

    Args:
        request: FastAPI request
        exc: Any exception

    Returns:
        JSON response with generic error message
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    debug_mode = getattr(request.app.state, "debug", False)

    if debug_mode:
        # Debug mode exposes stack traces; never enable in production
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "details": {
                    "exception": str(exc),
                    "type": exc.__class__.__name__,
                    "traceback": traceback.format_exc(),
                },
                "type": "InternalError",
            },
        )

    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": {}, "type": "InternalError"},
    )


# Exception mapping for safe_endpoint decorator
# Maps exception types to (status_code, error_message, log_level, detail_builder)
EXCEPTION_MAPPING = {
    ValidationError: (400, "Validation failed", "warning", lambda e: {"details": e.errors()}),
    ValueError: (400, "Invalid value", "warning", lambda e: {"details": str(e)}),
    KeyError: (400, "Missing required field", "error", lambda e: {"field": str(e)}),
}


def safe_endpoint(func):
    """
    Decorator to wrap endpoint functions with error handling.

    Automatically catches and handles common exceptions using EXCEPTION_MAPPING.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            if asyncio.iscoroutinefunction(func):
                return await func(*args, **kwargs)
            else:
                return func(*args, **kwargs)

        except (ImageChainException, HTTPException):
            # Re-raise custom exceptions (handled by exception handler)
            raise

        except Exception as e:
            exception_type = type(e)

            if exception_type in EXCEPTION_MAPPING:
                status_code, error_msg, log_level, detail_builder = EXCEPTION_MAPPING[
                    exception_type
                ]

                log_message = f"{exception_type.__name__} in {func.__name__}: {e}"
                if log_level == "warning":
                    logger.warning(log_message)
                else:
                    logger.error(log_message)

                detail = {"error": error_msg}
                detail.update(detail_builder(e))

                raise HTTPException(status_code=status_code, detail=detail)

            else:
                logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=500, detail={"error": "Internal server error", "details": str(e)}
                )

    return wrapper


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ImageChainException, imagechain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
