"""
Error types and exception-to-status mapping for imagechain.

The handle API reports outcomes through Status values. Exceptions raised
by the engine are caught at the call site and mapped here; only programmer
errors (engine used outside its init/shutdown bracket) propagate.
"""

import logging
from functools import wraps
from typing import Callable, Optional

import cv2

from imagechain.core.enums import Status

logger = logging.getLogger(__name__)


class ImageChainError(Exception):
    """Raised by Status.raise_for_status() for callers that prefer exceptions."""

    def __init__(self, status: Status, message: Optional[str] = None):
        self.status = status
        self.message = message or status.message
        super().__init__(self.message)


class EngineOperationError(Exception):
    """Raised by the engine layer when OpenCV reports failure without raising."""


class EngineNotInitializedError(RuntimeError):
    """Raised when a handle operation runs outside engine.init()/shutdown()."""

    def __init__(self, operation: str):
        super().__init__(f"Image engine is not initialized (operation: {operation})")
        self.operation = operation


# Maps engine exception types to statuses, checked in order
EXCEPTION_STATUS_MAPPING = (
    (MemoryError, Status.ALLOCATION_FAILURE),
    (cv2.error, Status.ENGINE_ERROR),
    (EngineOperationError, Status.ENGINE_ERROR),
    (OSError, Status.ENGINE_ERROR),
)


def map_exception_to_status(exc: BaseException) -> Status:
    """
    Map an exception raised inside an engine call to a Status.

    Anything without an explicit mapping becomes UNKNOWN_ERROR; an
    exception is never mapped to SUCCESS.
    """
    for exc_type, status in EXCEPTION_STATUS_MAPPING:
        if isinstance(exc, exc_type):
            return status
    return Status.UNKNOWN_ERROR


def status_boundary(operation: str, on_failure: Optional[Callable[[Status], object]] = None):
    """
    Decorator turning engine exceptions into status results.

    Args:
        operation: Operation name used in log messages
        on_failure: Builds the return value from the mapped status
            (defaults to returning the status itself)
    """
    build_failure = on_failure or (lambda status: status)

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)

            except EngineNotInitializedError:
                raise

            except Exception as e:
                status = map_exception_to_status(e)
                if status is Status.UNKNOWN_ERROR:
                    logger.error(f"Unexpected error during {operation}: {e}", exc_info=True)
                else:
                    logger.error(f"{status.value} during {operation}: {e}")
                return build_failure(status)

        return wrapper

    return decorator
