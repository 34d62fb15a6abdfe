"""
Centralized enums for imagechain.

This module contains all enumeration types used throughout the package,
providing a single source of truth for status codes and format selectors.
"""

from enum import Enum


# Operation outcome enums
class Status(str, Enum):
    """
    Closed set of outcomes reported by every handle operation.

    Operations never signal failure through any other channel; callers
    inspect the returned value or call raise_for_status().
    """

    SUCCESS = "SUCCESS"
    ENGINE_INIT_FAILURE = "ENGINE_INIT_FAILURE"
    INVALID_HANDLE = "INVALID_HANDLE"
    INVALID_INPUT = "INVALID_INPUT"
    ENGINE_ERROR = "ENGINE_ERROR"
    INVALID_DIMENSIONS = "INVALID_DIMENSIONS"
    INVALID_POSITION = "INVALID_POSITION"
    INVALID_BOUNDS = "INVALID_BOUNDS"
    ALLOCATION_FAILURE = "ALLOCATION_FAILURE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"

    @property
    def is_success(self) -> bool:
        return self is Status.SUCCESS

    @property
    def message(self) -> str:
        """Human readable description of the status."""
        return STATUS_MESSAGES[self]

    def raise_for_status(self) -> None:
        """Raise ImageChainError unless this status is SUCCESS."""
        if self is Status.SUCCESS:
            return

        # Imported here to keep enums free of package dependencies
        from imagechain.core.errors import ImageChainError

        raise ImageChainError(self)


STATUS_MESSAGES = {
    Status.SUCCESS: "operation completed successfully",
    Status.ENGINE_INIT_FAILURE: "image engine initialization failed",
    Status.INVALID_HANDLE: "invalid or released image handle",
    Status.INVALID_INPUT: "input is empty or unusable",
    Status.ENGINE_ERROR: "image engine internal error",
    Status.INVALID_DIMENSIONS: "invalid image dimensions",
    Status.INVALID_POSITION: "invalid image position",
    Status.INVALID_BOUNDS: "image operation out of bounds",
    Status.ALLOCATION_FAILURE: "memory allocation failed",
    Status.UNKNOWN_ERROR: "an unknown error occurred",
}


# Output format enums
class ImageFormat(str, Enum):
    """Encoder output formats."""

    JPEG = "jpeg"
    PNG = "png"

    @property
    def extension(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else ".png"

    @property
    def is_lossy(self) -> bool:
        return self is ImageFormat.JPEG


# Pipeline step enums
class OperationType(str, Enum):
    """Transform operations that can be chained on a handle."""

    RESIZE = "resize"
    CROP = "crop"
    ROTATE = "rotate"
    WATERMARK = "watermark"
    OPACITY = "opacity"
