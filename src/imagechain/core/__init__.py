"""
Core modules for imagechain
"""

from .engine import Engine, Raster
from .enums import ImageFormat, OperationType, Status
from .errors import EngineNotInitializedError, ImageChainError
from .handle import ImageHandle, load_image, load_image_from_bytes, load_image_or_raise, release

__all__ = [
    "Engine",
    "Raster",
    "ImageFormat",
    "OperationType",
    "Status",
    "EngineNotInitializedError",
    "ImageChainError",
    "ImageHandle",
    "load_image",
    "load_image_from_bytes",
    "load_image_or_raise",
    "release",
]
