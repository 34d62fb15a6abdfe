"""
imagechain - handle-based image transform pipeline.

Load an image into a handle, transform it in place, read its metadata,
encode it, and release it:

    import imagechain

    imagechain.init()
    handle, status = imagechain.load_image("input.jpg")
    if status.is_success:
        with handle:
            handle.resize(width=800)
            buffer, status = handle.encode(imagechain.ImageFormat.JPEG, quality=85)
    imagechain.shutdown()
"""

__version__ = "1.0.0"

from imagechain.core.engine import engine, init, shutdown
from imagechain.core.enums import ImageFormat, OperationType, Status
from imagechain.core.errors import EngineNotInitializedError, ImageChainError
from imagechain.core.handle import (
    ImageHandle,
    load_image,
    load_image_from_bytes,
    load_image_or_raise,
    release,
)
from imagechain.core.image import (
    EncodedBuffer,
    change_image_opacity,
    crop_image,
    encode_to_format,
    encode_to_jpeg,
    encode_to_png,
    extract_metadata,
    resize_image,
    rotate_image,
    watermark_image,
)
from imagechain.schemas import (
    CropOptions,
    EncodeJPEGOptions,
    EncodePNGOptions,
    ImageMeta,
    OpacityOptions,
    ResizeOptions,
    RotateOptions,
    WatermarkOptions,
)

__all__ = [
    "__version__",
    # Engine lifecycle
    "engine",
    "init",
    "shutdown",
    # Core types
    "ImageFormat",
    "OperationType",
    "Status",
    "EngineNotInitializedError",
    "ImageChainError",
    # Handles
    "ImageHandle",
    "load_image",
    "load_image_from_bytes",
    "load_image_or_raise",
    "release",
    # Operations
    "resize_image",
    "crop_image",
    "rotate_image",
    "watermark_image",
    "change_image_opacity",
    "extract_metadata",
    "encode_to_format",
    "encode_to_jpeg",
    "encode_to_png",
    "EncodedBuffer",
    # Options
    "ResizeOptions",
    "CropOptions",
    "RotateOptions",
    "WatermarkOptions",
    "OpacityOptions",
    "EncodeJPEGOptions",
    "EncodePNGOptions",
    "ImageMeta",
]
