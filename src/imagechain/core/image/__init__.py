"""
Image operations on handles - functional architecture.

This package provides the operations of the handle pipeline as plain functions:
- transforms: In-place resize, crop, rotate, watermark, opacity
- metadata: Read-only snapshot of a handle's current state
- encoder: Serialization to JPEG/PNG buffers
- converters: Base64 helpers for encoded buffers

All functions are re-exported from this module for convenient access.
"""

# Base64 helpers
from imagechain.core.image.converters import from_base64, to_base64

# Encoder functions
from imagechain.core.image.encoder import (
    EncodedBuffer,
    encode_to_format,
    encode_to_jpeg,
    encode_to_png,
    parse_format,
)

# Metadata functions
from imagechain.core.image.metadata import extract_metadata

# Transform functions
from imagechain.core.image.transforms import (
    change_image_opacity,
    clamp_opacity,
    compute_resize_scale,
    crop_image,
    resize_image,
    rotate_image,
    rotation_background,
    watermark_image,
)

__all__ = [
    # Base64 helpers
    "from_base64",
    "to_base64",
    # Encoder functions
    "EncodedBuffer",
    "encode_to_format",
    "encode_to_jpeg",
    "encode_to_png",
    "parse_format",
    # Metadata functions
    "extract_metadata",
    # Transform functions
    "resize_image",
    "crop_image",
    "rotate_image",
    "watermark_image",
    "change_image_opacity",
    "clamp_opacity",
    "compute_resize_scale",
    "rotation_background",
]
