"""
Per-operation option records.

One model per transform and per encoder format. Field ranges are
documented here and enforced by the operations themselves.
"""

from typing import Optional

from pydantic import Field

from imagechain.core.constants import EncodeConstants
from imagechain.schemas.base import BaseOptions


class ResizeOptions(BaseOptions):
    """Resize target. At least one of width/height must be positive."""

    width: Optional[int] = Field(
        default=None, description="Target width in pixels (None or <= 0: not supplied)"
    )
    height: Optional[int] = Field(
        default=None, description="Target height in pixels (None or <= 0: not supplied)"
    )
    maintain_aspect: bool = Field(
        default=True, description="Scale both axes by one uniform factor"
    )


class CropOptions(BaseOptions):
    """Crop rectangle in current image coordinates."""

    x: int = Field(..., description="Left edge, must be >= 0")
    y: int = Field(..., description="Top edge, must be >= 0")
    width: int = Field(..., description="Rectangle width, must be > 0")
    height: int = Field(..., description="Rectangle height, must be > 0")


class RotateOptions(BaseOptions):
    """Rotation angle in degrees, positive is clockwise."""

    angle: float = Field(default=0.0, description="Angle in degrees (clockwise)")


class WatermarkOptions(BaseOptions):
    """Placement and strength of a watermark overlay."""

    x: int = Field(default=0, description="Overlay left edge on the base (may be negative)")
    y: int = Field(default=0, description="Overlay top edge on the base (may be negative)")
    opacity: float = Field(default=1.0, description="Overlay opacity, clamped to [0, 1]")


class OpacityOptions(BaseOptions):
    """Whole-image opacity factor."""

    opacity: float = Field(default=1.0, description="Opacity factor, clamped to [0, 1]")


class EncodeJPEGOptions(BaseOptions):
    """Lossy family encoder options."""

    quality: int = Field(
        default=EncodeConstants.DEFAULT_JPEG_QUALITY,
        description="Quality 1-100; out-of-range values fall back to the default",
    )
    interlace: bool = Field(default=False, description="Write a progressive JPEG")


class EncodePNGOptions(BaseOptions):
    """Lossless family encoder options."""

    compression: int = Field(
        default=EncodeConstants.DEFAULT_PNG_COMPRESSION,
        description="zlib level 0-9; out-of-range values fall back to the default",
    )
    interlace: bool = Field(default=False, description="Request Adam7 interlacing")
