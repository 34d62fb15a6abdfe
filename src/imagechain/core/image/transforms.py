"""
In-place transform operations on image handles.

Each operation:
- validates the handle and its options before touching the engine
- computes the result from the current raster
- swaps the result into the handle only after it is complete

A failed operation therefore leaves the handle exactly as it was.
"""

import logging
from typing import Optional, Tuple

from imagechain.core import engine as image_engine
from imagechain.core.constants import ImageConstants
from imagechain.core.engine import Raster, engine
from imagechain.core.enums import Status
from imagechain.core.errors import status_boundary
from imagechain.core.handle import ImageHandle
from imagechain.schemas.options import (
    CropOptions,
    OpacityOptions,
    ResizeOptions,
    RotateOptions,
    WatermarkOptions,
)

logger = logging.getLogger(__name__)


def _current_raster(handle: Optional[ImageHandle], operation: str) -> Optional[Raster]:
    """Return the handle's raster, or None (logged) if the handle is unusable."""
    engine.require_initialized(operation)

    if handle is None or not handle.is_valid:
        logger.error(f"Invalid image handle for {operation}")
        return None
    return handle.raster


def clamp_opacity(opacity: float) -> float:
    """Clamp an opacity factor to [0, 1]."""
    return max(ImageConstants.MIN_OPACITY, min(ImageConstants.MAX_OPACITY, float(opacity)))


def compute_resize_scale(
    source_width: int,
    source_height: int,
    width: Optional[int],
    height: Optional[int],
    maintain_aspect: bool,
) -> Tuple[float, float]:
    """
    Compute horizontal and vertical scale factors for a resize.

    Non-positive target dimensions count as not supplied. With
    maintain_aspect one uniform factor is used: the smaller of the supplied
    target/source ratios. Without it each supplied dimension scales its own
    axis, and a single supplied dimension also scales the other axis.

    Raises:
        ValueError: If neither dimension is supplied
    """
    target_w = width if width is not None and width > 0 else None
    target_h = height if height is not None and height > 0 else None

    if target_w is None and target_h is None:
        raise ValueError("At least one of width/height must be positive")

    ratio_x = target_w / source_width if target_w is not None else None
    ratio_y = target_h / source_height if target_h is not None else None

    if maintain_aspect:
        scale = min(r for r in (ratio_x, ratio_y) if r is not None)
        return scale, scale

    if ratio_x is None:
        ratio_x = ratio_y
    elif ratio_y is None:
        ratio_y = ratio_x
    return ratio_x, ratio_y


@status_boundary("resize_image")
def resize_image(handle: ImageHandle, options: ResizeOptions) -> Status:
    """
    Resize the handle's image.

    Args:
        handle: Image handle (mutated on success)
        options: Target width/height and aspect mode

    Returns:
        SUCCESS, INVALID_HANDLE, INVALID_DIMENSIONS or an engine failure status
    """
    raster = _current_raster(handle, "resize_image")
    if raster is None:
        return Status.INVALID_HANDLE

    try:
        scale_x, scale_y = compute_resize_scale(
            raster.width, raster.height, options.width, options.height, options.maintain_aspect
        )
    except ValueError as e:
        logger.warning(f"Invalid dimensions for resize: {e}")
        return Status.INVALID_DIMENSIONS

    resized = image_engine.resample(raster, scale_x, scale_y)
    handle.swap_raster(resized)

    logger.debug(
        f"Resized {handle.handle_id}: {raster.width}x{raster.height} -> "
        f"{resized.width}x{resized.height}"
    )
    return Status.SUCCESS


@status_boundary("crop_image")
def crop_image(handle: ImageHandle, options: CropOptions) -> Status:
    """
    Crop the handle's image to a rectangle.

    Bounds are checked against the image's current size.

    Returns:
        SUCCESS, INVALID_HANDLE, INVALID_DIMENSIONS, INVALID_POSITION,
        INVALID_BOUNDS or an engine failure status
    """
    raster = _current_raster(handle, "crop_image")
    if raster is None:
        return Status.INVALID_HANDLE

    if options.width <= 0 or options.height <= 0:
        logger.warning(f"Invalid crop size {options.width}x{options.height}")
        return Status.INVALID_DIMENSIONS

    if options.x < 0 or options.y < 0:
        logger.warning(f"Invalid crop position ({options.x}, {options.y})")
        return Status.INVALID_POSITION

    if options.x + options.width > raster.width or options.y + options.height > raster.height:
        logger.warning(
            f"Crop area {options.width}x{options.height} at ({options.x}, {options.y}) "
            f"extends beyond image {raster.width}x{raster.height}"
        )
        return Status.INVALID_BOUNDS

    cropped = image_engine.crop(raster, options.x, options.y, options.width, options.height)
    handle.swap_raster(cropped)

    logger.debug(f"Cropped {handle.handle_id} to {cropped.width}x{cropped.height}")
    return Status.SUCCESS


def rotation_background(raster: Raster) -> Tuple[float, ...]:
    """
    Fill colour for canvas uncovered by a rotation.

    Transparent when the image has alpha, white for colour images,
    black for greyscale.
    """
    if raster.has_alpha:
        return (0.0,) * raster.bands
    if raster.bands >= ImageConstants.COLOR_CHANNELS:
        return (raster.max_value,) * raster.bands
    return (0.0,) * raster.bands


@status_boundary("rotate_image")
def rotate_image(handle: ImageHandle, options: RotateOptions) -> Status:
    """
    Rotate the handle's image clockwise by options.angle degrees.

    Returns:
        SUCCESS, INVALID_HANDLE or an engine failure status
    """
    raster = _current_raster(handle, "rotate_image")
    if raster is None:
        return Status.INVALID_HANDLE

    rotated = image_engine.rotate(raster, options.angle, rotation_background(raster))
    handle.swap_raster(rotated)

    logger.debug(
        f"Rotated {handle.handle_id} by {options.angle} deg: "
        f"{rotated.width}x{rotated.height}"
    )
    return Status.SUCCESS


@status_boundary("watermark_image")
def watermark_image(
    base: ImageHandle, overlay: ImageHandle, options: WatermarkOptions
) -> Status:
    """
    Composite overlay onto base at (x, y).

    The overlay handle is read but never modified; it stays owned by the
    caller. Opacity is clamped to [0, 1] and scales only the overlay alpha.

    Returns:
        SUCCESS, INVALID_HANDLE or an engine failure status
    """
    base_raster = _current_raster(base, "watermark_image")
    overlay_raster = _current_raster(overlay, "watermark_image")
    if base_raster is None or overlay_raster is None:
        return Status.INVALID_HANDLE

    opacity = clamp_opacity(options.opacity)

    mark = overlay_raster
    if not mark.has_alpha:
        mark = image_engine.add_alpha(mark)
    if opacity < 1.0:
        mark = image_engine.scale_alpha(mark, opacity)

    result = image_engine.composite_over(base_raster, mark, options.x, options.y)
    base.swap_raster(result)

    logger.debug(
        f"Watermarked {base.handle_id} with {overlay.handle_id} at "
        f"({options.x}, {options.y}), opacity={opacity}"
    )
    return Status.SUCCESS


@status_boundary("change_image_opacity")
def change_image_opacity(handle: ImageHandle, options: OpacityOptions) -> Status:
    """
    Scale the image's alpha channel by an opacity factor.

    An opaque alpha channel is added first when the image has none.

    Returns:
        SUCCESS, INVALID_HANDLE or an engine failure status
    """
    raster = _current_raster(handle, "change_image_opacity")
    if raster is None:
        return Status.INVALID_HANDLE

    opacity = clamp_opacity(options.opacity)

    working = raster if raster.has_alpha else image_engine.add_alpha(raster)
    result = image_engine.scale_alpha(working, opacity)
    handle.swap_raster(result)

    logger.debug(f"Changed opacity of {handle.handle_id} to {opacity}")
    return Status.SUCCESS
