"""
Metadata extraction for image handles.

Dimensions come straight from the current raster. Format, colorspace and
resolution are engine lookups that degrade to defaults on failure instead
of failing the whole call.
"""

import logging
from typing import Optional, Tuple

from imagechain.core import engine as image_engine
from imagechain.core.constants import ImageConstants
from imagechain.core.engine import engine
from imagechain.core.enums import Status
from imagechain.core.handle import ImageHandle
from imagechain.schemas.metadata import ImageMeta

logger = logging.getLogger(__name__)


def extract_metadata(handle: Optional[ImageHandle]) -> Tuple[ImageMeta, Status]:
    """
    Take a snapshot of a handle's current state.

    Args:
        handle: Image handle (never modified)

    Returns:
        (ImageMeta, SUCCESS), or a zero-valued ImageMeta with INVALID_HANDLE
    """
    engine.require_initialized("extract_metadata")

    if handle is None or not handle.is_valid:
        logger.warning("Invalid image handle provided for metadata extraction")
        return ImageMeta(), Status.INVALID_HANDLE

    raster = handle.raster

    try:
        fmt = image_engine.loader_tag(raster)
    except LookupError as e:
        logger.warning(f"Could not determine image format: {e}")
        fmt = ImageConstants.UNKNOWN_TAG

    try:
        colorspace = image_engine.interpretation(raster)
    except LookupError as e:
        logger.warning(f"Could not determine image colorspace: {e}")
        colorspace = ImageConstants.UNKNOWN_TAG

    try:
        density_x, density_y = image_engine.resolution(raster)
    except LookupError:
        density_x = density_y = ImageConstants.DEFAULT_DENSITY

    meta = ImageMeta(
        width=raster.width,
        height=raster.height,
        channels=raster.bands,
        format=fmt,
        colorspace=colorspace,
        density_x=density_x,
        density_y=density_y,
        file_size=0,
    )
    return meta, Status.SUCCESS
