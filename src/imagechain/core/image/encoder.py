"""
Encoder - serializes a handle's current raster to an owned byte buffer.

Two format families are supported:
- lossy (JPEG): quality 1-100, progressive toggle
- lossless (PNG): compression 0-9, interlace toggle

Out-of-range quality/compression values fall back to documented defaults
rather than failing.
"""

import logging
from typing import Optional, Tuple, Union

import cv2

from imagechain.core import engine as image_engine
from imagechain.core.constants import EncodeConstants
from imagechain.core.engine import Raster, engine
from imagechain.core.enums import ImageFormat, Status
from imagechain.core.errors import status_boundary
from imagechain.core.handle import ImageHandle
from imagechain.core.image.converters import to_base64
from imagechain.schemas.options import EncodeJPEGOptions, EncodePNGOptions

logger = logging.getLogger(__name__)

EncodeOptions = Union[EncodeJPEGOptions, EncodePNGOptions]

FORMAT_OPTIONS = {
    ImageFormat.JPEG: EncodeJPEGOptions,
    ImageFormat.PNG: EncodePNGOptions,
}

FORMAT_ALIASES = {"jpg": ImageFormat.JPEG, "jpeg": ImageFormat.JPEG, "png": ImageFormat.PNG}


class EncodedBuffer:
    """
    Owned, length-tagged encoded image bytes.

    An empty buffer (no data, size 0) is what every failed encode returns.
    release() drops the data and may be called any number of times.
    """

    def __init__(self, data: Optional[bytes] = None):
        self._data = data if data else None

    @classmethod
    def empty(cls) -> "EncodedBuffer":
        return cls(None)

    @property
    def data(self) -> Optional[bytes]:
        return self._data

    @property
    def size(self) -> int:
        return len(self._data) if self._data is not None else 0

    @property
    def is_empty(self) -> bool:
        return self._data is None

    def to_base64(self) -> str:
        """Base64 text of the buffer (empty string for an empty buffer)."""
        if self._data is None:
            return ""
        return to_base64(self._data)

    def release(self) -> None:
        self._data = None

    def __len__(self) -> int:
        return self.size

    def __bool__(self) -> bool:
        return self._data is not None

    def __bytes__(self) -> bytes:
        return self._data or b""

    def __repr__(self) -> str:
        return f"<EncodedBuffer {self.size} bytes>"


def parse_format(value: Union[ImageFormat, str]) -> ImageFormat:
    """
    Parse a format selector.

    Accepts ImageFormat members or names/extensions such as "JPEG", ".jpg", "png".

    Raises:
        ValueError: If the format is not supported
    """
    if isinstance(value, ImageFormat):
        return value

    key = str(value).strip().lower().lstrip(".")
    if key not in FORMAT_ALIASES:
        raise ValueError(f"Unsupported output format: {value}")
    return FORMAT_ALIASES[key]


def jpeg_params(options: EncodeJPEGOptions) -> list:
    """OpenCV JPEG writer parameters, with quality fallback applied."""
    quality = options.quality
    if not EncodeConstants.MIN_JPEG_QUALITY <= quality <= EncodeConstants.MAX_JPEG_QUALITY:
        logger.debug(f"JPEG quality {quality} out of range, using default")
        quality = EncodeConstants.DEFAULT_JPEG_QUALITY

    return [
        cv2.IMWRITE_JPEG_QUALITY,
        quality,
        cv2.IMWRITE_JPEG_PROGRESSIVE,
        1 if options.interlace else 0,
    ]


def png_params(options: EncodePNGOptions) -> list:
    """OpenCV PNG writer parameters, with compression fallback applied."""
    compression = options.compression
    low, high = EncodeConstants.MIN_PNG_COMPRESSION, EncodeConstants.MAX_PNG_COMPRESSION
    if not low <= compression <= high:
        logger.debug(f"PNG compression {compression} out of range, using default")
        compression = EncodeConstants.DEFAULT_PNG_COMPRESSION

    if options.interlace:
        logger.info("PNG interlacing is not supported by OpenCV; writing non-interlaced")

    return [cv2.IMWRITE_PNG_COMPRESSION, compression]


def _prepare_raster(raster: Raster, fmt: ImageFormat) -> Raster:
    if fmt is ImageFormat.JPEG:
        # JPEG holds 8-bit samples only
        flat = image_engine.flatten_alpha(raster, EncodeConstants.JPEG_FLATTEN_BACKGROUND)
        return image_engine.to_uint8(flat)
    return raster


@status_boundary("encode_to_format", on_failure=lambda status: (EncodedBuffer.empty(), status))
def encode_to_format(
    handle: Optional[ImageHandle],
    fmt: Union[ImageFormat, str],
    options: Optional[EncodeOptions] = None,
    **kwargs,
) -> Tuple[EncodedBuffer, Status]:
    """
    Encode the handle's current raster.

    Args:
        handle: Image handle (never modified)
        fmt: Output format selector
        options: Format options; built from kwargs when omitted

    Returns:
        (EncodedBuffer, SUCCESS), or an empty buffer with the failure status.
        Unsupported formats and mismatched option types give INVALID_INPUT.
    """
    engine.require_initialized("encode_to_format")

    if handle is None or not handle.is_valid:
        logger.error("Invalid image handle for encoding")
        return EncodedBuffer.empty(), Status.INVALID_HANDLE

    try:
        output_format = parse_format(fmt)
    except ValueError as e:
        logger.error(str(e))
        return EncodedBuffer.empty(), Status.INVALID_INPUT

    options_type = FORMAT_OPTIONS[output_format]
    if options is None:
        try:
            options = options_type(**kwargs)
        except ValueError as e:
            logger.error(f"Invalid {output_format.value} encode options: {e}")
            return EncodedBuffer.empty(), Status.INVALID_INPUT
    elif not isinstance(options, options_type):
        logger.error(f"{type(options).__name__} cannot be used for {output_format.value} output")
        return EncodedBuffer.empty(), Status.INVALID_INPUT

    if output_format is ImageFormat.JPEG:
        params = jpeg_params(options)
    else:
        params = png_params(options)

    raster = _prepare_raster(handle.raster, output_format)
    data = image_engine.encode(raster, output_format.extension, params)

    logger.debug(f"Encoded {handle.handle_id} to {output_format.value}: {len(data)} bytes")
    return EncodedBuffer(data), Status.SUCCESS


def encode_to_jpeg(
    handle: Optional[ImageHandle], options: Optional[EncodeJPEGOptions] = None
) -> Tuple[EncodedBuffer, Status]:
    """Encode to JPEG."""
    return encode_to_format(handle, ImageFormat.JPEG, options or EncodeJPEGOptions())


def encode_to_png(
    handle: Optional[ImageHandle], options: Optional[EncodePNGOptions] = None
) -> Tuple[EncodedBuffer, Status]:
    """Encode to PNG."""
    return encode_to_format(handle, ImageFormat.PNG, options or EncodePNGOptions())
