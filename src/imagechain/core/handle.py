"""
Image Handle - single-owner, mutable image resource.

A handle wraps one decoded raster. Transforms swap the raster in place, so
a caller keeps the same handle through a whole pipeline. A handle is either
valid or released; operations on a released handle report INVALID_HANDLE.
"""

import logging
import os
import uuid
import weakref
from typing import Optional, Tuple, Union

from imagechain.core.engine import Raster, decode_bytes, decode_file, engine
from imagechain.core.enums import ImageFormat, Status
from imagechain.core.errors import status_boundary

logger = logging.getLogger(__name__)


class _HandleState:
    """Raster slot shared between a handle and its finalizer."""

    __slots__ = ("raster",)

    def __init__(self, raster: Raster):
        self.raster: Optional[Raster] = raster


def _free_raster(state: _HandleState, handle_id: str) -> None:
    """Drop the raster. Runs at most once per handle (weakref.finalize)."""
    state.raster = None
    logger.debug(f"Released image handle {handle_id}")


class ImageHandle:
    """
    Opaque handle to an in-memory image and its current transform state.

    Handles are not copyable and not safe for concurrent mutation. Use them
    as context managers so they are released on every exit path:

        with load_image_or_raise("input.jpg") as img:
            img.resize(width=800)
            buffer, status = img.encode(ImageFormat.JPEG, quality=85)

    Explicit release() and garbage collection share one release path, so a
    raster is never freed twice.
    """

    def __init__(self, raster: Raster, source: str = "memory"):
        self.handle_id = str(uuid.uuid4())
        self.source = source
        self._state = _HandleState(raster)

        self._finalizer = weakref.finalize(self, _free_raster, self._state, self.handle_id)
        self._finalizer.atexit = False

        engine.track(self)
        logger.debug(
            f"Created image handle {self.handle_id} from {source}: "
            f"{raster.width}x{raster.height}, {raster.bands} bands"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_valid(self) -> bool:
        return self._state.raster is not None

    @property
    def raster(self) -> Optional[Raster]:
        """Current raster, or None once released."""
        return self._state.raster

    def swap_raster(self, raster: Raster) -> None:
        """Replace the current raster with a fully computed result."""
        if self._state.raster is None:
            raise ValueError(f"Cannot swap raster on released handle {self.handle_id}")
        self._state.raster = raster

    def release(self) -> None:
        """Release the raster. Idempotent."""
        self._finalizer()

    def __enter__(self) -> "ImageHandle":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release()

    def __copy__(self):
        raise TypeError("ImageHandle cannot be copied; it is a single-owner resource")

    def __deepcopy__(self, memo):
        raise TypeError("ImageHandle cannot be copied; it is a single-owner resource")

    def __repr__(self) -> str:
        raster = self._state.raster
        if raster is None:
            return f"<ImageHandle {self.handle_id} released>"
        return f"<ImageHandle {self.handle_id} {raster.width}x{raster.height}x{raster.bands}>"

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def resize(self, options=None, **kwargs) -> Status:
        from imagechain.core.image.transforms import resize_image
        from imagechain.schemas.options import ResizeOptions

        return resize_image(self, options or ResizeOptions(**kwargs))

    def crop(self, options=None, **kwargs) -> Status:
        from imagechain.core.image.transforms import crop_image
        from imagechain.schemas.options import CropOptions

        return crop_image(self, options or CropOptions(**kwargs))

    def rotate(self, options=None, **kwargs) -> Status:
        from imagechain.core.image.transforms import rotate_image
        from imagechain.schemas.options import RotateOptions

        return rotate_image(self, options or RotateOptions(**kwargs))

    def watermark(self, overlay: "ImageHandle", options=None, **kwargs) -> Status:
        from imagechain.core.image.transforms import watermark_image
        from imagechain.schemas.options import WatermarkOptions

        return watermark_image(self, overlay, options or WatermarkOptions(**kwargs))

    def change_opacity(self, options=None, **kwargs) -> Status:
        from imagechain.core.image.transforms import change_image_opacity
        from imagechain.schemas.options import OpacityOptions

        return change_image_opacity(self, options or OpacityOptions(**kwargs))

    def extract_metadata(self):
        from imagechain.core.image.metadata import extract_metadata

        return extract_metadata(self)

    def encode(self, fmt: Union[ImageFormat, str], options=None, **kwargs):
        from imagechain.core.image.encoder import encode_to_format

        return encode_to_format(self, fmt, options, **kwargs)


# ==============================================================================
# Load / release
# ==============================================================================


@status_boundary("load_image", on_failure=lambda status: (None, status))
def load_image(path: Union[str, "os.PathLike[str]", None]) -> Tuple[Optional[ImageHandle], Status]:
    """
    Load and decode an image file.

    Args:
        path: File path (UTF-8)

    Returns:
        (handle, SUCCESS), or (None, failure status). An empty path gives
        INVALID_INPUT; unreadable or undecodable files give ENGINE_ERROR.
    """
    engine.require_initialized("load_image")

    file_path = os.fspath(path) if path is not None else ""
    if not file_path:
        logger.error("Input path for image loading is empty")
        return None, Status.INVALID_INPUT

    raster = decode_file(file_path)
    return ImageHandle(raster, source=file_path), Status.SUCCESS


@status_boundary("load_image_from_bytes", on_failure=lambda status: (None, status))
def load_image_from_bytes(
    data: Union[bytes, bytearray, memoryview, None],
) -> Tuple[Optional[ImageHandle], Status]:
    """
    Decode an image held in memory.

    The buffer is copied during the call; the caller keeps ownership of it.

    Returns:
        (handle, SUCCESS), or (None, failure status). An empty buffer gives
        INVALID_INPUT without attempting a decode.
    """
    engine.require_initialized("load_image_from_bytes")

    if data is None or len(data) == 0:
        logger.error("Image data for loading is empty")
        return None, Status.INVALID_INPUT

    raster = decode_bytes(data)
    return ImageHandle(raster, source="bytes"), Status.SUCCESS


def load_image_or_raise(path) -> ImageHandle:
    """Load an image file, raising ImageChainError on failure."""
    handle, status = load_image(path)
    status.raise_for_status()
    return handle


def release(handle: Optional[ImageHandle]) -> None:
    """Release a handle. None and already-released handles are no-ops."""
    if handle is None:
        return
    handle.release()
