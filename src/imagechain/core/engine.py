"""
Image engine binding layer.

Wraps the external primitives the handle API is built on:
- OpenCV (cv2) for decode, resample, crop, rotate and encode
- NumPy for rasters and "over" compositing
- Pillow for container introspection (source format, resolution)

Every primitive takes rasters and returns new rasters; nothing here mutates
its inputs. Failures surface as exceptions for the caller to map to a Status.
"""

import io
import logging
import weakref
from dataclasses import dataclass, field, replace
from threading import Lock
from typing import Dict, Optional, Sequence, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from imagechain.core.constants import ImageConstants
from imagechain.core.enums import Status
from imagechain.core.errors import EngineNotInitializedError, EngineOperationError

logger = logging.getLogger(__name__)


@dataclass
class Raster:
    """
    Decoded pixel data plus what the engine knows about its origin.

    Pixels follow OpenCV conventions: HxW for single-channel images,
    HxWxC otherwise, colour in BGR(A) order.
    """

    pixels: np.ndarray
    loader: Optional[str] = None
    density: Optional[Tuple[float, float]] = field(default=None)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def bands(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.bands in (
            ImageConstants.GRAYSCALE_ALPHA_CHANNELS,
            ImageConstants.COLOR_ALPHA_CHANNELS,
        )

    @property
    def max_value(self) -> float:
        return max_value(self.pixels.dtype)

    def with_pixels(self, pixels: np.ndarray) -> "Raster":
        """Return a new raster carrying the same origin information."""
        return replace(self, pixels=pixels)


def max_value(dtype: np.dtype) -> float:
    """Full-scale sample value for a pixel dtype."""
    if np.issubdtype(dtype, np.integer):
        return float(np.iinfo(dtype).max)
    return 1.0


# ==============================================================================
# Engine lifecycle
# ==============================================================================


class Engine:
    """
    Process-wide engine state.

    init() and shutdown() bracket all handle activity. Live handles are
    tracked weakly so shutdown can report leaks without keeping them alive.
    """

    def __init__(self):
        self._initialized = False
        self._num_threads: Optional[int] = None
        self._handles: "weakref.WeakSet" = weakref.WeakSet()
        self.lock = Lock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def init(self, num_threads: Optional[int] = None) -> Status:
        """
        Initialize the engine.

        Args:
            num_threads: OpenCV worker threads (None or negative keeps the
                OpenCV default)

        Returns:
            SUCCESS, or ENGINE_INIT_FAILURE if OpenCV could not be configured
        """
        with self.lock:
            if self._initialized:
                logger.debug("Image engine already initialized")
                return Status.SUCCESS

            try:
                if num_threads is not None and num_threads >= 0:
                    cv2.setNumThreads(num_threads)
                cv2.setUseOptimized(True)
                self._num_threads = cv2.getNumThreads()
            except Exception as e:
                logger.error(f"Failed to initialize image engine: {e}")
                return Status.ENGINE_INIT_FAILURE

            self._initialized = True
            logger.info(
                f"Image engine initialized: OpenCV {cv2.__version__}, "
                f"{self._num_threads} threads"
            )
            return Status.SUCCESS

    def shutdown(self) -> None:
        """Shut the engine down. Safe to call when not initialized."""
        with self.lock:
            if not self._initialized:
                return

            live_handles = self._live_count()
            if live_handles:
                logger.warning(f"Image engine shutting down with {live_handles} live handle(s)")

            self._initialized = False
            logger.info("Image engine shutdown complete")

    def _live_count(self) -> int:
        return sum(1 for handle in list(self._handles) if handle.is_valid)

    def require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise EngineNotInitializedError(operation)

    def track(self, handle) -> None:
        with self.lock:
            self._handles.add(handle)

    def get_stats(self) -> Dict:
        """Get engine statistics"""
        with self.lock:
            return {
                "initialized": self._initialized,
                "live_handles": self._live_count(),
                "num_threads": self._num_threads,
                "opencv_version": cv2.__version__,
            }


engine = Engine()


def init(num_threads: Optional[int] = None) -> Status:
    """Initialize the process-wide engine."""
    return engine.init(num_threads)


def shutdown() -> None:
    """Shut down the process-wide engine."""
    engine.shutdown()


# ==============================================================================
# Decode / introspect
# ==============================================================================


def _probe_container(data: bytes) -> Tuple[Optional[str], Optional[Tuple[float, float]]]:
    """Read source format and resolution from the container headers."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            loader = img.format.lower() if img.format else None
            dpi = img.info.get("dpi")
            density = (float(dpi[0]), float(dpi[1])) if dpi else None
            return loader, density
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        logger.debug(f"Container probe failed: {e}")
        return None, None


def decode_bytes(data: Union[bytes, bytearray, memoryview]) -> Raster:
    """
    Decode an in-memory encoded image.

    The input is copied; the returned raster holds no reference to it.

    Raises:
        EngineOperationError: If OpenCV cannot decode the data
    """
    payload = bytes(data)
    pixels = cv2.imdecode(np.frombuffer(payload, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
    if pixels is None:
        raise EngineOperationError("Failed to decode image data")

    loader, density = _probe_container(payload)
    return Raster(pixels=pixels, loader=loader, density=density)


def decode_file(path: str) -> Raster:
    """
    Decode the image stored at path.

    Raises:
        OSError: If the file cannot be read
        EngineOperationError: If OpenCV cannot decode the content
    """
    with open(path, "rb") as f:
        data = f.read()
    return decode_bytes(data)


def loader_tag(raster: Raster) -> str:
    """Source container format recorded at decode time."""
    if not raster.loader:
        raise LookupError("Raster has no recorded loader")
    return raster.loader


def interpretation(raster: Raster) -> str:
    """Colorspace name derived from band count and sample depth."""
    dtype = raster.pixels.dtype
    grey = raster.bands <= ImageConstants.GRAYSCALE_ALPHA_CHANNELS

    if dtype == np.uint8:
        return "b-w" if grey else "srgb"
    if dtype == np.uint16:
        return "grey16" if grey else "rgb16"
    raise LookupError(f"No colorspace for {raster.bands}-band {dtype} raster")


def resolution(raster: Raster) -> Tuple[float, float]:
    """Horizontal and vertical resolution in dots per inch."""
    if raster.density is None:
        raise LookupError("Raster has no recorded resolution")
    return raster.density


# ==============================================================================
# Geometry primitives
# ==============================================================================


def resample(raster: Raster, scale_x: float, scale_y: float) -> Raster:
    """Resize by independent scale factors using Lanczos interpolation."""
    width = max(1, int(round(raster.width * scale_x)))
    height = max(1, int(round(raster.height * scale_y)))

    # INTER_LANCZOS4 is the smooth high-quality kernel; never nearest-neighbour
    pixels = cv2.resize(raster.pixels, (width, height), interpolation=cv2.INTER_LANCZOS4)
    return raster.with_pixels(pixels)


def crop(raster: Raster, x: int, y: int, width: int, height: int) -> Raster:
    """Extract a rectangle; the caller has validated the bounds."""
    return raster.with_pixels(raster.pixels[y : y + height, x : x + width].copy())


_RIGHT_ANGLE_ROTATIONS = {
    90.0: cv2.ROTATE_90_CLOCKWISE,
    180.0: cv2.ROTATE_180,
    270.0: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def rotate(raster: Raster, angle: float, background: Sequence[float]) -> Raster:
    """
    Rotate clockwise by angle degrees, growing the canvas to fit.

    Right angles are exact transpositions. Other angles are resampled
    bilinearly, with uncovered canvas filled by background.
    """
    angle = float(angle) % 360.0

    if angle == 0.0:
        return raster.with_pixels(raster.pixels.copy())

    if angle in _RIGHT_ANGLE_ROTATIONS:
        return raster.with_pixels(cv2.rotate(raster.pixels, _RIGHT_ANGLE_ROTATIONS[angle]))

    width, height = raster.width, raster.height
    center = (width / 2.0, height / 2.0)

    # OpenCV treats positive angles as counter-clockwise
    matrix = cv2.getRotationMatrix2D(center, -angle, 1.0)
    cos, sin = abs(matrix[0, 0]), abs(matrix[0, 1])
    new_width = max(1, int(round(height * sin + width * cos)))
    new_height = max(1, int(round(height * cos + width * sin)))

    matrix[0, 2] += new_width / 2.0 - center[0]
    matrix[1, 2] += new_height / 2.0 - center[1]

    pixels = cv2.warpAffine(
        raster.pixels,
        matrix,
        (new_width, new_height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=tuple(background),
    )
    return raster.with_pixels(pixels)


# ==============================================================================
# Band primitives
# ==============================================================================


def _as_3d(pixels: np.ndarray) -> np.ndarray:
    return pixels[..., np.newaxis] if pixels.ndim == 2 else pixels


def add_alpha(raster: Raster) -> Raster:
    """Append a fully opaque alpha band."""
    pixels = _as_3d(raster.pixels)
    alpha = np.full(pixels.shape[:2] + (1,), raster.max_value, dtype=pixels.dtype)
    return raster.with_pixels(np.concatenate([pixels, alpha], axis=2))


def scale_alpha(raster: Raster, factor: float) -> Raster:
    """Multiply the last (alpha) band by factor, leaving colour bands untouched."""
    pixels = raster.pixels.copy()
    alpha = pixels[..., -1].astype(np.float64) * factor
    pixels[..., -1] = np.clip(np.rint(alpha), 0, raster.max_value).astype(pixels.dtype)
    return raster.with_pixels(pixels)


def to_uint8(raster: Raster) -> Raster:
    """Rescale samples to the 8-bit range. 8-bit rasters are returned as is."""
    if raster.pixels.dtype == np.uint8:
        return raster

    scale = 255.0 / raster.max_value
    pixels = np.clip(np.rint(raster.pixels.astype(np.float64) * scale), 0, 255)
    return raster.with_pixels(pixels.astype(np.uint8))


def flatten_alpha(raster: Raster, background: float) -> Raster:
    """Blend alpha onto a solid background and drop the alpha band."""
    if not raster.has_alpha:
        return raster

    pixels = raster.pixels.astype(np.float64)
    full = raster.max_value
    alpha = pixels[..., -1:] / full
    colour = pixels[..., :-1] * alpha + background * (1.0 - alpha)
    flat = np.clip(np.rint(colour), 0, full).astype(raster.pixels.dtype)

    if flat.shape[2] == 1:
        flat = flat[..., 0]
    return raster.with_pixels(flat)


def _match_colour_bands(colour: np.ndarray, bands: int) -> np.ndarray:
    """Convert overlay colour bands (HxWxC) to the base layout."""
    if colour.shape[2] == bands:
        return colour
    if bands == 1:
        return cv2.cvtColor(np.ascontiguousarray(colour), cv2.COLOR_BGR2GRAY)[..., np.newaxis]
    return np.repeat(colour, bands, axis=2)


def composite_over(base: Raster, overlay: Raster, x: int, y: int) -> Raster:
    """
    Composite overlay onto base at (x, y) with "over" alpha blending.

    The overlay must carry an alpha band. Offsets may be negative or run
    past the base edges; only the overlapping region is blended. The result
    keeps the base band layout and sample type.
    """
    base_pixels = _as_3d(base.pixels)
    result = base_pixels.copy()

    x0, y0 = max(x, 0), max(y, 0)
    x1 = min(x + overlay.width, base.width)
    y1 = min(y + overlay.height, base.height)
    if x0 >= x1 or y0 >= y1:
        logger.debug(f"Overlay at ({x}, {y}) does not intersect base")
        return base.with_pixels(result.reshape(base.pixels.shape))

    base_colour_bands = base.bands - 1 if base.has_alpha else base.bands
    overlay_pixels = _as_3d(overlay.pixels)[y0 - y : y1 - y, x0 - x : x1 - x]

    o_full, b_full = overlay.max_value, base.max_value
    o_alpha = overlay_pixels[..., -1:].astype(np.float64) / o_full
    o_colour = _match_colour_bands(overlay_pixels[..., :-1], base_colour_bands)
    o_colour = o_colour.astype(np.float64) / o_full

    region = base_pixels[y0:y1, x0:x1].astype(np.float64) / b_full
    b_colour = region[..., :base_colour_bands]

    if base.has_alpha:
        b_alpha = region[..., -1:]
        out_alpha = o_alpha + b_alpha * (1.0 - o_alpha)
        with np.errstate(divide="ignore", invalid="ignore"):
            blended = (o_colour * o_alpha + b_colour * b_alpha * (1.0 - o_alpha)) / out_alpha
        out_colour = np.where(out_alpha > 0, blended, b_colour)
        out = np.concatenate([out_colour, out_alpha], axis=2)
    else:
        out = o_colour * o_alpha + b_colour * (1.0 - o_alpha)

    result[y0:y1, x0:x1] = np.clip(np.rint(out * b_full), 0, b_full).astype(result.dtype)
    return base.with_pixels(result.reshape(base.pixels.shape))


# ==============================================================================
# Encode
# ==============================================================================


def encode(raster: Raster, extension: str, params: Sequence[int]) -> bytes:
    """
    Encode raster with OpenCV.

    Raises:
        EngineOperationError: If OpenCV reports an encoding failure
    """
    success, buffer = cv2.imencode(extension, raster.pixels, list(params))
    if not success:
        raise EngineOperationError(f"Failed to encode image to {extension}")
    return buffer.tobytes()
