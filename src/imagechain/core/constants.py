"""
Constants and configuration values for imagechain.
Centralizes all magic numbers and default values.
"""


# Encoding Constants
class EncodeConstants:
    """Constants related to output encoding."""

    # Lossy family (JPEG)
    MIN_JPEG_QUALITY = 1
    MAX_JPEG_QUALITY = 100
    DEFAULT_JPEG_QUALITY = 75

    # Lossless family (PNG)
    MIN_PNG_COMPRESSION = 0
    MAX_PNG_COMPRESSION = 9
    DEFAULT_PNG_COMPRESSION = 6

    # JPEG has no alpha; transparent pixels are flattened onto this value
    JPEG_FLATTEN_BACKGROUND = 0


# Image Constants
class ImageConstants:
    """Constants related to rasters and metadata."""

    # Resolution reported when the source carries none (dots per inch)
    DEFAULT_DENSITY = 72.0

    # Soft-fail value for format/colorspace lookups
    UNKNOWN_TAG = "unknown"

    # Opacity range
    MIN_OPACITY = 0.0
    MAX_OPACITY = 1.0

    # Channel counts
    GRAYSCALE_CHANNELS = 1
    GRAYSCALE_ALPHA_CHANNELS = 2
    COLOR_CHANNELS = 3
    COLOR_ALPHA_CHANNELS = 4


# API Constants
class APIConstants:
    """Constants related to the HTTP surface."""

    API_VERSION = "v1"
    MAX_UPLOAD_SIZE_MB = 50
    MAX_PIPELINE_STEPS = 32


# System Constants
class SystemConstants:
    """Constants related to process-wide settings."""

    LOG_LEVEL_DEFAULT = "INFO"
    # OpenCV keeps its own default thread count when negative
    ENGINE_THREADS_DEFAULT = -1
    MAX_ENGINE_THREADS = 64
