"""
Base64 transport conversions.

Handles conversions between encoded image bytes and the base64 text used
by the HTTP surface. Data-URI prefixes ("data:image/png;base64,") are
accepted on input.
"""

import base64
import binascii
import logging
from typing import Union

logger = logging.getLogger(__name__)


def to_base64(data: Union[bytes, bytearray]) -> str:
    """
    Convert encoded image bytes to a base64 string.

    Args:
        data: Encoded image bytes

    Returns:
        Base64 encoded string
    """
    return base64.b64encode(bytes(data)).decode("utf-8")


def from_base64(base64_string: str) -> bytes:
    """
    Convert a base64 string (optionally a data URI) to bytes.

    Args:
        base64_string: Base64 encoded image

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the string is not valid base64
    """
    payload = base64_string.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]

    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        logger.error(f"Failed to decode base64 image: {e}")
        raise ValueError(f"Invalid base64 image data: {e}")
