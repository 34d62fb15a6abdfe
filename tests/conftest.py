"""
Pytest configuration and fixtures for imagechain tests
"""

import cv2
import numpy as np
import pytest
from PIL import Image

from imagechain.core.engine import engine
from imagechain.core.handle import load_image


@pytest.fixture(scope="session", autouse=True)
def image_engine():
    """Initialize the image engine once for the whole test session"""
    status = engine.init()
    assert status.is_success
    yield engine
    engine.shutdown()


@pytest.fixture
def test_image():
    """Create a 1000x500 BGR test image"""
    image = np.zeros((500, 1000, 3), dtype=np.uint8)
    # Add some content
    cv2.rectangle(image, (100, 100), (400, 400), (255, 255, 255), -1)
    cv2.circle(image, (700, 250), 120, (40, 160, 220), -1)
    return image


@pytest.fixture
def jpeg_path(tmp_path, test_image):
    """1000x500 JPEG file"""
    path = tmp_path / "input.jpg"
    cv2.imwrite(str(path), test_image)
    return path


@pytest.fixture
def png_path(tmp_path, test_image):
    """1000x500 PNG file"""
    path = tmp_path / "input.png"
    cv2.imwrite(str(path), test_image)
    return path


@pytest.fixture
def png_bytes(test_image):
    """1000x500 PNG as encoded bytes"""
    success, buffer = cv2.imencode(".png", test_image)
    assert success
    return buffer.tobytes()


@pytest.fixture
def jpeg_bytes(test_image):
    """1000x500 JPEG as encoded bytes"""
    success, buffer = cv2.imencode(".jpg", test_image)
    assert success
    return buffer.tobytes()


@pytest.fixture
def rgba_png_path(tmp_path):
    """200x100 BGRA PNG, opaque left half and transparent right half"""
    image = np.zeros((100, 200, 4), dtype=np.uint8)
    image[..., :3] = (30, 90, 200)
    image[:, :100, 3] = 255
    path = tmp_path / "alpha.png"
    cv2.imwrite(str(path), image)
    return path


@pytest.fixture
def gray_png_path(tmp_path):
    """120x80 single-band PNG"""
    image = np.full((80, 120), 128, dtype=np.uint8)
    path = tmp_path / "gray.png"
    cv2.imwrite(str(path), image)
    return path


@pytest.fixture
def dpi_png_path(tmp_path):
    """64x64 PNG declaring 300 dpi"""
    path = tmp_path / "dpi.png"
    Image.new("RGB", (64, 64), (10, 20, 30)).save(path, dpi=(300, 300))
    return path


@pytest.fixture
def overlay_image():
    """50x40 BGR overlay (solid red)"""
    image = np.zeros((40, 50, 3), dtype=np.uint8)
    image[:] = (0, 0, 255)
    return image


@pytest.fixture
def overlay_path(tmp_path, overlay_image):
    path = tmp_path / "overlay.png"
    cv2.imwrite(str(path), overlay_image)
    return path


@pytest.fixture
def handle(png_path):
    """Loaded handle for the 1000x500 PNG, released after the test"""
    image_handle, status = load_image(png_path)
    assert status.is_success
    yield image_handle
    image_handle.release()


@pytest.fixture
def overlay_handle(overlay_path):
    image_handle, status = load_image(overlay_path)
    assert status.is_success
    yield image_handle
    image_handle.release()
