"""
Pytest configuration for API integration tests
"""

import base64

import cv2
import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="function")
def client():
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh pipeline service to avoid state contamination.
    """
    from imagechain.main import app
    from imagechain.services import PipelineService

    # Set in app state (the session fixture already started the engine)
    app.state.pipeline_service = PipelineService(max_input_bytes=5 * 1024 * 1024)
    app.state.config = {}
    app.state.debug = False

    # Create test client (no context manager so the lifespan does not run)
    test_client = TestClient(app, raise_server_exceptions=False)

    yield test_client


@pytest.fixture
def image_base64(test_image):
    success, buffer = cv2.imencode(".png", test_image)
    assert success
    return base64.b64encode(buffer.tobytes()).decode("utf-8")


@pytest.fixture
def overlay_base64(overlay_image):
    success, buffer = cv2.imencode(".png", overlay_image)
    assert success
    return base64.b64encode(buffer.tobytes()).decode("utf-8")
