"""
Shared FastAPI dependencies for imagechain.
Centralizes access to application state for the routers.
"""

import logging
from fastapi import HTTPException, Request

from imagechain.services import PipelineService

logger = logging.getLogger(__name__)


def get_pipeline_service(request: Request) -> PipelineService:
    """
    Get the PipelineService instance from app state.

    Args:
        request: FastAPI request object

    Returns:
        PipelineService shared by all requests

    Raises:
        HTTPException: If the service was not initialized
    """
    try:
        return request.app.state.pipeline_service
    except AttributeError as e:
        logger.error(f"Pipeline service not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Pipeline service not initialized"
        )
