"""
System API Router - Engine status
"""

import logging
import time

from fastapi import APIRouter

from imagechain.api.exceptions import safe_endpoint
from imagechain.core.engine import engine
from imagechain.schemas import SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Track start time
START_TIME = time.time()


@router.get("/status")
@safe_endpoint
async def get_status() -> SystemStatus:
    """Get system status and engine statistics"""
    stats = engine.get_stats()

    return SystemStatus(
        status="healthy" if stats["initialized"] else "degraded",
        uptime=time.time() - START_TIME,
        engine=stats,
    )
