"""
imagechain - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imagechain import __version__
from imagechain.api.exceptions import register_exception_handlers
from imagechain.api.routers import image, system
from imagechain.config import get_settings
from imagechain.core.engine import engine
from imagechain.services import PipelineService

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=settings.system.log_file,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info("Starting imagechain server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.system.debug}")

    status = engine.init(settings.engine.num_threads)
    if not status.is_success:
        raise RuntimeError(f"Image engine failed to start: {status.message}")

    # Store services in app state for access by routers
    app.state.pipeline_service = PipelineService(max_input_bytes=settings.api.max_upload_bytes)
    app.state.config = settings.to_dict()
    app.state.debug = settings.system.debug

    yield

    # Shutdown
    logger.info("Shutting down imagechain server...")
    engine.shutdown()
    logger.info("Server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="imagechain",
    description="Handle-based image transform pipeline",
    version=__version__,
    lifespan=lifespan,
)

if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(image.router, prefix="/api/image", tags=["Image"])
app.include_router(system.router, prefix="/api/system", tags=["System"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "imagechain",
        "status": "running",
        "version": __version__,
        "endpoints": {
            "image": "/api/image",
            "system": "/api/system",
            "docs": "/docs",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy" if engine.is_initialized else "starting",
        "services": {
            "engine": engine.is_initialized,
            "pipeline_service": getattr(app.state, "pipeline_service", None) is not None,
        },
    }


def run() -> None:
    """Run the API server with uvicorn."""
    uvicorn.run(
        "imagechain.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        log_level=settings.system.log_level.lower(),
    )


if __name__ == "__main__":
    run()
