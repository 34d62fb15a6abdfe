"""
Image API Router - Transform chains and metadata
"""

import logging
import time

from fastapi import APIRouter, Depends

from imagechain.api.dependencies import get_pipeline_service
from imagechain.api.exceptions import PipelineException, safe_endpoint
from imagechain.core.image.converters import from_base64
from imagechain.schemas import ImageMeta, MetadataRequest, ProcessRequest, ProcessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/process")
@safe_endpoint
async def process_image(
    request: ProcessRequest, pipeline_service=Depends(get_pipeline_service)
) -> ProcessResponse:
    """
    Run a transform chain on a single image.

    The image is decoded once, every step is applied in order to the same
    handle, and the result is encoded with the requested output options.
    Processing stops at the first failing step.

    Args:
        request: Source image, ordered steps and output options
        pipeline_service: Pipeline service dependency

    Returns:
        ProcessResponse with the encoded result, its metadata and a per-step log
    """
    start_time = time.time()

    data = from_base64(request.image_base64)
    result = pipeline_service.run(
        data,
        request.steps,
        request.output.format,
        request.output.to_encode_options(),
    )

    if not result.success:
        raise PipelineException(result.status, result.failed_step, result.steps)

    try:
        image_base64 = result.buffer.to_base64()
        size_bytes = result.buffer.size
    finally:
        result.buffer.release()

    processing_time_ms = int((time.time() - start_time) * 1000)

    logger.info(
        f"Processed image: {len(result.steps)} step(s) -> "
        f"{request.output.format.value}, {size_bytes} bytes in {processing_time_ms} ms"
    )

    return ProcessResponse(
        image_base64=image_base64,
        format=request.output.format,
        size_bytes=size_bytes,
        metadata=result.metadata,
        steps=result.steps,
        processing_time_ms=processing_time_ms,
    )


@router.post("/metadata")
@safe_endpoint
async def image_metadata(
    request: MetadataRequest, pipeline_service=Depends(get_pipeline_service)
) -> ImageMeta:
    """Decode an image and report its metadata without transforming it."""
    data = from_base64(request.image_base64)
    meta, status = pipeline_service.inspect(data)

    if not status.is_success:
        raise PipelineException(status)

    return meta
