"""
Pipeline Service - Business logic for transform chains.

Loads an image once, applies an ordered list of steps to the same handle,
and encodes the result. Every handle the service acquires is released
before it returns, on success and failure alike.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from imagechain.api.exceptions import InputTooLargeException
from imagechain.core.enums import ImageFormat, OperationType, Status
from imagechain.core.handle import ImageHandle, load_image_from_bytes
from imagechain.core.image.converters import from_base64
from imagechain.core.image.encoder import EncodedBuffer, encode_to_format
from imagechain.core.image.metadata import extract_metadata
from imagechain.schemas import (
    EncodeJPEGOptions,
    EncodePNGOptions,
    ImageMeta,
    StepResult,
    WatermarkStep,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a pipeline run."""

    status: Status
    buffer: EncodedBuffer = field(default_factory=EncodedBuffer.empty)
    metadata: Optional[ImageMeta] = None
    steps: List[StepResult] = field(default_factory=list)
    failed_step: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.status.is_success


class PipelineService:
    """
    Service running transform chains on a single image handle.

    A step that fails stops the chain; the steps already applied and the
    failing status are reported back to the caller.
    """

    def __init__(self, max_input_bytes: Optional[int] = None):
        """
        Initialize pipeline service.

        Args:
            max_input_bytes: Optional limit on encoded input size
        """
        self.max_input_bytes = max_input_bytes

    def check_input_size(self, data: bytes) -> None:
        """
        Raises:
            InputTooLargeException: If data exceeds the configured input limit
        """
        if self.max_input_bytes is not None and len(data) > self.max_input_bytes:
            raise InputTooLargeException(len(data), self.max_input_bytes)

    def inspect(self, data: bytes):
        """
        Load an image only to read its metadata.

        Returns:
            Tuple of (ImageMeta, Status)
        """
        self.check_input_size(data)

        handle, status = load_image_from_bytes(data)
        if not status.is_success:
            return ImageMeta(), status

        with handle:
            return extract_metadata(handle)

    def run(
        self,
        data: bytes,
        steps: Sequence,
        output_format: Union[ImageFormat, str] = ImageFormat.JPEG,
        output_options: Optional[Union[EncodeJPEGOptions, EncodePNGOptions]] = None,
    ) -> PipelineResult:
        """
        Run a transform chain.

        Args:
            data: Encoded source image
            steps: Pipeline steps (schemas.PipelineStep members), applied in order
            output_format: Encoder format for the result
            output_options: Encoder options matching output_format

        Returns:
            PipelineResult with the encoded buffer on success
        """
        self.check_input_size(data)

        handle, status = load_image_from_bytes(data)
        if not status.is_success:
            logger.warning(f"Pipeline input could not be loaded: {status.value}")
            return PipelineResult(status=status)

        with handle:
            results: List[StepResult] = []

            for index, step in enumerate(steps):
                status = self.apply_step(handle, step)
                meta, _ = extract_metadata(handle)
                results.append(
                    StepResult(
                        index=index,
                        operation=OperationType(step.operation),
                        status=status,
                        width=meta.width,
                        height=meta.height,
                    )
                )

                if not status.is_success:
                    logger.warning(
                        f"Pipeline step {index} ({step.operation}) failed: {status.value}"
                    )
                    return PipelineResult(status=status, steps=results, failed_step=index)

            metadata, _ = extract_metadata(handle)
            buffer, status = encode_to_format(handle, output_format, output_options)
            if not status.is_success:
                return PipelineResult(status=status, metadata=metadata, steps=results)

            logger.info(
                f"Pipeline completed: {len(results)} step(s), "
                f"{metadata.width}x{metadata.height}, {buffer.size} bytes"
            )
            return PipelineResult(
                status=Status.SUCCESS, buffer=buffer, metadata=metadata, steps=results
            )

    def apply_step(self, handle: ImageHandle, step) -> Status:
        """Apply one pipeline step to handle."""
        operation = OperationType(step.operation)

        if operation is OperationType.WATERMARK:
            return self._apply_watermark(handle, step)

        if operation is OperationType.RESIZE:
            return handle.resize(step.to_options())
        if operation is OperationType.CROP:
            return handle.crop(step.to_options())
        if operation is OperationType.ROTATE:
            return handle.rotate(step.to_options())
        return handle.change_opacity(step.to_options())

    def _apply_watermark(self, handle: ImageHandle, step: WatermarkStep) -> Status:
        overlay_data = from_base64(step.overlay_base64)
        self.check_input_size(overlay_data)

        overlay, status = load_image_from_bytes(overlay_data)
        if not status.is_success:
            return status

        with overlay:
            return handle.watermark(overlay, step.to_options())
