"""
Pipeline API models.

This module contains models for running transform chains over HTTP:
- Pipeline steps (one per transform, discriminated by "operation")
- Process and metadata requests/responses
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from imagechain.core.constants import APIConstants, EncodeConstants
from imagechain.core.enums import ImageFormat, OperationType, Status
from imagechain.schemas.metadata import ImageMeta
from imagechain.schemas.options import (
    CropOptions,
    EncodeJPEGOptions,
    EncodePNGOptions,
    OpacityOptions,
    ResizeOptions,
    RotateOptions,
    WatermarkOptions,
)


class ResizeStep(ResizeOptions):
    operation: Literal["resize"] = "resize"

    def to_options(self) -> ResizeOptions:
        return ResizeOptions(**self.model_dump(exclude={"operation"}))


class CropStep(CropOptions):
    operation: Literal["crop"] = "crop"

    def to_options(self) -> CropOptions:
        return CropOptions(**self.model_dump(exclude={"operation"}))


class RotateStep(RotateOptions):
    operation: Literal["rotate"] = "rotate"

    def to_options(self) -> RotateOptions:
        return RotateOptions(**self.model_dump(exclude={"operation"}))


class WatermarkStep(WatermarkOptions):
    """Watermark step; the overlay travels with the step as base64."""

    operation: Literal["watermark"] = "watermark"
    overlay_base64: str = Field(..., description="Overlay image (base64 or data URI)")

    def to_options(self) -> WatermarkOptions:
        return WatermarkOptions(**self.model_dump(exclude={"operation", "overlay_base64"}))


class OpacityStep(OpacityOptions):
    operation: Literal["opacity"] = "opacity"

    def to_options(self) -> OpacityOptions:
        return OpacityOptions(**self.model_dump(exclude={"operation"}))


PipelineStep = Annotated[
    Union[ResizeStep, CropStep, RotateStep, WatermarkStep, OpacityStep],
    Field(discriminator="operation"),
]


class OutputOptions(BaseModel):
    """Encoder selection for the pipeline result."""

    format: ImageFormat = Field(default=ImageFormat.JPEG, description="Output format")
    quality: int = Field(default=EncodeConstants.DEFAULT_JPEG_QUALITY, description="JPEG quality")
    compression: int = Field(
        default=EncodeConstants.DEFAULT_PNG_COMPRESSION, description="PNG compression level"
    )
    interlace: bool = Field(default=False, description="Progressive JPEG / interlaced PNG")

    def to_encode_options(self) -> Union[EncodeJPEGOptions, EncodePNGOptions]:
        if self.format is ImageFormat.JPEG:
            return EncodeJPEGOptions(quality=self.quality, interlace=self.interlace)
        return EncodePNGOptions(compression=self.compression, interlace=self.interlace)


class ProcessRequest(BaseModel):
    """Request to run a transform chain on one image"""

    image_base64: str = Field(..., description="Source image (base64 or data URI)")
    steps: List[PipelineStep] = Field(
        default_factory=list,
        max_length=APIConstants.MAX_PIPELINE_STEPS,
        description="Transforms applied in order to the same image",
    )
    output: OutputOptions = Field(default_factory=OutputOptions)


class StepResult(BaseModel):
    """Outcome of one pipeline step"""

    index: int
    operation: OperationType
    status: Status
    width: int = 0
    height: int = 0


class ProcessResponse(BaseModel):
    """Result of a successful pipeline run"""

    success: bool = True
    image_base64: str
    format: ImageFormat
    size_bytes: int
    metadata: ImageMeta
    steps: List[StepResult]
    processing_time_ms: int


class MetadataRequest(BaseModel):
    """Request to inspect an image without transforming it"""

    image_base64: str = Field(..., description="Source image (base64 or data URI)")


class SystemStatus(BaseModel):
    """System status information"""

    status: str
    uptime: float
    engine: dict


class ErrorDetails(BaseModel):
    """Failure details attached to pipeline errors"""

    status: Status
    message: str
    failed_step: Optional[int] = None
    steps: List[StepResult] = Field(default_factory=list)
