"""
Schemas Package

This package contains all Pydantic schemas for validation and serialization,
organized by purpose:

- options: Per-operation option records consumed by the handle API
- metadata: The ImageMeta snapshot
- pipeline: HTTP request/response models for transform chains
"""

from imagechain.schemas.base import BaseOptions
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
from imagechain.schemas.pipeline import (
    CropStep,
    ErrorDetails,
    MetadataRequest,
    OpacityStep,
    OutputOptions,
    PipelineStep,
    ProcessRequest,
    ProcessResponse,
    ResizeStep,
    RotateStep,
    StepResult,
    SystemStatus,
    WatermarkStep,
)

__all__ = [
    # Options
    "BaseOptions",
    "ResizeOptions",
    "CropOptions",
    "RotateOptions",
    "WatermarkOptions",
    "OpacityOptions",
    "EncodeJPEGOptions",
    "EncodePNGOptions",
    # Metadata
    "ImageMeta",
    # Pipeline
    "ResizeStep",
    "CropStep",
    "RotateStep",
    "WatermarkStep",
    "OpacityStep",
    "PipelineStep",
    "OutputOptions",
    "ProcessRequest",
    "ProcessResponse",
    "StepResult",
    "MetadataRequest",
    "SystemStatus",
    "ErrorDetails",
]
