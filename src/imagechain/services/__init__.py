"""
Service Layer - Business logic layer between routers and the handle API.

Services orchestrate multi-step operations on image handles and provide a
clean interface for routers.
"""

from .pipeline_service import PipelineResult, PipelineService

__all__ = ["PipelineResult", "PipelineService"]
