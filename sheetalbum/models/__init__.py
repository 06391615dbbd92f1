"""Data models for the rendering pipeline.

Architecture:
    This module exports the Pydantic v2 models passed between pipeline stages.
    All models are immutable (frozen=True): a request does not change during a
    run and an artifact's bytes are never mutated once produced.

Model Categories:
    - Input: SheetRef, RowRange, PipelineRequest
    - Output: RenderArtifact, PipelineResult
"""

from .artifact import PipelineResult, RenderArtifact
from .request import PipelineRequest
from .rows import RowRange, SheetRef

__all__ = [
    "PipelineRequest",
    "PipelineResult",
    "RenderArtifact",
    "RowRange",
    "SheetRef",
]
