"""Rendered chunk artifacts and the ordered pipeline result."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RenderArtifact(BaseModel):
    """Image rendered from one chunk.

    ``source_start`` is the first row of the producing chunk and is only used
    to restore row order after concurrent rendering.
    """

    image_bytes: bytes = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    source_start: int = Field(..., ge=1)

    def __repr__(self) -> str:
        return (
            f"RenderArtifact(display_name={self.display_name!r}, "
            f"source_start={self.source_start}, size={len(self.image_bytes)})"
        )

    model_config = ConfigDict(frozen=True)


class PipelineResult(BaseModel):
    """Artifacts of one run in ascending row order."""

    artifacts: tuple[RenderArtifact, ...]

    @field_validator("artifacts")
    @classmethod
    def validate_order(cls, v: tuple[RenderArtifact, ...]) -> tuple[RenderArtifact, ...]:
        """Validate strictly ascending source_start (no duplicates)."""
        for prev, cur in zip(v, v[1:]):
            if cur.source_start <= prev.source_start:
                raise ValueError("artifacts must be strictly ascending by source_start")
        return v

    def __len__(self) -> int:
        return len(self.artifacts)

    model_config = ConfigDict(frozen=True)
