"""Chunking metadata definitions and policy structures.

This module defines the data structures used to describe how a row range is
split into chunks, one exported page image per chunk.
"""

from __future__ import annotations

from dataclasses import dataclass

from ...core.exceptions import InvalidRangeError
from ...models import RowRange

DEFAULT_MAX_ROWS_PER_CHUNK = 40
DEFAULT_MERGE_THRESHOLD = 9


@dataclass(frozen=True)
class ChunkPolicy:
    """Chunking policy for a sheet export.

    Attributes:
        max_rows: Maximum number of rows per chunk
        merge_threshold: A trailing chunk with fewer rows than this is merged
            into its predecessor
        pace_small_chunks: Pause after rendering an undersized chunk, spacing
            out export calls for short pages
    """

    max_rows: int = DEFAULT_MAX_ROWS_PER_CHUNK
    merge_threshold: int = DEFAULT_MERGE_THRESHOLD
    pace_small_chunks: bool = False

    def __post_init__(self) -> None:
        """Validate chunk policy configuration."""
        if self.max_rows < 1:
            raise InvalidRangeError(f"max_rows must be >= 1, got {self.max_rows}")
        if self.merge_threshold < 1:
            raise InvalidRangeError(
                f"merge_threshold must be >= 1, got {self.merge_threshold}"
            )

    def pause_for(self, plan: ChunkPlan) -> float:
        """Return the pause in seconds after rendering ``plan``.

        Full-size chunks and disabled pacing return 0.
        """
        if not self.pace_small_chunks or plan.size >= self.max_rows:
            return 0.0
        return 0.5 + (self.max_rows - plan.size) * 0.1


@dataclass(frozen=True)
class ChunkPlan:
    """Plan for a single chunk.

    Attributes:
        start: First row of the chunk (inclusive)
        end: Last row of the chunk (inclusive)
        chunk_index: Zero-based index of this chunk in the overall plan
    """

    start: int
    end: int
    chunk_index: int = 0

    @property
    def size(self) -> int:
        return self.end - self.start + 1

    @property
    def rows(self) -> RowRange:
        return RowRange(start=self.start, end=self.end)

    @property
    def staging_key(self) -> str:
        """Staging namespace, unique among the chunks of one plan."""
        return f"rows-{self.start}-{self.end}"
