"""Chunk planning logic for determining row windows.

This module provides the ChunkPlanner class that splits a row range into
chunks no larger than the policy allows, folding an undersized trailing chunk
into the one before it.
"""

from __future__ import annotations

from ...core.exceptions import InvalidRangeError
from .definitions import ChunkPlan, ChunkPolicy
from .telemetry import log_chunk_merged, log_chunk_plan


class ChunkPlanner:
    """Plans row chunks for a sheet export.

    The planner is a pure function of its inputs: planning the same range
    twice yields equal plans.
    """

    def __init__(self, policy: ChunkPolicy, sheet_name: str = "unknown") -> None:
        """Initialize chunk planner.

        Args:
            policy: Chunking policy
            sheet_name: Sheet name used for logging only
        """
        self._policy = policy
        self._sheet_name = sheet_name

    def plan(self, last_row: int, *, first_row: int = 1) -> list[ChunkPlan]:
        """Plan chunks covering ``[first_row, last_row]``.

        Args:
            last_row: Last row to render (inclusive)
            first_row: First row to render (inclusive)

        Returns:
            Chunk plans in ascending row order, covering the range exactly

        Raises:
            InvalidRangeError: If the range is empty or not 1-based
        """
        if first_row < 1:
            raise InvalidRangeError(f"first_row must be >= 1, got {first_row}")
        if last_row < first_row:
            raise InvalidRangeError(
                f"last_row must be >= first_row ({first_row}), got {last_row}"
            )

        max_rows = self._policy.max_rows
        bounds: list[tuple[int, int]] = []
        start = first_row
        while start <= last_row:
            end = min(start + max_rows - 1, last_row)
            bounds.append((start, end))
            start = end + 1

        # Merge at most once; never cascades further back.
        if len(bounds) >= 2:
            tail_start, tail_end = bounds[-1]
            tail_size = tail_end - tail_start + 1
            if tail_size < self._policy.merge_threshold:
                bounds.pop()
                bounds[-1] = (bounds[-1][0], tail_end)
                log_chunk_merged(
                    merged_rows=tail_size,
                    into=ChunkPlan(start=bounds[-1][0], end=tail_end, chunk_index=len(bounds) - 1),
                )

        plans = [
            ChunkPlan(start=start, end=end, chunk_index=index)
            for index, (start, end) in enumerate(bounds)
        ]

        log_chunk_plan(
            sheet_name=self._sheet_name,
            total_chunks=len(plans),
            first_row=first_row,
            last_row=last_row,
            max_rows=max_rows,
        )

        return plans


def plan_chunks(
    last_row: int,
    max_rows_per_chunk: int,
    merge_threshold: int,
    *,
    first_row: int = 1,
) -> list[ChunkPlan]:
    """Plan chunks without constructing a planner explicitly."""
    policy = ChunkPolicy(max_rows=max_rows_per_chunk, merge_threshold=merge_threshold)
    return ChunkPlanner(policy).plan(last_row, first_row=first_row)
