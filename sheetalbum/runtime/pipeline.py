"""Pipeline orchestration: plan, render concurrently, reorder.

Delivery is not part of ``run_pipeline``: the caller receives a
complete PipelineResult or an exception, never a partial album.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from time import perf_counter

from ..io.convert import Converter
from ..io.staging import StagingArea
from ..models import PipelineRequest, PipelineResult
from .chunking import ChunkExecutor, ChunkPlanner, ChunkPolicy, ChunkRenderer, ExportCall
from .chunking.telemetry import log_render_complete
from .rest.retry import RetryPolicy

ExportCallFactory = Callable[[PipelineRequest], ExportCall]


async def run_pipeline(
    request: PipelineRequest,
    *,
    export_call_factory: ExportCallFactory,
    converter: Converter,
    retry_policy: RetryPolicy | None = None,
    staging_root: str | Path | None = None,
    pace_small_chunks: bool = False,
) -> PipelineResult:
    """Render ``request`` into an ordered PipelineResult.

    Args:
        request: Pipeline input
        export_call_factory: Builds the ``(start, end) -> bytes`` export call
            bound to the request's sheet and credential
        converter: Conversion port
        retry_policy: Backoff for rate-limited exports
        staging_root: Parent directory for the run's staging area
        pace_small_chunks: Pause after undersized chunks

    Raises:
        InvalidRangeError: Before any network activity, for bad planning input
        FetchError, ConversionError: First chunk failure; no result is returned
    """
    started = perf_counter()
    policy = ChunkPolicy(
        max_rows=request.max_rows_per_chunk,
        merge_threshold=request.merge_threshold,
        pace_small_chunks=pace_small_chunks,
    )
    plans = ChunkPlanner(policy, sheet_name=request.sheet.sheet_name).plan(
        request.row_range.end, first_row=request.row_range.start
    )

    export_call = export_call_factory(request)
    with StagingArea(root=staging_root) as staging:
        renderer = ChunkRenderer(
            sheet_name=request.sheet.sheet_name,
            export_call=export_call,
            converter=converter,
            staging=staging,
            retry_policy=retry_policy,
            policy=policy,
        )
        artifacts = await ChunkExecutor(request.concurrency).execute(
            plans=plans, render=renderer.render
        )

    log_render_complete(
        sheet_name=request.sheet.sheet_name,
        chunks_used=len(artifacts),
        total_latency_ms=(perf_counter() - started) * 1000.0,
    )
    return PipelineResult(artifacts=tuple(artifacts))
