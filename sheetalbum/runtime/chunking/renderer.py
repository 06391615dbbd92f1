"""Chunk rendering: export one chunk and convert it to an image.

Each render runs export (through the rate-limit retry) and conversion for a
single ChunkPlan. Any failure is terminal for the chunk and is re-raised with
the chunk's row range attached, so the caller can report which chunk and
which stage failed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from time import perf_counter

from ...core.exceptions import ConversionError, FetchError
from ...io.convert import Converter
from ...io.staging import StagingArea
from ...models import RenderArtifact
from ..rest.retry import RetryPolicy, fetch_with_retry
from .definitions import ChunkPlan, ChunkPolicy
from .telemetry import log_chunk_completed

ExportCall = Callable[[int, int], Awaitable[bytes]]


def display_name_for(sheet_name: str, plan: ChunkPlan) -> str:
    """Deterministic image name for a chunk of ``sheet_name``."""
    return f"{sheet_name}_{plan.start}-{plan.end}.png"


class ChunkRenderer:
    """Renders chunk plans into RenderArtifacts."""

    def __init__(
        self,
        *,
        sheet_name: str,
        export_call: ExportCall,
        converter: Converter,
        staging: StagingArea,
        retry_policy: RetryPolicy | None = None,
        policy: ChunkPolicy | None = None,
    ) -> None:
        """Initialize chunk renderer.

        Args:
            sheet_name: Sheet name, used for display names
            export_call: Async ``(start_row, end_row) -> document bytes``
            converter: Conversion port turning a staged document into an image
            staging: Open staging area shared by the run
            retry_policy: Backoff for rate-limited exports
            policy: Chunk policy (pacing of undersized chunks)
        """
        self._sheet_name = sheet_name
        self._export_call = export_call
        self._converter = converter
        self._staging = staging
        self._retry_policy = retry_policy or RetryPolicy()
        self._policy = policy or ChunkPolicy()

    async def render(self, plan: ChunkPlan) -> RenderArtifact:
        """Export and convert one chunk.

        Raises:
            FetchError: Export failed (with ``chunk`` set)
            ConversionError: Conversion failed (with ``chunk`` set)
        """
        chunk_start = perf_counter()

        try:
            document = await fetch_with_retry(
                lambda: self._export_call(plan.start, plan.end),
                self._retry_policy,
            )
        except FetchError as e:
            raise FetchError(
                f"Export of rows {plan.start}-{plan.end} failed: {e}",
                status_code=e.status_code,
                attempts=e.attempts,
                chunk=plan.rows,
            ) from e

        name = display_name_for(self._sheet_name, plan)
        with self._staging.slot(plan.staging_key) as slot:
            source = slot / f"{name.removesuffix('.png')}.pdf"
            source.write_bytes(document)
            try:
                image = await self._converter.convert(source)
                if not image:
                    raise ConversionError("Converter returned an empty image", reason="output")
            except ConversionError as e:
                raise ConversionError(
                    f"Conversion of rows {plan.start}-{plan.end} failed: {e}",
                    reason=e.reason,
                    returncode=e.returncode,
                    chunk=plan.rows,
                ) from e

        pause = self._policy.pause_for(plan)
        if pause > 0:
            await asyncio.sleep(pause)

        log_chunk_completed(
            plan=plan,
            image_bytes=len(image),
            latency_ms=(perf_counter() - chunk_start) * 1000.0,
        )
        return RenderArtifact(image_bytes=image, display_name=name, source_start=plan.start)
