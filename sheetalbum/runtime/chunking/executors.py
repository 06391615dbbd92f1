"""Chunk execution with bounded concurrency.

This module provides the ChunkExecutor class that renders all chunk plans
with at most ``concurrency`` renders in flight and returns the artifacts in
row order, whatever order the renders finish in.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from ...core.exceptions import PipelineError
from ...models import RenderArtifact
from .definitions import ChunkPlan
from .telemetry import log_chunk_error


class ChunkExecutor:
    """Executes chunk plans concurrently and gathers the results.

    Each task returns its own artifact; results are merged only after every
    task has settled, so no task ever writes to shared state. The first
    failure cancels the remaining tasks, waits for them to unwind, and is then
    re-raised as the run's single error.
    """

    def __init__(self, concurrency: int = 1) -> None:
        """Initialize chunk executor.

        Args:
            concurrency: Maximum number of renders in flight
        """
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._concurrency = concurrency

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def execute(
        self,
        *,
        plans: list[ChunkPlan],
        render: Callable[[ChunkPlan], Awaitable[RenderArtifact]],
    ) -> list[RenderArtifact]:
        """Render every plan and return artifacts sorted by source row.

        Args:
            plans: Chunk plans to render
            render: Async function rendering one plan

        Returns:
            Artifacts in ascending ``source_start`` order

        Raises:
            Exception: The first render failure, after all sibling tasks
                have finished or been cancelled
        """
        if not plans:
            raise ValueError("Cannot execute: no chunk plans provided")

        semaphore = asyncio.Semaphore(self._concurrency)

        async def guarded(plan: ChunkPlan) -> RenderArtifact:
            async with semaphore:
                try:
                    return await render(plan)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    log_chunk_error(
                        plan=plan,
                        stage=e.stage if isinstance(e, PipelineError) else "render",
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
                    raise

        tasks = [asyncio.create_task(guarded(plan)) for plan in plans]
        try:
            artifacts = await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        return sorted(artifacts, key=lambda artifact: artifact.source_start)
