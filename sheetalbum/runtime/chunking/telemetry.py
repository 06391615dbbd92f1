"""Structured logging for chunking operations.

This module provides telemetry hooks for the rendering pipeline, emitting
structured logs with event names as messages and fields in ``extra``.
"""

from __future__ import annotations

import logging

from .definitions import ChunkPlan

logger = logging.getLogger(__name__)


def log_chunk_plan(
    *,
    sheet_name: str,
    total_chunks: int,
    first_row: int,
    last_row: int,
    max_rows: int,
) -> None:
    """Log chunk plan creation.

    Args:
        sheet_name: Sheet being rendered
        total_chunks: Total number of chunks planned (after merging)
        first_row: First row of the planned range
        last_row: Last row of the planned range
        max_rows: Maximum rows per chunk
    """
    logger.info(
        "chunk_plan_created",
        extra={
            "sheet_name": sheet_name,
            "total_chunks": total_chunks,
            "first_row": first_row,
            "last_row": last_row,
            "max_rows": max_rows,
        },
    )


def log_chunk_merged(*, merged_rows: int, into: ChunkPlan) -> None:
    """Log a trailing chunk being folded into its predecessor."""
    logger.info(
        "chunk_merged",
        extra={"merged_rows": merged_rows, "start": into.start, "end": into.end},
    )


def log_chunk_completed(
    *,
    plan: ChunkPlan,
    image_bytes: int,
    latency_ms: float | None = None,
) -> None:
    """Log completion of a single chunk.

    Args:
        plan: Chunk that was rendered
        image_bytes: Size of the rendered image
        latency_ms: Latency in milliseconds (optional)
    """
    logger.info(
        "chunk_completed",
        extra={
            "chunk_index": plan.chunk_index,
            "start": plan.start,
            "end": plan.end,
            "image_bytes": image_bytes,
            "latency_ms": latency_ms,
        },
    )


def log_chunk_error(
    *,
    plan: ChunkPlan,
    stage: str,
    error_type: str,
    error_message: str,
) -> None:
    """Log chunk rendering error.

    Args:
        plan: Chunk that failed
        stage: Stage that failed ("export", "convert", ...)
        error_type: Exception class name
        error_message: Error message
    """
    logger.error(
        "chunk_error",
        extra={
            "chunk_index": plan.chunk_index,
            "start": plan.start,
            "end": plan.end,
            "stage": stage,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_render_complete(
    *,
    sheet_name: str,
    chunks_used: int,
    total_latency_ms: float | None = None,
) -> None:
    """Log completion of all chunk renders for a sheet."""
    logger.info(
        "render_complete",
        extra={
            "sheet_name": sheet_name,
            "chunks_used": chunks_used,
            "total_latency_ms": total_latency_ms,
        },
    )


def log_album_sent(*, chat_id: str, items: int, method: str) -> None:
    """Log a successful album delivery."""
    logger.info("album_sent", extra={"chat_id": chat_id, "items": items, "method": method})
