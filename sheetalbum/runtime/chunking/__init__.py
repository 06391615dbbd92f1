"""Chunking layer for splitting a row range into rendered pages.

Architecture:
    The chunking layer consists of:
    - definitions.py: Chunk structures (ChunkPolicy, ChunkPlan)
    - planners.py: Chunk planning logic (row windows, trailing merge)
    - renderer.py: Per-chunk export and conversion
    - executors.py: Bounded-concurrency execution and ordered gathering
    - telemetry.py: Structured logging
"""

from __future__ import annotations

from .definitions import ChunkPlan, ChunkPolicy
from .executors import ChunkExecutor
from .planners import ChunkPlanner, plan_chunks
from .renderer import ChunkRenderer, ExportCall, display_name_for

__all__ = [
    "ChunkExecutor",
    "ChunkPlan",
    "ChunkPlanner",
    "ChunkPolicy",
    "ChunkRenderer",
    "ExportCall",
    "display_name_for",
    "plan_chunks",
]
