"""Runtime: chunk planning, rendering, retry and orchestration."""

from .pipeline import ExportCallFactory, run_pipeline

__all__ = ["ExportCallFactory", "run_pipeline"]
