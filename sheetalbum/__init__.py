"""sheetalbum - render Google Sheets ranges into ordered Telegram albums."""

from .api import AlbumAPI
from .connectors.google import SheetExporter, SheetsClient
from .connectors.telegram import AlbumPayload, TelegramAlbumSender, assemble_album
from .core import (
    AlbumError,
    ConfigurationError,
    ConversionError,
    DeliveryError,
    FetchError,
    InvalidRangeError,
    PipelineError,
    ProviderError,
    RateLimitedError,
)
from .io import Converter, Pdf2ImageConverter, StagingArea
from .models import PipelineRequest, PipelineResult, RenderArtifact, RowRange, SheetRef
from .runtime import run_pipeline
from .runtime.chunking import ChunkExecutor, ChunkPlan, ChunkPlanner, ChunkPolicy, ChunkRenderer, plan_chunks
from .runtime.rest import HTTPClient, RetryPolicy, fetch_with_retry

__version__ = "0.1.0"

__all__ = [
    "AlbumAPI",
    "AlbumError",
    "AlbumPayload",
    "ChunkExecutor",
    "ChunkPlan",
    "ChunkPlanner",
    "ChunkPolicy",
    "ChunkRenderer",
    "ConfigurationError",
    "ConversionError",
    "Converter",
    "DeliveryError",
    "FetchError",
    "HTTPClient",
    "InvalidRangeError",
    "Pdf2ImageConverter",
    "PipelineError",
    "PipelineRequest",
    "PipelineResult",
    "ProviderError",
    "RateLimitedError",
    "RenderArtifact",
    "RetryPolicy",
    "RowRange",
    "SheetExporter",
    "SheetRef",
    "SheetsClient",
    "StagingArea",
    "TelegramAlbumSender",
    "assemble_album",
    "fetch_with_retry",
    "plan_chunks",
    "run_pipeline",
]
