"""AlbumAPI facade: render a sheet range and deliver it as one album.

Architecture:
    AlbumAPI wires the connectors to the pipeline core:
    - SheetExporter supplies the export call factory
    - a Converter (Pdf2ImageConverter by default) rasterizes each chunk
    - run_pipeline plans, renders and orders the chunks
    - assemble_album/TelegramAlbumSender deliver the ordered result

    Delivery happens only after every chunk rendered successfully, so a
    failed run never produces a partial album.

Design Decisions:
    - Collaborators are injectable so tests can replace the HTTP client,
      converter or sender
    - Async context manager closes the shared HTTP session
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..connectors.google import SheetExporter
from ..connectors.telegram import TelegramAlbumSender, assemble_album
from ..io.convert import Converter, Pdf2ImageConverter
from ..models import PipelineRequest, PipelineResult
from ..runtime.pipeline import run_pipeline
from ..runtime.rest import HTTPClient, RetryPolicy

logger = logging.getLogger(__name__)


class AlbumAPI:
    """High-level entry point for rendering and delivering sheet albums.

    Example:
        >>> async with AlbumAPI(bot_token="123:abc") as api:
        ...     await api.send_sheet(request, chat_id="-100200300")
    """

    def __init__(
        self,
        *,
        bot_token: str | None = None,
        http: HTTPClient | None = None,
        converter: Converter | None = None,
        retry_policy: RetryPolicy | None = None,
        sender: TelegramAlbumSender | None = None,
        staging_root: str | Path | None = None,
        pace_small_chunks: bool = False,
    ) -> None:
        self._http = http or HTTPClient()
        self._owns_http = http is None
        self._exporter = SheetExporter(self._http)
        self._converter = converter or Pdf2ImageConverter()
        self._retry_policy = retry_policy
        if sender is None and bot_token is not None:
            sender = TelegramAlbumSender(self._http, bot_token)
        self._sender = sender
        self._staging_root = staging_root
        self._pace_small_chunks = pace_small_chunks

    @property
    def http(self) -> HTTPClient:
        return self._http

    async def render(self, request: PipelineRequest) -> PipelineResult:
        """Render every chunk of ``request`` in row order."""
        return await run_pipeline(
            request,
            export_call_factory=self._exporter.export_call_for,
            converter=self._converter,
            retry_policy=self._retry_policy,
            staging_root=self._staging_root,
            pace_small_chunks=self._pace_small_chunks,
        )

    async def deliver(self, result: PipelineResult, *, caption: str, chat_id: str) -> dict[str, Any]:
        """Upload ``result`` as one album; the first photo carries ``caption``."""
        if self._sender is None:
            raise RuntimeError("AlbumAPI was created without a bot token or sender")
        return await self._sender.send(chat_id, assemble_album(result, caption))

    async def send_sheet(self, request: PipelineRequest, *, chat_id: str) -> PipelineResult:
        """Render ``request`` and deliver it; nothing is sent if rendering fails."""
        result = await self.render(request)
        logger.info(
            "Rendered %d image(s) for sheet %s", len(result), request.sheet.sheet_name
        )
        await self.deliver(result, caption=request.caption, chat_id=chat_id)
        return result

    async def close(self) -> None:
        if self._owns_http:
            await self._http.close()

    async def __aenter__(self) -> AlbumAPI:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
