"""Album assembly and delivery to Telegram.

Architecture:
    assemble_album() turns an ordered PipelineResult into an AlbumPayload in
    which only the first item carries the caption. TelegramAlbumSender
    uploads the whole payload in one request: sendMediaGroup for two or more
    items, sendPhoto for a single one.

Design Decisions:
    - No retries: a failed upload raises DeliveryError. Re-sending after an
      ambiguous failure could post the album twice.
    - Payloads Telegram would reject (empty, more than 10 items) fail before
      any request is made.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from ...core.exceptions import DeliveryError, ProviderError
from ...models import PipelineResult
from ...runtime.chunking.telemetry import log_album_sent
from ...runtime.rest import HTTPClient
from .config import BOT_API_URL, MAX_ALBUM_SIZE, MAX_CAPTION_LENGTH, MIN_ALBUM_SIZE

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"[^A-Za-z0-9_]")


class AlbumItem(BaseModel):
    """One photo of an album."""

    attach_key: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    image_bytes: bytes
    caption: str | None = None

    model_config = ConfigDict(frozen=True)


class AlbumPayload(BaseModel):
    """Ordered photos for a single upload."""

    items: tuple[AlbumItem, ...]

    def media(self) -> list[dict[str, Any]]:
        """The ``media`` JSON array for sendMediaGroup."""
        entries = []
        for item in self.items:
            entry: dict[str, Any] = {"type": "photo", "media": f"attach://{item.attach_key}"}
            if item.caption is not None:
                entry["caption"] = item.caption
            entries.append(entry)
        return entries

    model_config = ConfigDict(frozen=True)


def attach_key_for(index: int, display_name: str) -> str:
    """Multipart field name for an item, unique by position."""
    stem = display_name.rsplit(".", 1)[0]
    return f"photo{index}_{_KEY_RE.sub('_', stem)}"


def assemble_album(result: PipelineResult, caption: str) -> AlbumPayload:
    """Build the album payload; the first artifact carries the caption.

    An empty caption means no caption at all.
    """
    items = tuple(
        AlbumItem(
            attach_key=attach_key_for(index, artifact.display_name),
            display_name=artifact.display_name,
            image_bytes=artifact.image_bytes,
            caption=(caption or None) if index == 0 else None,
        )
        for index, artifact in enumerate(result.artifacts)
    )
    return AlbumPayload(items=items)


class TelegramAlbumSender:
    """Uploads album payloads through the Bot API."""

    def __init__(self, http: HTTPClient, bot_token: str) -> None:
        self._http = http
        self._bot_token = bot_token

    def _url(self, method: str) -> str:
        return BOT_API_URL.format(token=self._bot_token, method=method)

    def build_form(self, chat_id: str, payload: AlbumPayload) -> tuple[str, aiohttp.FormData]:
        """Return the Bot API method and the multipart form for ``payload``.

        Raises:
            DeliveryError: If the payload cannot be sent as one request
        """
        count = len(payload.items)
        if count == 0:
            raise DeliveryError("Album is empty")
        if count > MAX_ALBUM_SIZE:
            raise DeliveryError(f"Album has {count} items, Telegram accepts at most {MAX_ALBUM_SIZE}")
        first = payload.items[0]
        if first.caption and len(first.caption) > MAX_CAPTION_LENGTH:
            raise DeliveryError(f"Caption longer than {MAX_CAPTION_LENGTH} characters")

        form = aiohttp.FormData()
        form.add_field("chat_id", chat_id)
        if count < MIN_ALBUM_SIZE:
            if first.caption is not None:
                form.add_field("caption", first.caption)
            form.add_field(
                "photo", first.image_bytes, filename=first.display_name, content_type="image/png"
            )
            return "sendPhoto", form

        form.add_field("media", json.dumps(payload.media(), ensure_ascii=False))
        for item in payload.items:
            form.add_field(
                item.attach_key, item.image_bytes, filename=item.display_name, content_type="image/png"
            )
        return "sendMediaGroup", form

    async def send(self, chat_id: str, payload: AlbumPayload) -> dict[str, Any]:
        """Upload ``payload`` to ``chat_id`` in a single request.

        Raises:
            DeliveryError: On HTTP failure or a response with ``ok: false``
        """
        method, form = self.build_form(chat_id, payload)
        logger.info("Sending %d photo(s) to chat %s via %s", len(payload.items), chat_id, method)
        try:
            response = await self._http.post_form(self._url(method), form)
        except ProviderError as e:
            # The bot token is part of the URL; keep it out of the message.
            message = str(e).replace(self._bot_token, "***")
            raise DeliveryError(f"{method} failed: {message}", status_code=e.status_code) from e

        if not response.get("ok", False):
            raise DeliveryError(
                f"{method} rejected: {response.get('description', 'unknown error')}",
                status_code=response.get("error_code"),
            )
        log_album_sent(chat_id=chat_id, items=len(payload.items), method=method)
        return response
