"""Unit tests for album assembly and Telegram delivery."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from sheetalbum.connectors.telegram import AlbumPayload, TelegramAlbumSender, assemble_album
from sheetalbum.core import DeliveryError, ProviderError
from sheetalbum.models import PipelineResult, RenderArtifact


def _result(*starts: int) -> PipelineResult:
    return PipelineResult(
        artifacts=tuple(
            RenderArtifact(
                image_bytes=f"png{s}".encode(),
                display_name=f"Ladi_{s}-{s + 39}.png",
                source_start=s,
            )
            for s in starts
        )
    )


def _fields(form: aiohttp.FormData) -> dict[str, object]:
    return {options["name"]: value for options, _headers, value in form._fields}


class TestAssembleAlbum:
    """Test assemble_album payload rules."""

    def test_caption_only_on_first_item(self):
        payload = assemble_album(_result(1, 41, 81), "F5    J5    K5")

        assert [item.caption for item in payload.items] == ["F5    J5    K5", None, None]
        assert [item.display_name for item in payload.items] == [
            "Ladi_1-40.png",
            "Ladi_41-80.png",
            "Ladi_81-120.png",
        ]

    def test_empty_caption_means_none(self):
        payload = assemble_album(_result(1, 41), "")

        assert all(item.caption is None for item in payload.items)

    def test_attach_keys_unique_and_safe(self):
        payload = assemble_album(_result(1, 41, 81), "c")

        keys = [item.attach_key for item in payload.items]
        assert len(set(keys)) == 3
        assert keys[0] == "photo0_Ladi_1_40"

    def test_media_json(self):
        media = assemble_album(_result(1, 41), "hello").media()

        assert media == [
            {"type": "photo", "media": "attach://photo0_Ladi_1_40", "caption": "hello"},
            {"type": "photo", "media": "attach://photo1_Ladi_41_80"},
        ]

    def test_result_order_rejected_when_unsorted(self):
        with pytest.raises(ValueError):
            _result(41, 1)


class TestTelegramAlbumSender:
    """Test TelegramAlbumSender request building and error mapping."""

    def _sender(self, response=None, error=None) -> tuple[TelegramAlbumSender, MagicMock]:
        http = MagicMock()
        http.post_form = AsyncMock(return_value=response, side_effect=error)
        return TelegramAlbumSender(http, "123:SECRET"), http

    def test_media_group_form(self):
        sender, _ = self._sender()
        method, form = sender.build_form("-100", assemble_album(_result(1, 41, 81), "cap"))

        fields = _fields(form)
        assert method == "sendMediaGroup"
        assert fields["chat_id"] == "-100"
        assert len(json.loads(fields["media"])) == 3
        assert fields["photo2_Ladi_81_120"] == b"png81"

    def test_single_photo_uses_send_photo(self):
        sender, _ = self._sender()
        method, form = sender.build_form("-100", assemble_album(_result(1), "cap"))

        fields = _fields(form)
        assert method == "sendPhoto"
        assert fields["caption"] == "cap"
        assert fields["photo"] == b"png1"

    def test_empty_payload_rejected(self):
        sender, _ = self._sender()

        with pytest.raises(DeliveryError):
            sender.build_form("-100", AlbumPayload(items=()))

    def test_oversized_album_rejected(self):
        sender, _ = self._sender()
        payload = assemble_album(_result(*range(1, 441, 40)), "cap")

        assert len(payload.items) == 11
        with pytest.raises(DeliveryError):
            sender.build_form("-100", payload)

    @pytest.mark.asyncio
    async def test_send_single_request(self):
        sender, http = self._sender(response={"ok": True, "result": []})

        await sender.send("-100", assemble_album(_result(1, 41), "cap"))

        http.post_form.assert_awaited_once()
        url = http.post_form.await_args.args[0]
        assert url == "https://api.telegram.org/bot123:SECRET/sendMediaGroup"

    @pytest.mark.asyncio
    async def test_send_not_retried_and_token_redacted(self):
        error = ProviderError(
            "HTTP 502 from https://api.telegram.org/bot123:SECRET/sendMediaGroup: bad gateway",
            status_code=502,
        )
        sender, http = self._sender(error=error)

        with pytest.raises(DeliveryError) as exc_info:
            await sender.send("-100", assemble_album(_result(1, 41), "cap"))

        assert http.post_form.await_count == 1
        assert exc_info.value.status_code == 502
        assert exc_info.value.stage == "deliver"
        assert "SECRET" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_ok_false_is_delivery_error(self):
        sender, _ = self._sender(
            response={"ok": False, "error_code": 400, "description": "Bad Request: chat not found"}
        )

        with pytest.raises(DeliveryError) as exc_info:
            await sender.send("-100", assemble_album(_result(1, 41), "cap"))

        assert "chat not found" in str(exc_info.value)
        assert exc_info.value.status_code == 400
