"""Telegram Bot API constants."""

from __future__ import annotations

BOT_API_URL = "https://api.telegram.org/bot{token}/{method}"

# sendMediaGroup accepts between 2 and 10 items.
MIN_ALBUM_SIZE = 2
MAX_ALBUM_SIZE = 10

MAX_CAPTION_LENGTH = 1024
