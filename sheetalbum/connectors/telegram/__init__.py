"""Telegram connector implementation."""

from .album import AlbumItem, AlbumPayload, TelegramAlbumSender, assemble_album

__all__ = [
    "AlbumItem",
    "AlbumPayload",
    "TelegramAlbumSender",
    "assemble_album",
]
