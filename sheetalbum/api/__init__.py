"""High-level API."""

from .album_api import AlbumAPI

__all__ = ["AlbumAPI"]
