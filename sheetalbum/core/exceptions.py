"""Custom exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import RowRange


class AlbumError(Exception):
    """Base exception for all library errors."""

    pass


class ConfigurationError(AlbumError):
    """Configuration is missing or malformed."""

    pass


class InvalidRangeError(AlbumError):
    """Row range or chunking parameters are invalid.

    Raised during planning, before any network activity.
    """

    pass


class ProviderError(AlbumError):
    """Error from an external HTTP service."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(ProviderError):
    """Service answered HTTP 429."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class PipelineError(AlbumError):
    """A pipeline stage failed.

    Attributes:
        stage: Stage that failed ("export", "convert" or "deliver")
        chunk: Row range of the chunk being rendered, if any
    """

    stage: str = "pipeline"

    def __init__(self, message: str, *, chunk: RowRange | None = None) -> None:
        super().__init__(message)
        self.chunk = chunk


class FetchError(PipelineError):
    """Export failed with a non-429 error or after exhausting retries."""

    stage = "export"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        attempts: int = 1,
        chunk: RowRange | None = None,
    ) -> None:
        super().__init__(message, chunk=chunk)
        self.status_code = status_code
        self.attempts = attempts


class ConversionError(PipelineError):
    """Document to image conversion failed.

    ``reason`` is one of "start" (process could not be launched), "exit"
    (non-zero exit status), "timeout" or "output" (missing or unreadable image).
    """

    stage = "convert"

    def __init__(
        self,
        message: str,
        *,
        reason: str = "exit",
        returncode: int | None = None,
        chunk: RowRange | None = None,
    ) -> None:
        super().__init__(message, chunk=chunk)
        self.reason = reason
        self.returncode = returncode


class DeliveryError(PipelineError):
    """Album upload failed. Never retried."""

    stage = "deliver"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
