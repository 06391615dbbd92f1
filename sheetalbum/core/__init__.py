"""Core components."""

from .exceptions import (
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

__all__ = [
    "AlbumError",
    "ConfigurationError",
    "ConversionError",
    "DeliveryError",
    "FetchError",
    "InvalidRangeError",
    "PipelineError",
    "ProviderError",
    "RateLimitedError",
]
