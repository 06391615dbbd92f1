"""REST runtime abstractions."""

from .http_client import HTTPClient
from .retry import RetryPolicy, fetch_with_retry

__all__ = [
    "HTTPClient",
    "RetryPolicy",
    "fetch_with_retry",
]
