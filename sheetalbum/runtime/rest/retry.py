"""Rate-limit-aware retry for export calls.

Only HTTP 429 is retried. Every other provider failure is terminal for the
calling chunk, and the attempt count is capped at five.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from ...core.exceptions import FetchError, ProviderError, RateLimitedError

T = TypeVar("T")

logger = logging.getLogger(__name__)

MAX_ATTEMPTS_CAP = 5


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded backoff for rate-limited calls.

    Attributes:
        max_attempts: Total tries including the first (1..5)
        base_delay_s: Base delay before a retry
        jitter_s: Upper bound of the uniform random delay added to the base
        linear: Multiply the base by the attempt number
        max_delay_s: Upper bound for any single delay
    """

    max_attempts: int = MAX_ATTEMPTS_CAP
    base_delay_s: float = 3.0
    jitter_s: float = 3.0
    linear: bool = False
    max_delay_s: float = 30.0

    def __post_init__(self) -> None:
        """Validate retry policy configuration."""
        if not 1 <= self.max_attempts <= MAX_ATTEMPTS_CAP:
            raise ValueError(f"max_attempts must be between 1 and {MAX_ATTEMPTS_CAP}")
        if self.base_delay_s < 0 or self.jitter_s < 0 or self.max_delay_s < 0:
            raise ValueError("retry delays must be >= 0")

    def delay_for(self, attempt: int, retry_after: float | None = None) -> float:
        """Backoff before the attempt following ``attempt`` (1-based)."""
        base = self.base_delay_s * attempt if self.linear else self.base_delay_s
        delay = base + random.uniform(0, self.jitter_s)
        if retry_after is not None and retry_after > delay:
            delay = retry_after
        return min(delay, self.max_delay_s)


async def fetch_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
) -> T:
    """Run ``operation``, retrying only while it is rate limited.

    Args:
        operation: Zero-argument coroutine factory performing one call
        policy: Retry policy (defaults to RetryPolicy())

    Returns:
        The operation's result

    Raises:
        FetchError: On a non-429 provider error (no retry) or after
            ``max_attempts`` rate-limited tries
    """
    policy = policy or RetryPolicy()
    attempt = 1
    while True:
        try:
            return await operation()
        except RateLimitedError as e:
            if attempt >= policy.max_attempts:
                raise FetchError(
                    f"Rate limited after {attempt} attempts",
                    status_code=429,
                    attempts=attempt,
                ) from e
            delay = policy.delay_for(attempt, e.retry_after)
            logger.warning(
                "chunk_retry_scheduled",
                extra={
                    "attempt": attempt,
                    "max_attempts": policy.max_attempts,
                    "delay_s": round(delay, 3),
                },
            )
            await asyncio.sleep(delay)
            attempt += 1
        except ProviderError as e:
            raise FetchError(str(e), status_code=e.status_code, attempts=attempt) from e
