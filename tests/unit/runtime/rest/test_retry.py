"""Unit tests for the rate-limit retry wrapper."""

from __future__ import annotations

import pytest

from sheetalbum.core import FetchError, ProviderError, RateLimitedError
from sheetalbum.runtime.rest import RetryPolicy, fetch_with_retry
from sheetalbum.runtime.rest import retry as retry_module

NO_DELAY = RetryPolicy(base_delay_s=0.0, jitter_s=0.0)


class FlakyCall:
    """Fails with the queued errors, then returns ``result``."""

    def __init__(self, errors: list[Exception], result: bytes = b"%PDF") -> None:
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self) -> bytes:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


class TestFetchWithRetry:
    """Test fetch_with_retry behavior."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        call = FlakyCall([])

        assert await fetch_with_retry(call, NO_DELAY) == b"%PDF"
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt_after_two_429(self):
        """Test two 429s then success returns on the 3rd attempt."""
        call = FlakyCall([RateLimitedError("slow down"), RateLimitedError("slow down")])

        assert await fetch_with_retry(call, NO_DELAY) == b"%PDF"
        assert call.calls == 3

    @pytest.mark.asyncio
    async def test_always_429_fails_after_five_attempts(self):
        """Test a permanently rate-limited call stops at exactly 5 attempts."""
        call = FlakyCall([RateLimitedError("slow down") for _ in range(10)])

        with pytest.raises(FetchError) as exc_info:
            await fetch_with_retry(call, NO_DELAY)

        assert call.calls == 5
        assert exc_info.value.status_code == 429
        assert exc_info.value.attempts == 5
        assert isinstance(exc_info.value.__cause__, RateLimitedError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403, 500, 503])
    async def test_non_429_not_retried(self, status: int):
        """Test other HTTP errors propagate immediately with zero retries."""
        call = FlakyCall([ProviderError("boom", status_code=status)])

        with pytest.raises(FetchError) as exc_info:
            await fetch_with_retry(call, NO_DELAY)

        assert call.calls == 1
        assert exc_info.value.status_code == status
        assert exc_info.value.attempts == 1

    @pytest.mark.asyncio
    async def test_unrelated_exception_propagates_untouched(self):
        call = FlakyCall([KeyError("x")])

        with pytest.raises(KeyError):
            await fetch_with_retry(call, NO_DELAY)
        assert call.calls == 1

    @pytest.mark.asyncio
    async def test_non_429_after_429_stops(self):
        """Test a non-429 error during retries is terminal."""
        call = FlakyCall([RateLimitedError("slow"), ProviderError("auth", status_code=401)])

        with pytest.raises(FetchError) as exc_info:
            await fetch_with_retry(call, NO_DELAY)

        assert call.calls == 2
        assert exc_info.value.status_code == 401
        assert exc_info.value.attempts == 2

    @pytest.mark.asyncio
    async def test_smaller_attempt_cap(self):
        call = FlakyCall([RateLimitedError("slow") for _ in range(5)])
        policy = RetryPolicy(max_attempts=2, base_delay_s=0.0, jitter_s=0.0)

        with pytest.raises(FetchError):
            await fetch_with_retry(call, policy)
        assert call.calls == 2

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self, monkeypatch):
        """Test the wrapper sleeps with the policy's linear backoff."""
        delays: list[float] = []

        async def fake_sleep(delay: float) -> None:
            delays.append(delay)

        monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
        call = FlakyCall([RateLimitedError("slow") for _ in range(3)])
        policy = RetryPolicy(base_delay_s=1.0, jitter_s=0.0, linear=True)

        await fetch_with_retry(call, policy)

        assert delays == [1.0, 2.0, 3.0]


class TestRetryPolicy:
    """Test RetryPolicy validation and delay computation."""

    def test_attempts_capped_at_five(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=6)
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(base_delay_s=-1.0)

    def test_jitter_bounds(self):
        """Test fixed-base jitter stays within [base, base + jitter]."""
        policy = RetryPolicy(base_delay_s=3.0, jitter_s=3.0)

        for attempt in range(1, 5):
            delay = policy.delay_for(attempt)
            assert 3.0 <= delay <= 6.0

    def test_linear_growth(self):
        policy = RetryPolicy(base_delay_s=2.0, jitter_s=0.0, linear=True)

        assert [policy.delay_for(a) for a in (1, 2, 3, 4)] == [2.0, 4.0, 6.0, 8.0]

    def test_retry_after_raises_floor(self):
        policy = RetryPolicy(base_delay_s=1.0, jitter_s=0.0)

        assert policy.delay_for(1, retry_after=7.0) == 7.0

    def test_max_delay_caps(self):
        policy = RetryPolicy(base_delay_s=10.0, jitter_s=0.0, linear=True, max_delay_s=25.0)

        assert policy.delay_for(4) == 25.0
        assert policy.delay_for(1, retry_after=100.0) == 25.0
