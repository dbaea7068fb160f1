"""Tests for the async retry helper."""

from __future__ import annotations

import httpx
import pytest

from sitesmith.errors import UpstreamError
from sitesmith.retry import RetryExhaustedError, async_with_retry, is_transient


class TestIsTransient:
    def test_transport_error(self):
        assert is_transient(httpx.ConnectError("boom"))

    def test_upstream_5xx_and_429(self):
        assert is_transient(UpstreamError("godaddy", 503, "down"))
        assert is_transient(UpstreamError("godaddy", 429, "slow down"))

    def test_upstream_4xx_is_not(self):
        assert not is_transient(UpstreamError("godaddy", 422, "bad"))

    def test_other_errors_are_not(self):
        assert not is_transient(ValueError("nope"))


class TestAsyncWithRetry:
    async def test_succeeds_first_try(self):
        async def ok():
            return 42

        assert await async_with_retry(ok, max_retries=3, base_delay=0.0) == 42

    async def test_succeeds_after_transient_failures(self):
        attempts = {"count": 0}

        async def flaky():
            attempts["count"] += 1
            if attempts["count"] < 3:
                raise UpstreamError("namecheap", 502, "bad gateway")
            return "ok"

        assert await async_with_retry(flaky, max_retries=3, base_delay=0.0) == "ok"
        assert attempts["count"] == 3

    async def test_exhausted_raises(self):
        async def always_fail():
            raise httpx.ReadTimeout("slow")

        with pytest.raises(RetryExhaustedError, match="Failed after 4 attempts"):
            await async_with_retry(always_fail, max_retries=3, base_delay=0.0)

    async def test_non_retryable_raises_immediately(self):
        attempts = {"count": 0}

        async def rejected():
            attempts["count"] += 1
            raise UpstreamError("godaddy", 400, "invalid")

        with pytest.raises(UpstreamError):
            await async_with_retry(rejected, max_retries=3, base_delay=0.0)
        assert attempts["count"] == 1  # No retries
