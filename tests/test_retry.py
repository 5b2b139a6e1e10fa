"""Tests for mail delivery retry utilities."""

import pytest

from ereminders.config.models import RetryConfig
from ereminders.errors import TransportError
from ereminders.retry import calculate_delay, is_retryable_error, with_retry


class TestIsRetryableError:
    def test_transport_errors(self):
        assert is_retryable_error(TransportError("timeout"))
        assert not is_retryable_error(TransportError("refused", retryable=False))

    def test_network_errors(self):
        assert is_retryable_error(TimeoutError())
        assert is_retryable_error(ConnectionResetError())

    def test_other_errors(self):
        assert not is_retryable_error(ValueError("bad"))


class TestCalculateDelay:
    def test_exponential_with_cap(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0)
        assert 0.9 <= calculate_delay(1, config) <= 1.1
        assert 1.8 <= calculate_delay(2, config) <= 2.2
        assert 4.5 <= calculate_delay(10, config) <= 5.5

    def test_zero_base(self):
        assert calculate_delay(3, RetryConfig(base_delay=0)) == 0


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_success_no_retry(self):
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            return "sent"

        assert await with_retry(func) == "sent"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retry_then_success(self):
        call_count = 0
        retries: list[int] = []

        async def func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise TransportError("temporary")
            return "sent"

        config = RetryConfig(max_attempts=3, base_delay=0)
        result = await with_retry(
            func, config, on_retry=lambda attempt, e, delay: retries.append(attempt)
        )

        assert result == "sent"
        assert call_count == 3
        assert retries == [1, 2]

    @pytest.mark.asyncio
    async def test_exhausted(self):
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            raise TransportError("down")

        with pytest.raises(TransportError, match="down"):
            await with_retry(func, RetryConfig(max_attempts=2, base_delay=0))
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self):
        call_count = 0

        async def func():
            nonlocal call_count
            call_count += 1
            raise ValueError("bug")

        with pytest.raises(ValueError):
            await with_retry(func, RetryConfig(max_attempts=5, base_delay=0))
        assert call_count == 1
