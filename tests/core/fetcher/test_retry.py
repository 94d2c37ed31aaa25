"""Test retry utility."""

import pytest

from payroc.core.fetcher.retry import async_retry_with_backoff


@pytest.mark.asyncio
async def test_retry_success_on_second_attempt():
    """Test that retry stops once the outcome is no longer transient."""
    attempt_count = 0

    async def flaky_function():
        nonlocal attempt_count
        attempt_count += 1
        return "busy" if attempt_count < 2 else "success"

    result = await async_retry_with_backoff(
        flaky_function,
        should_retry=lambda outcome: outcome == "busy",
        max_retries=3,
        base_delay=0.01,
    )
    assert result == "success"
    assert attempt_count == 2


@pytest.mark.asyncio
async def test_retry_returns_last_outcome_after_max_attempts():
    """Test that retry gives up after max attempts."""
    attempt_count = 0

    async def always_busy():
        nonlocal attempt_count
        attempt_count += 1
        return "busy"

    result = await async_retry_with_backoff(
        always_busy,
        should_retry=lambda outcome: True,
        max_retries=2,
        base_delay=0.01,
    )
    assert result == "busy"
    assert attempt_count == 3


@pytest.mark.asyncio
async def test_retry_propagates_exceptions():
    async def broken():
        raise ValueError("Permanent failure")

    with pytest.raises(ValueError, match="Permanent failure"):
        await async_retry_with_backoff(broken, should_retry=lambda outcome: True)
