"""
Tests for the retry decorator and retryable status handling.
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from storefront.core.retry import (
    RETRYABLE_STATUS_CODES,
    TRANSIENT_HTTP_ERRORS,
    RetryableStatusError,
    raise_for_retryable_status,
    retry_with_backoff,
)


@pytest.fixture
def no_sleep():
    with patch("storefront.core.retry.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


def response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", "https://api.razorpay.com/v1/orders"))


class Flaky:
    """Async callable that plays back ``outcomes`` (exceptions are raised)."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def decorate(flaky: Flaky, **options):
    @retry_with_backoff(**options)
    async def create_order():
        return await flaky()

    return create_order


class TestRetryWithBackoff:

    @pytest.mark.asyncio
    async def test_success_first_try(self, no_sleep):
        flaky = Flaky("ok")

        assert await decorate(flaky, max_retries=2)() == "ok"
        assert flaky.calls == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, no_sleep):
        """
        Test a call that fails once then succeeds.

        Arrange: Function raising ConnectError on the first call
        Act: Call through the decorator
        Assert: Result returned after one sleep
        """
        # Arrange
        flaky = Flaky(httpx.ConnectError("reset"), "ok")
        create_order = decorate(flaky, max_retries=2, exceptions=TRANSIENT_HTTP_ERRORS)

        # Act
        result = await create_order()

        # Assert
        assert result == "ok"
        assert flaky.calls == 2
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, no_sleep):
        flaky = Flaky(httpx.ReadTimeout("slow"))

        with pytest.raises(httpx.ReadTimeout):
            await decorate(flaky, max_retries=2, exceptions=TRANSIENT_HTTP_ERRORS)()

        assert flaky.calls == 3
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_other_exceptions_not_retried(self, no_sleep):
        flaky = Flaky(ValueError("bad payload"))

        with pytest.raises(ValueError):
            await decorate(flaky, max_retries=3, exceptions=TRANSIENT_HTTP_ERRORS)()

        assert flaky.calls == 1

    @pytest.mark.asyncio
    async def test_exponential_delays_capped(self, no_sleep):
        flaky = Flaky(RuntimeError("down"))

        with pytest.raises(RuntimeError):
            await decorate(
                flaky, max_retries=4, base_delay=1.0, max_delay=3.0, jitter=False, exceptions=(RuntimeError,)
            )()

        delays = [call.args[0] for call in no_sleep.await_args_list]
        assert delays == [1.0, 2.0, 3.0, 3.0]

    @pytest.mark.asyncio
    async def test_jitter_stays_within_twenty_percent(self, no_sleep):
        flaky = Flaky(RuntimeError("down"), "ok")

        await decorate(flaky, max_retries=1, base_delay=1.0, exceptions=(RuntimeError,))()

        assert 0.8 <= no_sleep.await_args.args[0] <= 1.2

    def test_wrapped_name_preserved(self):
        assert decorate(Flaky("ok")).__name__ == "create_order"


class TestRetryableStatus:

    @pytest.mark.parametrize("status_code", sorted(RETRYABLE_STATUS_CODES))
    def test_retryable_statuses_raise(self, status_code):
        with pytest.raises(RetryableStatusError) as exc_info:
            raise_for_retryable_status(response(status_code))

        assert exc_info.value.status_code == status_code

    @pytest.mark.parametrize("status_code", [200, 201, 400, 401, 404, 422])
    def test_other_statuses_pass_through(self, status_code):
        original = response(status_code)

        assert raise_for_retryable_status(original) is original
