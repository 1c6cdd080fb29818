"""Tests for utility modules."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from utils.errors import (
    CallOutcome,
    DeviceNotFoundError,
    ErrorCategory,
    HubApiError,
    HubConnectionError,
    InvalidPayloadError,
    classify_exception,
    execute_with_timeout,
    run_api_call,
)
from utils.retry import RetryExhausted, backoff_delays, retry_async


class TestRetry:
    """Tests for retry utilities."""

    @pytest.mark.asyncio
    async def test_retry_success_first_try(self):
        """Test successful operation on first try."""
        mock_func = AsyncMock(return_value="success")

        result = await retry_async(mock_func, max_attempts=3, initial_delay=0.01)

        assert result == "success"
        assert mock_func.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_success_after_failures(self):
        """Test successful operation after some failures."""
        mock_func = AsyncMock(side_effect=[HubConnectionError("down"), HubConnectionError("down"), []])

        result = await retry_async(mock_func, max_attempts=3, initial_delay=0.01)

        assert result == []
        assert mock_func.call_count == 3

    @pytest.mark.asyncio
    async def test_retry_exhausted(self):
        """Test retry exhaustion."""
        mock_func = AsyncMock(side_effect=HubApiError("always fails", status_code=503))

        with pytest.raises(RetryExhausted) as exc_info:
            await retry_async(mock_func, max_attempts=3, initial_delay=0.01)

        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_exception, HubApiError)
        assert mock_func.call_count == 3

    @pytest.mark.asyncio
    async def test_timeouts_retried_by_default(self):
        mock_func = AsyncMock(side_effect=[TimeoutError(), ["zone"]])

        assert await retry_async(mock_func, initial_delay=0.01) == ["zone"]
        assert mock_func.call_count == 2

    @pytest.mark.asyncio
    async def test_unexpected_errors_not_retried_by_default(self):
        mock_func = AsyncMock(side_effect=KeyError("data"))

        with pytest.raises(KeyError):
            await retry_async(mock_func, initial_delay=0.01)

        assert mock_func.call_count == 1

    @pytest.mark.asyncio
    async def test_exhausted_message_names_the_request(self):
        mock_func = AsyncMock(side_effect=HubConnectionError("refused"))

        with pytest.raises(RetryExhausted) as exc_info:
            await retry_async(
                mock_func,
                description="Initial zone fetch from hub.local",
                max_attempts=2,
                initial_delay=0.01,
            )

        assert str(exc_info.value).startswith("Initial zone fetch from hub.local failed after 2")

    @pytest.mark.asyncio
    async def test_zero_attempts_rejected(self):
        with pytest.raises(ValueError):
            await retry_async(AsyncMock(), max_attempts=0)

    def test_backoff_delays_capped(self):
        delays = backoff_delays(1.0, 5.0)
        assert [next(delays) for _ in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    @pytest.mark.asyncio
    async def test_non_retryable_exception_propagates(self):
        mock_func = AsyncMock(side_effect=KeyError("data"))

        with pytest.raises(KeyError):
            await retry_async(
                mock_func,
                max_attempts=3,
                initial_delay=0.01,
                retryable_exceptions=(HubApiError,),
            )

        assert mock_func.call_count == 1

    @pytest.mark.asyncio
    async def test_arguments_passed_through(self):
        mock_func = AsyncMock(return_value=None)

        await retry_async(mock_func, 7, max_attempts=1, duration=60)

        mock_func.assert_called_once_with(7, duration=60)


class TestClassifyException:
    @pytest.mark.parametrize(
        "error,category",
        [
            (asyncio.TimeoutError(), ErrorCategory.TIMEOUT),
            (HubConnectionError("refused"), ErrorCategory.CONNECTION),
            (ConnectionResetError(), ErrorCategory.CONNECTION),
            (HubApiError("bad", status_code=500), ErrorCategory.API_ERROR),
            (DeviceNotFoundError("room", "Attic"), ErrorCategory.DEVICE_NOT_FOUND),
            (InvalidPayloadError("heatingSetpoint", "hot"), ErrorCategory.INVALID_PAYLOAD),
            (KeyError("iID"), ErrorCategory.MALFORMED_RECORD),
            (RuntimeError("?"), ErrorCategory.INTERNAL_ERROR),
        ],
    )
    def test_categories(self, error, category):
        assert classify_exception(error) == category


class TestRunApiCall:
    """Tests for the fire-and-forget call wrapper."""

    @pytest.mark.asyncio
    async def test_success(self):
        async def call():
            return {"ok": True}

        outcome = await run_api_call(call(), "set zone 3 mode")

        assert outcome.ok is True
        assert outcome.result == {"ok": True}
        assert outcome.category is None

    @pytest.mark.asyncio
    async def test_failure_is_captured_and_logged(self, caplog):
        async def call():
            raise HubApiError("zone 3 returned 500", status_code=500)

        with caplog.at_level(logging.ERROR):
            outcome = await run_api_call(call(), "set zone 3 mode")

        assert outcome.ok is False
        assert outcome.category == ErrorCategory.API_ERROR
        assert outcome.error == "zone 3 returned 500"
        assert "set zone 3 mode failed" in caplog.text

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def call():
            await asyncio.sleep(10)

        outcome = await run_api_call(call(), "slow call", timeout=0.01)

        assert outcome.ok is False
        assert outcome.category == ErrorCategory.TIMEOUT
        assert outcome.error == "TimeoutError"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        task = asyncio.create_task(run_api_call(asyncio.sleep(10), "sleeping"))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_execute_with_timeout_returns_result(self):
        async def call():
            return 42

        assert await execute_with_timeout(call(), timeout=1.0) == 42


class TestCallOutcome:
    def test_success_dict(self):
        assert CallOutcome(description="refresh", ok=True).to_dict() == {
            "call": "refresh",
            "ok": True,
        }

    def test_failure_dict(self):
        outcome = CallOutcome(
            description="refresh",
            ok=False,
            category=ErrorCategory.CONNECTION,
            error="refused",
        )
        assert outcome.to_dict() == {
            "call": "refresh",
            "ok": False,
            "error_category": "connection",
            "error": "refused",
        }
