"""Tests for pitchplan.utils.retry: classify_provider_error, call_with_retry."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from pitchplan.errors import (
    ConfigurationError,
    InvalidCredentialError,
    RateLimitError,
    ReportParseError,
)
from pitchplan.utils.retry import call_with_retry, classify_provider_error


def _status_error(code: int) -> httpx.HTTPStatusError:
    response = httpx.Response(code, request=httpx.Request("POST", "https://api.example.com"))
    return httpx.HTTPStatusError("error", request=response.request, response=response)


def _delays(sleep: AsyncMock) -> list[float]:
    return [c.args[0] for c in sleep.call_args_list]


# --- classify_provider_error ---

class TestClassifyProviderError:
    def test_rate_limit_message(self):
        assert isinstance(classify_provider_error(Exception("Rate limit reached for gpt-4")), RateLimitError)

    def test_429_status(self):
        assert isinstance(classify_provider_error(_status_error(429)), RateLimitError)

    def test_api_key_message(self):
        exc = Exception("Incorrect API key provided: sk-***")
        assert isinstance(classify_provider_error(exc), InvalidCredentialError)

    def test_401_status(self):
        assert isinstance(classify_provider_error(_status_error(401)), InvalidCredentialError)

    def test_status_code_attribute(self):
        exc = Exception("too many requests")
        exc.status_code = 429
        assert isinstance(classify_provider_error(exc), RateLimitError)

    def test_other_errors_pass_through(self):
        exc = httpx.ConnectError("connection refused")
        assert classify_provider_error(exc) is exc

    def test_server_error_passes_through(self):
        exc = _status_error(503)
        assert classify_provider_error(exc) is exc


# --- call_with_retry ---

class TestCallWithRetry:
    def test_succeeds_on_first_try(self, sleep):
        fn = AsyncMock(return_value="ok")

        result = asyncio.run(call_with_retry(fn, max_retries=3, retry_delay_ms=1000, sleep=sleep))

        assert result == "ok"
        assert fn.await_count == 1
        sleep.assert_not_called()

    def test_retries_then_succeeds(self, sleep):
        fn = AsyncMock(side_effect=[httpx.ConnectError("fail"), "ok"])

        result = asyncio.run(call_with_retry(fn, max_retries=3, retry_delay_ms=1000, sleep=sleep))

        assert result == "ok"
        assert fn.await_count == 2
        assert _delays(sleep) == [1.0]

    def test_linear_backoff_until_exhausted(self, sleep):
        errors = [httpx.ConnectError(f"fail {n}") for n in range(4)]
        fn = AsyncMock(side_effect=errors)

        with pytest.raises(httpx.ConnectError) as excinfo:
            asyncio.run(call_with_retry(fn, max_retries=3, retry_delay_ms=1000, sleep=sleep))

        assert excinfo.value is errors[-1]  # last error, unchanged
        assert fn.await_count == 4  # 1 initial + 3 retries
        assert _delays(sleep) == [1.0, 2.0, 3.0]

    def test_custom_budget_and_delay(self, sleep):
        fn = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            asyncio.run(call_with_retry(fn, max_retries=5, retry_delay_ms=250, sleep=sleep))

        assert fn.await_count == 6
        assert _delays(sleep) == [0.25, 0.5, 0.75, 1.0, 1.25]

    def test_zero_retries_single_attempt(self, sleep):
        fn = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            asyncio.run(call_with_retry(fn, max_retries=0, retry_delay_ms=1000, sleep=sleep))

        assert fn.await_count == 1
        sleep.assert_not_called()

    def test_configuration_error_not_retried(self, sleep):
        fn = AsyncMock(side_effect=ConfigurationError("no key"))

        with pytest.raises(ConfigurationError):
            asyncio.run(call_with_retry(fn, max_retries=3, retry_delay_ms=1000, sleep=sleep))

        assert fn.await_count == 1

    def test_report_error_not_retried(self, sleep):
        fn = AsyncMock(side_effect=ReportParseError("bad"))

        with pytest.raises(ReportParseError):
            asyncio.run(call_with_retry(fn, max_retries=3, retry_delay_ms=1000, sleep=sleep))

        assert fn.await_count == 1

    def test_cancellation_not_retried(self, sleep):
        fn = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            asyncio.run(call_with_retry(fn, max_retries=3, retry_delay_ms=1000, sleep=sleep))

        assert fn.await_count == 1
        sleep.assert_not_called()
