"""Retry policy and provider-error classification for model calls."""

import asyncio
import logging

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from pitchplan.errors import (
    ConfigurationError,
    InvalidCredentialError,
    RateLimitError,
    ReportError,
)

logger = logging.getLogger(__name__)

# Never retried: fixing these needs the user, not another attempt.
_NON_RETRYABLE = (ConfigurationError, ReportError)


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    status = getattr(exc, "status_code", None)
    return status if isinstance(status, int) else None


def classify_provider_error(exc: Exception) -> Exception:
    """Map a provider failure onto the error taxonomy.

    Rate limits and rejected credentials get their own error types; anything
    else is returned unchanged so it propagates verbatim.
    """
    if isinstance(exc, (RateLimitError, InvalidCredentialError)):
        return exc
    status = _status_code(exc)
    message = str(exc).lower()
    if status == 429 or "rate limit" in message:
        return RateLimitError()
    if status == 401 or "api key" in message:
        return InvalidCredentialError()
    return exc


def _log_retry(state) -> None:
    logger.warning(
        "Transient error: %r. Retrying in %.1fs (attempt %d)...",
        state.outcome.exception(),
        state.next_action.sleep,
        state.attempt_number,
    )


async def call_with_retry(fn, *, max_retries: int, retry_delay_ms: int, sleep=None):
    """Await ``fn()`` with linear backoff, up to ``max_retries`` retries.

    The nth retry waits ``retry_delay_ms * n`` milliseconds. Once the budget
    is spent the last error is re-raised unchanged. ``sleep`` defaults to
    :func:`asyncio.sleep` and is injectable for tests.
    """
    delay = retry_delay_ms / 1000
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),  # +1 because first attempt counts
        wait=wait_incrementing(start=delay, increment=delay),
        # CancelledError is a BaseException: cancellation propagates without a retry.
        retry=retry_if_exception_type(Exception) & retry_if_not_exception_type(_NON_RETRYABLE),
        reraise=True,
        before_sleep=_log_retry,
        sleep=sleep or asyncio.sleep,
    )
    return await retrying(fn)
