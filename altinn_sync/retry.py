"""Tenacity retry wrapper driven by RetryConfig."""

from __future__ import annotations

from collections.abc import Callable

from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import RetryConfig
from .errors import RemoteError, TransportError


def is_retryable(exc: BaseException) -> bool:
    """Network failures and 5xx answers are retried; 4xx answers are final."""
    if isinstance(exc, TransportError):
        return True
    if isinstance(exc, RemoteError):
        return exc.retryable
    return False


def with_retry(
    config: RetryConfig,
    *,
    predicate: Callable[[BaseException], bool] = is_retryable,
) -> Callable:
    """Return a tenacity retry decorator configured from *config*.

    Usage::

        @with_retry(config.retry)
        async def fetch(uri: str) -> bytes: ...
    """
    return retry(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(
            multiplier=config.multiplier,
            min=config.initial_wait_seconds,
            max=config.max_wait_seconds,
        ),
        retry=retry_if_exception(predicate),
        reraise=True,
    )
