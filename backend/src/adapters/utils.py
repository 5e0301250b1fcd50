"""Shared utilities for adapter implementations."""

import logging
from typing import Awaitable, Callable, TypeVar

import requests
from tenacity import AsyncRetrying, RetryCallState, RetryError, stop_after_attempt, wait_fixed

from errors import CompletionRequestFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0


def create_session_with_pooling(
    pool_connections: int = 10,
    pool_maxsize: int = 20,
    max_retries: int = 0,
) -> requests.Session:
    """Create a requests Session with connection pooling.

    Connection-level retries default to zero; retry policy for completion
    calls lives in ``call_with_retry``.
    """
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=max_retries,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_RETRY_DELAY,
    description: str = "completion",
) -> T:
    """Await operation up to max_attempts times with a fixed delay between tries.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total attempts, including the first.
        delay: Seconds to wait between attempts.
        description: Label used in logs and in the terminal error.

    Returns:
        The first successful result.

    Raises:
        CompletionRequestFailed: When every attempt failed.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    def log_failure(state: RetryCallState) -> None:
        logger.warning(
            f"{description} failed (attempt {state.attempt_number}/{max_attempts}): "
            f"{state.outcome.exception()}"
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        before_sleep=log_failure,
    )
    try:
        async for attempt in retrying:
            with attempt:
                return await operation()
    except RetryError as e:
        last_error = e.last_attempt.exception()
        logger.error(f"{description} failed after {max_attempts} attempts: {last_error}")
        raise CompletionRequestFailed(
            f"Failed to get {description} after {max_attempts} attempts.",
            attempts=max_attempts,
            details={"last_error": str(last_error)},
        ) from last_error
