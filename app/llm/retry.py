"""Exponential backoff retry shared by every external model call."""

import random
import socket
import time
from collections.abc import Callable
from typing import TypeVar

import httpx
import openai

from app.cancellation.cancellation_token import CancellationToken
from app.llm.exceptions import ModelApiError, ModelNetworkError
from app.logging.logger import Log

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
MAX_JITTER_MS = 1000

_RETRYABLE_NETWORK_ERRORS: tuple[type[BaseException], ...] = (
    ModelNetworkError,
    ConnectionError,
    TimeoutError,
    socket.gaierror,
    httpx.TransportError,
    openai.APIConnectionError,
)


def is_retryable(exc: BaseException) -> bool:
    """Connection-level failures and 429/5xx statuses are retryable; all else is fatal."""
    if isinstance(exc, ModelApiError):
        return exc.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, _RETRYABLE_NETWORK_ERRORS)


def backoff_delay_ms(attempt: int, base_delay_ms: int) -> float:
    """Delay before the attempt following ``attempt`` (1-based)."""
    return base_delay_ms * 2 ** (attempt - 1) + random.uniform(0, MAX_JITTER_MS)


def retry_call(
    call: Callable[[], T],
    max_attempts: int = 3,
    base_delay_ms: int = 1000,
    *,
    description: str = "model call",
    cancellation: CancellationToken | None = None,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Invoke ``call`` until it succeeds, a fatal error occurs or attempts run out.

    Args:
        call: Zero-argument callable performing one external request.
        max_attempts: Total number of invocations allowed (at least 1).
        base_delay_ms: First backoff delay; doubles on every further attempt.
        description: Label used in log lines.
        cancellation: Checked after every backoff sleep.
        sleep: Sleep function taking seconds; defaults to ``time.sleep``.

    Returns:
        The value returned by the first successful invocation.

    Raises:
        The last error raised by ``call`` when it is fatal or attempts are
        exhausted; OperationCancelledError if the user cancelled mid-backoff.
    """
    attempts = max(1, max_attempts)
    attempt = 0
    while True:
        attempt += 1
        try:
            result = call()
        except Exception as exc:
            if not is_retryable(exc):
                Log.error(
                    f"{description} failed with non-retryable {type(exc).__name__}: {exc}"
                )
                raise
            if attempt >= attempts:
                Log.error(
                    f"{description} failed after {attempt} attempts "
                    f"({type(exc).__name__}: {exc})"
                )
                raise
            delay_ms = backoff_delay_ms(attempt, base_delay_ms)
            Log.warning(
                f"{description} attempt {attempt}/{attempts} failed "
                f"({type(exc).__name__}: {exc}), retrying in {delay_ms:.0f}ms"
            )
            (sleep or time.sleep)(delay_ms / 1000)
            if cancellation is not None:
                cancellation.check()
            continue

        if attempt > 1:
            Log.info(f"{description} succeeded on attempt {attempt}/{attempts}")
        else:
            Log.debug(f"{description} succeeded on first attempt")
        return result
