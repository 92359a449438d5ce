"""Shared HTTP plumbing for language model clients."""

import random
import threading
import time
from http import HTTPStatus

import httpx
import structlog

from ago_diagnosis.llm.errors import LlmApiError


DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY = 1.0  # seconds
RETRYABLE_STATUS_CODES = {
    HTTPStatus.TOO_MANY_REQUESTS,
    HTTPStatus.SERVICE_UNAVAILABLE,
}


class MinIntervalLimiter:
    """Enforce a minimum interval between outbound requests.

    Thread-safe: concurrent rubric evaluations share one client.
    """

    def __init__(self, min_interval: float) -> None:
        self._min_interval = min_interval
        self._last_request_time = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until the next request may be sent."""
        if self._min_interval <= 0:
            return
        with self._lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self._min_interval:
                time.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()


def post_with_retry(  # noqa: PLR0913
    url: str,
    *,
    headers: dict[str, str],
    body: dict[str, object],
    timeout: float,
    limiter: MinIntervalLimiter,
    log: structlog.stdlib.BoundLogger,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
) -> httpx.Response:
    """POST JSON, retrying with exponential backoff on 429/503.

    Args:
        url: Endpoint URL.
        headers: Request headers (credentials included).
        body: JSON request body.
        timeout: Per-attempt timeout in seconds.
        limiter: Shared request interval limiter.
        log: Bound logger.
        max_retries: Retries after the first attempt.
        retry_base_delay: Base backoff delay in seconds.

    Returns:
        The successful (200) response.

    Raises:
        LlmApiError: On network errors, non-retryable statuses, or when
            retries are exhausted.
    """
    for attempt in range(max_retries + 1):
        limiter.wait()

        try:
            response = httpx.post(url, headers=headers, json=body, timeout=timeout)
        except httpx.HTTPError as exc:
            msg = f"LLM request failed: {exc}"
            raise LlmApiError(msg) from exc

        if response.status_code == HTTPStatus.OK:
            return response

        if response.status_code in RETRYABLE_STATUS_CODES and attempt < max_retries:
            delay = retry_base_delay * (2**attempt) + random.uniform(0, 1)  # noqa: S311
            log.warning(
                "llm_retryable_error",
                status=response.status_code,
                attempt=attempt + 1,
                retry_delay=round(delay, 1),
            )
            time.sleep(delay)
            continue

        msg = f"LLM API returned {response.status_code}"
        raise LlmApiError(msg, status_code=response.status_code)

    msg = "All retries exhausted"
    raise LlmApiError(msg)
