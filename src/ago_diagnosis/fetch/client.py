"""HTTP client for retrieving the page under diagnosis."""

import time
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from urllib.parse import urlparse

import httpx
import structlog

from ago_diagnosis.fetch.config import FetchConfig
from ago_diagnosis.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_BAD_REQUEST,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_SERVER_ERROR_MAX,
    HTTP_STATUS_SERVER_ERROR_MIN,
    HTTP_STATUS_TOO_MANY_REQUESTS,
    MAX_RETRY_AFTER_SECONDS,
)
from ago_diagnosis.fetch.metrics import FetchMetrics
from ago_diagnosis.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
)
from ago_diagnosis.fetch.redact import redact_headers, redact_url


logger = structlog.get_logger()

ACCEPT_HEADER = "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8"


def parse_retry_after(value: str | None) -> int | None:
    """Seconds to wait from a Retry-After header (delta-seconds or HTTP date)."""
    if not value:
        return None

    value = value.strip()
    if value.isdigit():
        return int(value)

    try:
        moment = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return max(0, int((moment - datetime.now(UTC)).total_seconds()))


def classify_status(
    status_code: int, retry_after: str | None = None
) -> FetchError | None:
    """Map an HTTP status to a FetchError; None for 2xx.

    Args:
        status_code: Response status.
        retry_after: Raw Retry-After header, read for 429 only.

    Returns:
        FetchError describing the status, or None on success.
    """
    if HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
        return None

    if status_code == HTTP_STATUS_TOO_MANY_REQUESTS:
        return FetchError(
            error_class=FetchErrorClass.RATE_LIMITED,
            message="Rate limited (429 Too Many Requests)",
            status_code=status_code,
            retry_after=parse_retry_after(retry_after),
        )

    if HTTP_STATUS_BAD_REQUEST <= status_code < HTTP_STATUS_SERVER_ERROR_MIN:
        error_class, kind = FetchErrorClass.HTTP_4XX, "Client error"
    elif HTTP_STATUS_SERVER_ERROR_MIN <= status_code < HTTP_STATUS_SERVER_ERROR_MAX:
        error_class, kind = FetchErrorClass.HTTP_5XX, "Server error"
    else:
        error_class, kind = FetchErrorClass.UNKNOWN, "Unexpected status"

    return FetchError(
        error_class=error_class,
        message=f"{kind} ({status_code})",
        status_code=status_code,
    )


def _failed(
    url: str,
    error_class: FetchErrorClass,
    message: str,
    status_code: int | None = None,
) -> FetchResult:
    return FetchResult(
        status_code=status_code or 0,
        final_url=url,
        headers={},
        body_bytes=b"",
        error=FetchError(
            error_class=error_class, message=message, status_code=status_code
        ),
    )


class HttpFetcher:
    """Fetches one page with bounded retries.

    Transport problems never raise: every failure is reported through
    ``FetchResult.error`` so the caller decides how to degrade. One
    ``httpx.Client`` is opened per fetch and shared by its attempts.
    Retry-After on a 429 stretches the backoff delay, capped at
    ``MAX_RETRY_AFTER_SECONDS``.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            config: Fetch configuration (defaults used when omitted).
            transport: httpx transport override; tests pass a MockTransport.
        """
        self._config = config or FetchConfig()
        self._transport = transport
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> FetchConfig:
        """Active fetch configuration."""
        return self._config

    def request_headers(self) -> dict[str, str]:
        """Headers sent with every request, extra headers last."""
        return {
            "User-Agent": self._config.user_agent,
            "Accept": ACCEPT_HEADER,
            "Accept-Encoding": "gzip, deflate",
            **self._config.extra_headers,
        }

    def fetch(self, url: str) -> FetchResult:
        """GET a URL, following redirects and retrying transient failures.

        Args:
            url: The URL to fetch.

        Returns:
            FetchResult of the last attempt.
        """
        started = time.perf_counter()
        log = self._log.bind(url=redact_url(url), domain=urlparse(url).netloc)
        headers = self.request_headers()
        policy = self._config.retry_policy

        with httpx.Client(
            timeout=self._config.timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            attempt = 0
            while True:
                log.debug(
                    "fetch_attempt", attempt=attempt, headers=redact_headers(headers)
                )
                result = self._attempt(client, url, headers)
                error = result.error
                if error is None or not policy.should_retry(error, attempt):
                    break

                delay_seconds = policy.get_delay_ms(attempt) / 1000.0
                rate_limited = error.error_class == FetchErrorClass.RATE_LIMITED
                if rate_limited and error.retry_after:
                    log.info(
                        "rate_limited", retry_after=error.retry_after, attempt=attempt
                    )
                    delay_seconds = max(
                        delay_seconds, min(error.retry_after, MAX_RETRY_AFTER_SECONDS)
                    )

                attempt += 1
                self._metrics.record_retry()
                log.debug(
                    "retry_scheduled", attempt=attempt, delay_seconds=delay_seconds
                )
                time.sleep(delay_seconds)

        if result.error is not None:
            self._metrics.record_failure(result.error.error_class)

        duration_ms = (time.perf_counter() - started) * 1000
        self._metrics.record_duration(duration_ms)
        log.info(
            "fetch_complete",
            status_code=result.status_code,
            bytes=result.body_size,
            attempts=attempt + 1,
            duration_ms=round(duration_ms, 2),
            error_class=result.error.error_class.value if result.error else None,
        )
        return result

    def _attempt(
        self, client: httpx.Client, url: str, headers: dict[str, str]
    ) -> FetchResult:
        """One GET; every exception is folded into the result."""
        try:
            with client.stream("GET", url, headers=headers) as response:
                body = self._read_capped(response)
                self._metrics.record_request(response.status_code, len(body))
                return FetchResult(
                    status_code=response.status_code,
                    final_url=str(response.url),
                    headers=dict(response.headers),
                    body_bytes=body,
                    error=classify_status(
                        response.status_code, response.headers.get("retry-after")
                    ),
                )
        except ResponseSizeExceededError as exc:
            return _failed(url, FetchErrorClass.RESPONSE_SIZE_EXCEEDED, str(exc))
        except httpx.TimeoutException as exc:
            return _failed(
                url, FetchErrorClass.NETWORK_TIMEOUT, f"Request timed out: {exc}"
            )
        except httpx.ConnectError as exc:
            return _failed(
                url, FetchErrorClass.CONNECTION_ERROR, f"Connection failed: {exc}"
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            return _failed(url, FetchErrorClass.INVALID_URL, f"Invalid URL: {exc}")
        except Exception as exc:  # noqa: BLE001
            return _failed(url, FetchErrorClass.UNKNOWN, f"Unexpected error: {exc}")

    def _read_capped(self, response: httpx.Response) -> bytes:
        """Read the body, refusing anything over the configured size.

        Raises:
            ResponseSizeExceededError: If Content-Length or the bytes read
                exceed ``max_response_size_bytes``.
        """
        limit = self._config.max_response_size_bytes

        declared = response.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            msg = f"Response size {declared} exceeds limit {limit}"
            raise ResponseSizeExceededError(msg)

        chunks: list[bytes] = []
        received = 0
        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            received += len(chunk)
            if received > limit:
                msg = f"Response size exceeded limit of {limit} bytes (read {received})"
                raise ResponseSizeExceededError(msg)
            chunks.append(chunk)
        return b"".join(chunks)
