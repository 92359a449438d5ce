"""Data models for the HTTP fetch layer."""

import random
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from ago_diagnosis.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class FetchErrorClass(str, Enum):
    """Why a page could not be retrieved; also the failure metric label."""

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    HTTP_4XX = "HTTP_4XX"
    HTTP_5XX = "HTTP_5XX"
    RATE_LIMITED = "RATE_LIMITED"
    # Raised by the document loader, never by the fetcher itself
    CONTENT_TYPE = "CONTENT_TYPE"
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_URL = "INVALID_URL"
    UNKNOWN = "UNKNOWN"


# Failures that may clear up on a second attempt
TRANSIENT_ERROR_CLASSES: frozenset[FetchErrorClass] = frozenset(
    {
        FetchErrorClass.NETWORK_TIMEOUT,
        FetchErrorClass.CONNECTION_ERROR,
        FetchErrorClass.HTTP_5XX,
        FetchErrorClass.RATE_LIMITED,
    }
)


class FetchError(BaseModel):
    """Why the page under diagnosis was not retrieved.

    ``message`` ends up in the fallback report, so it is written for the
    person who asked for the diagnosis.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: FetchErrorClass
    message: Annotated[str, Field(min_length=1)]
    status_code: int | None = None
    retry_after: int | None = None

    @property
    def transient(self) -> bool:
        """Whether retrying might succeed."""
        return self.error_class in TRANSIENT_ERROR_CLASSES


class FetchResult(BaseModel):
    """Outcome of fetching one page.

    ``status_code`` is 0 when no HTTP response arrived; ``final_url`` is
    the URL after redirects.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: Annotated[int, Field(ge=0, le=599)]
    final_url: Annotated[str, Field(min_length=1)]
    headers: dict[str, str] = Field(default_factory=dict)
    body_bytes: bytes = b""
    error: FetchError | None = None

    @property
    def is_success(self) -> bool:
        """2xx with no error attached."""
        return (
            self.error is None
            and HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX
        )

    @property
    def body_size(self) -> int:
        return len(self.body_bytes)

    @property
    def content_type(self) -> str:
        """Media type of the response without parameters, lowercased."""
        raw = self.headers.get("content-type", "")
        return raw.split(";", 1)[0].strip().lower()


class RetryPolicy(BaseModel):
    """Bounded retries with doubling backoff and a little jitter.

    Defaults: at most two retries, 0.5 s then 1 s, capped at 5 s.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: Annotated[int, Field(ge=0, le=5)] = 2
    base_delay_ms: Annotated[int, Field(ge=0, le=60000)] = 500
    max_delay_ms: Annotated[int, Field(ge=0, le=300000)] = 5000
    jitter_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1

    def should_retry(self, error: FetchError, attempt: int) -> bool:
        """Whether attempt ``attempt`` (0-indexed) may be followed by another."""
        return attempt < self.max_retries and error.transient

    def get_delay_ms(self, attempt: int) -> int:
        """Backoff before the retry that follows attempt ``attempt``."""
        delay = min(self.base_delay_ms * 2**attempt, self.max_delay_ms)
        return int(delay * (1 + self.jitter_factor * random.random()))  # noqa: S311


class ResponseSizeExceededError(Exception):
    """Raised when response size exceeds the configured limit."""
