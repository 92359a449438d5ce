"""HTTP fetch layer with retries and failure isolation.

This module provides the page fetch used by a diagnosis:
- Configurable retry policy with exponential backoff
- Maximum response size enforcement
- Header and URL redaction for logging
- Metrics collection for observability
"""

from ago_diagnosis.fetch.client import HttpFetcher
from ago_diagnosis.fetch.config import FetchConfig
from ago_diagnosis.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    HTML_CONTENT_TYPES,
)
from ago_diagnosis.fetch.metrics import FetchMetrics
from ago_diagnosis.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchResult,
    ResponseSizeExceededError,
    RetryPolicy,
)
from ago_diagnosis.fetch.redact import redact_headers, redact_url


__all__ = [
    # Client
    "HttpFetcher",
    # Config
    "FetchConfig",
    # Models
    "FetchResult",
    "FetchError",
    "FetchErrorClass",
    "RetryPolicy",
    "ResponseSizeExceededError",
    # Constants
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "HTML_CONTENT_TYPES",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_url",
]
