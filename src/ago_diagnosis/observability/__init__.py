"""Observability: structured logging and metrics snapshots."""

from ago_diagnosis.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
    parse_level,
)
from ago_diagnosis.observability.metrics import metrics_snapshot, reset_metrics


__all__ = [
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "get_logger",
    "metrics_snapshot",
    "parse_level",
    "reset_metrics",
]
