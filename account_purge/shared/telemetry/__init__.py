"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from account_purge.shared.telemetry.logging import get_logger, setup_logging
from account_purge.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)
from account_purge.shared.telemetry.tracing import (
    TracedOperation,
    add_span_attributes,
    get_trace_id,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "add_span_attributes",
    "get_trace_id",
    "TracedOperation",
]
