"""
OpenTelemetry availability detection for handlertest.

OpenTelemetry is an optional dependency (``pip install handlertest[telemetry]``).
This module is the single source of truth for whether it can be imported.

Example:
    >>> from handlertest.observability import should_trace
    >>>
    >>> if should_trace(config.enable_tracing):
    ...     tracer = OpenTelemetryTracer(__name__)
"""

from __future__ import annotations

# Optional OpenTelemetry import - single source of truth
try:
    import opentelemetry.trace  # noqa: F401

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False


def should_trace(enable_tracing: bool) -> bool:
    """
    Determine if tracing should be active.

    Combines the runner's enable_tracing setting with global OTEL availability.

    Args:
        enable_tracing: Runner-level tracing configuration

    Returns:
        True if both tracing is enabled and OpenTelemetry is available
    """
    return enable_tracing and OTEL_AVAILABLE


__all__ = [
    "OTEL_AVAILABLE",
    "should_trace",
]
