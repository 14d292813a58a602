"""
Observability utilities for handlertest.

Composition-based tracing and standard attribute definitions. The runner
receives a Tracer as a dependency and opens one span per handler run.

Example:
    >>> from handlertest.observability import create_tracer, MockTracer
    >>>
    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>> with tracer.span("handlertest.handler.on_message"):
    ...     pass

Note:
    OpenTelemetry is an optional dependency. When it is not installed,
    create_tracer() returns a NullTracer.
"""

from handlertest.observability.attributes import (
    ATTR_ERROR_TYPE,
    ATTR_EXPECTATION_COUNT,
    ATTR_EXPECTATION_PASSED,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
    ATTR_MESSAGE_ID,
    ATTR_MESSAGE_TYPE,
    ATTR_MESSAGING_SYSTEM,
    ATTR_OPERATION_COUNT,
)
from handlertest.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)
from handlertest.observability.tracing import (
    OTEL_AVAILABLE,
    should_trace,
)

__all__ = [
    # Tracing utilities
    "OTEL_AVAILABLE",
    "should_trace",
    # Tracer (composition-based API)
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes
    "ATTR_HANDLER_NAME",
    "ATTR_HANDLER_SUCCESS",
    "ATTR_MESSAGE_ID",
    "ATTR_MESSAGE_TYPE",
    "ATTR_OPERATION_COUNT",
    "ATTR_EXPECTATION_COUNT",
    "ATTR_EXPECTATION_PASSED",
    "ATTR_MESSAGING_SYSTEM",
    "ATTR_ERROR_TYPE",
]
