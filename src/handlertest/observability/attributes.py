"""
Standard span attributes for handlertest.

Attribute constants used by the handler test runner for consistent span
naming. Messaging attributes follow OpenTelemetry semantic conventions.

Example:
    >>> from handlertest.observability.attributes import (
    ...     ATTR_HANDLER_NAME,
    ...     ATTR_MESSAGE_TYPE,
    ... )
    >>>
    >>> with tracer.span(
    ...     "handlertest.handler.on_message",
    ...     {
    ...         ATTR_HANDLER_NAME: "OrderHandler",
    ...         ATTR_MESSAGE_TYPE: "PlaceOrder",
    ...     },
    ... ):
    ...     pass
"""

# =============================================================================
# Handler Attributes
# =============================================================================

ATTR_HANDLER_NAME = "handlertest.handler.name"
"""Name of the handler under test (string)."""

ATTR_HANDLER_SUCCESS = "handlertest.handler.success"
"""Whether the handler completed without raising (boolean)."""

# =============================================================================
# Message Attributes
# =============================================================================

ATTR_MESSAGE_ID = "handlertest.message.id"
"""Identifier assigned to the inbound message (string)."""

ATTR_MESSAGE_TYPE = "handlertest.message.type"
"""Type name of the inbound message (string)."""

# =============================================================================
# Verification Attributes
# =============================================================================

ATTR_OPERATION_COUNT = "handlertest.operation.count"
"""Number of operations recorded during the run (integer)."""

ATTR_EXPECTATION_COUNT = "handlertest.expectation.count"
"""Number of expectations registered for the run (integer)."""

ATTR_EXPECTATION_PASSED = "handlertest.expectation.passed"
"""Whether every expectation was satisfied (boolean)."""

# =============================================================================
# Messaging Attributes (OpenTelemetry Semantic Conventions)
# =============================================================================

ATTR_MESSAGING_SYSTEM = "messaging.system"
"""Messaging system identifier (always 'handlertest' for recorded runs)."""

ATTR_ERROR_TYPE = "error.type"
"""Exception class name when the run fails (string)."""


__all__ = [
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
