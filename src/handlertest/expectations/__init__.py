"""
Expectations verified against a completed recording context.

Every operation kind has one expectation class; the "must not occur"
variant is the same class constructed with Polarity.MUST_NOT_OCCUR.

Example:
    >>> from handlertest.expectations import ExpectSend, ExpectationSet, Polarity
    >>>
    >>> expectations = ExpectationSet()
    >>> expectations.add(ExpectSend(Outgoing, lambda m: m.number == 1))
    >>> expectations.add(ExpectSend(Alert, polarity=Polarity.MUST_NOT_OCCUR))
    >>> expectations.validate(context)
"""

from handlertest.expectations.base import Check, Expectation, Polarity, normalize_check
from handlertest.expectations.collection import ExpectationSet
from handlertest.expectations.control import (
    ControlFlagExpectation,
    ExpectDoNotContinueDispatchingCurrentMessageToHandlers,
    ExpectHandleCurrentMessageLater,
)
from handlertest.expectations.forward import ExpectForwardCurrentMessageTo
from handlertest.expectations.messages import (
    ExpectDefer,
    ExpectPublish,
    ExpectReply,
    ExpectSend,
    ExpectSendLocal,
    MessageExpectation,
)

__all__ = [
    # Core
    "Check",
    "Expectation",
    "ExpectationSet",
    "Polarity",
    "normalize_check",
    # Message operations
    "MessageExpectation",
    "ExpectSend",
    "ExpectSendLocal",
    "ExpectPublish",
    "ExpectReply",
    "ExpectDefer",
    # Forwarding
    "ExpectForwardCurrentMessageTo",
    # Control directives
    "ControlFlagExpectation",
    "ExpectDoNotContinueDispatchingCurrentMessageToHandlers",
    "ExpectHandleCurrentMessageLater",
]
