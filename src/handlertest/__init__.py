"""
handlertest - Behavior verification for message handlers.

This library provides:
- HandlerTest, a fluent runner that invokes one handler with one inbound
  message and verifies the operations it performed
- RecordingContext, a handler context that records operations instead of
  dispatching them
- Expectations for sends, publishes, replies, deferrals, forwards and
  control directives, each with a "must not occur" variant
- Default instantiation of message types, including interface types
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("handlertest")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

# Assertions
from handlertest.assertions import OperationAssertions

# Configuration
from handlertest.config import RunnerConfig, new_message_id, utc_now

# Recording context
from handlertest.context import CompletedOperation, IncomingHeaders, RecordingContext

# Exceptions
from handlertest.exceptions import (
    ConfigurationError,
    ExpectationError,
    HandlerTestError,
    MissingHeaderError,
)

# Expectations
from handlertest.expectations import (
    Expectation,
    ExpectationSet,
    ExpectDefer,
    ExpectDoNotContinueDispatchingCurrentMessageToHandlers,
    ExpectForwardCurrentMessageTo,
    ExpectHandleCurrentMessageLater,
    ExpectPublish,
    ExpectReply,
    ExpectSend,
    ExpectSendLocal,
    Polarity,
)

# Handlers
from handlertest.handlers import HandlerAdapter

# Messages
from handlertest.messages import Command, Event, Message, MessageFactory

# Options
from handlertest.options import ExtendableOptions, PublishOptions, ReplyOptions, SendOptions

# Protocols
from handlertest.protocols import MessageHandler, MessageHandlerContext, MessageInstantiator

# Records
from handlertest.records import (
    ForwardRecord,
    MessageRecord,
    OperationKind,
    OperationRecord,
    PublishRecord,
    ReplyRecord,
    SendRecord,
)

# Runner
from handlertest.runner import HandlerTest, RunnerState

__all__ = [
    "__version__",
    # Runner
    "HandlerTest",
    "RunnerState",
    "RunnerConfig",
    "new_message_id",
    "utc_now",
    # Context
    "RecordingContext",
    "IncomingHeaders",
    "CompletedOperation",
    # Records
    "OperationKind",
    "OperationRecord",
    "MessageRecord",
    "SendRecord",
    "PublishRecord",
    "ReplyRecord",
    "ForwardRecord",
    # Options
    "ExtendableOptions",
    "SendOptions",
    "PublishOptions",
    "ReplyOptions",
    # Messages
    "Message",
    "Command",
    "Event",
    "MessageFactory",
    # Protocols
    "MessageHandler",
    "MessageHandlerContext",
    "MessageInstantiator",
    "HandlerAdapter",
    # Expectations
    "Expectation",
    "ExpectationSet",
    "Polarity",
    "ExpectSend",
    "ExpectSendLocal",
    "ExpectPublish",
    "ExpectReply",
    "ExpectDefer",
    "ExpectForwardCurrentMessageTo",
    "ExpectDoNotContinueDispatchingCurrentMessageToHandlers",
    "ExpectHandleCurrentMessageLater",
    # Assertions
    "OperationAssertions",
    # Exceptions
    "HandlerTestError",
    "ConfigurationError",
    "MissingHeaderError",
    "ExpectationError",
]
