"""
Shared test fixtures for the handlertest test suite.

Usage:
    from tests.fixtures import (
        Outgoing,
        Outgoing2,
        Send1,
        SendingHandler,
        TwoSendsHandler,
    )
"""

from tests.fixtures.handlers import (
    AuditingHandler,
    ConcurrentSendingHandler,
    ContextAccessingHandler,
    DeferringHandler,
    DoNotContinueDispatchingHandler,
    EmptyHandler,
    FailingHandler,
    ForwardingHandler,
    GatewayHandler,
    HandleLaterHandler,
    HandlerRequiringArguments,
    HeaderCopyingHandler,
    InheritedHandleHandler,
    PaymentGateway,
    PublishingHandler,
    ReplyingHandler,
    SendingHandler,
    SendingLocalHandler,
    SharedOptionsHandler,
    SyncFailingHandler,
    SyncPlainHandler,
    SyncSendingHandler,
    TwoSendsHandler,
    send_outgoing,
)
from tests.fixtures.messages import (
    AuditEntry,
    HeadersCopied,
    Incoming,
    MyCommand,
    MyReply,
    MyRequest,
    NeedsArguments,
    OrderPlaced,
    Outgoing,
    Outgoing2,
    Ping,
    Priority,
    Publish1,
    Reminder,
    Send1,
    SpecialOutgoing,
)

__all__ = [
    # Messages
    "AuditEntry",
    "HeadersCopied",
    "Incoming",
    "MyCommand",
    "MyReply",
    "MyRequest",
    "NeedsArguments",
    "OrderPlaced",
    "Outgoing",
    "Outgoing2",
    "Ping",
    "Priority",
    "Publish1",
    "Reminder",
    "Send1",
    "SpecialOutgoing",
    # Handlers
    "AuditingHandler",
    "ConcurrentSendingHandler",
    "ContextAccessingHandler",
    "DeferringHandler",
    "DoNotContinueDispatchingHandler",
    "EmptyHandler",
    "FailingHandler",
    "ForwardingHandler",
    "GatewayHandler",
    "HandleLaterHandler",
    "HandlerRequiringArguments",
    "HeaderCopyingHandler",
    "InheritedHandleHandler",
    "PaymentGateway",
    "PublishingHandler",
    "ReplyingHandler",
    "SendingHandler",
    "SendingLocalHandler",
    "SharedOptionsHandler",
    "SyncFailingHandler",
    "SyncPlainHandler",
    "SyncSendingHandler",
    "TwoSendsHandler",
    "send_outgoing",
]
