"""
Operation records captured by the recording context.

Each outgoing operation a handler performs is captured as one immutable
record. Records form a tagged union over OperationKind and are totally
ordered by their sequence number, which is the order in which the handler
issued the operations.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from handlertest.options import PublishOptions, ReplyOptions, SendOptions


class OperationKind(str, Enum):
    """Kinds of outgoing operations a handler can perform."""

    SEND = "send"
    PUBLISH = "publish"
    REPLY = "reply"
    FORWARD = "forward"


class OperationRecord(BaseModel):
    """
    Base class for all operation records.

    Records are frozen once created. The message and options they reference
    are kept by identity so predicates see exactly what the handler passed.

    Attributes:
        sequence: Zero-based position in the run's operation log
        recorded_at: Recording time according to the runner's clock
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: OperationKind
    sequence: int = Field(ge=0)
    recorded_at: datetime


class MessageRecord(OperationRecord):
    """
    A record of an operation that carries a message.

    Attributes:
        message: The outgoing message instance
        message_type: The declared message type. For messages created from a
            type (including interface types instantiated through a proxy)
            this is the type the handler asked for, not the proxy class.
    """

    message: Any
    message_type: type

    @property
    def message_type_name(self) -> str:
        return self.message_type.__name__

    def is_of_type(self, message_type: type) -> bool:
        """Nominal subtype check that also works for non-runtime Protocol types."""
        return message_type in self.message_type.__mro__


class SendRecord(MessageRecord):
    """
    A recorded send (including send-local and deferred sends).

    Routing and delivery date are captured when the send is recorded, so
    later changes to a shared options object do not alter this record.

    Attributes:
        local: True when the send was routed to the local endpoint
        delivery_date: Resolved delivery date of a deferred send
    """

    kind: Literal[OperationKind.SEND] = OperationKind.SEND
    options: SendOptions
    local: bool = False
    delivery_date: datetime | None = None

    def get_delivery_date(self) -> datetime | None:
        """
        Get the absolute delivery date of this send.

        Both deferral styles resolve to the same value: a relative delay is
        recorded as recording time plus the delay, an absolute date as given.

        Returns:
            The delivery date, or None when the send was not deferred
        """
        return self.delivery_date

    @property
    def is_local(self) -> bool:
        return self.local

    @property
    def is_deferred(self) -> bool:
        return self.delivery_date is not None


class PublishRecord(MessageRecord):
    """A recorded publish."""

    kind: Literal[OperationKind.PUBLISH] = OperationKind.PUBLISH
    options: PublishOptions


class ReplyRecord(MessageRecord):
    """A recorded reply."""

    kind: Literal[OperationKind.REPLY] = OperationKind.REPLY
    options: ReplyOptions


class ForwardRecord(OperationRecord):
    """A recorded forward of the current inbound message."""

    kind: Literal[OperationKind.FORWARD] = OperationKind.FORWARD
    destination: str


__all__ = [
    "OperationKind",
    "OperationRecord",
    "MessageRecord",
    "SendRecord",
    "PublishRecord",
    "ReplyRecord",
    "ForwardRecord",
]
