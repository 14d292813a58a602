"""
Expectations over recorded message operations.

Each expectation targets one declared message type and one kind of
operation, optionally narrowed by a predicate. A record matches when its
declared message type is the target type (or a subclass of it) and the
predicate returns true for its message.

Example:
    >>> ExpectSend(Outgoing, lambda m: m.number == 1)
    >>> ExpectPublish(OrderPlaced, lambda m, options: options.headers.get("Tenant") == "a")
    >>> ExpectDefer(Reminder, lambda m, at: at >= deadline, polarity=Polarity.MUST_NOT_OCCUR)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from handlertest.expectations.base import Expectation, Polarity, normalize_check
from handlertest.records import MessageRecord, PublishRecord, ReplyRecord, SendRecord

if TYPE_CHECKING:
    from handlertest.context import RecordingContext

_MAX_LISTED = 5


def _describe(records: Sequence[MessageRecord]) -> str:
    shown = ", ".join(repr(r.message) for r in records[:_MAX_LISTED])
    if len(records) > _MAX_LISTED:
        shown += f", ... ({len(records) - _MAX_LISTED} more)"
    return f"[{shown}]"


class MessageExpectation(Expectation):
    """
    Base class for expectations over message-carrying records.

    Subclasses set record_type and verb, and may narrow candidates() or
    change the second predicate argument via argument().
    """

    record_type: ClassVar[type[MessageRecord]]
    verb: ClassVar[str]

    def __init__(
        self,
        message_type: type,
        check: Callable[..., Any] | None = None,
        *,
        polarity: Polarity = Polarity.MUST_OCCUR,
    ) -> None:
        """
        Initialize the expectation.

        Args:
            message_type: The declared message type to look for
            check: Optional predicate ``(message)`` or ``(message, argument)``
            polarity: MUST_OCCUR (default) or MUST_NOT_OCCUR

        Raises:
            TypeError: If message_type is not a class or check is not callable
        """
        if not isinstance(message_type, type):
            raise TypeError(f"message_type must be a class, got {message_type!r}")
        super().__init__(polarity=polarity)
        self.message_type = message_type
        self._check = normalize_check(check)

    @property
    def target(self) -> str:
        return self.message_type.__name__

    def candidates(self, context: RecordingContext) -> list[MessageRecord]:
        """Records of the targeted operation kind and message type."""
        return [r for r in context.records_of(self.record_type) if r.is_of_type(self.message_type)]

    def argument(self, record: MessageRecord) -> Any:
        """Second argument handed to the predicate."""
        return record.options  # type: ignore[attr-defined]

    def matches(self, record: MessageRecord) -> bool:
        return bool(self._check(record.message, self.argument(record)))

    def validate(self, context: RecordingContext) -> None:
        candidates = self.candidates(context)

        if self.must_occur:
            if any(self.matches(record) for record in candidates):
                return
            self.fail(self._absent_reason(context, candidates))

        for record in candidates:
            if self.matches(record):
                self.fail(
                    f"Expected no message of type {self.target} to be {self.verb} "
                    f"but a matching message was {self.verb}: {record.message!r} "
                    f"(operation #{record.sequence})."
                )

    def _absent_reason(self, context: RecordingContext, candidates: list[MessageRecord]) -> str:
        reason = (
            f"Expected a message of type {self.target} to be {self.verb} "
            f"but no message matching your constraints was {self.verb}."
        )
        if candidates:
            return (
                f"{reason} Found {len(candidates)} {self.target} message(s) that did not "
                f"match: {_describe(candidates)}"
            )
        others = sorted({r.message_type_name for r in context.records_of(self.record_type)})
        if others:
            return f"{reason} Message types {self.verb}: {others}"
        return f"{reason} No messages were {self.verb}."


class ExpectSend(MessageExpectation):
    """Expect a send of the message type (local and deferred sends included)."""

    record_type = SendRecord
    verb = "sent"


class ExpectSendLocal(MessageExpectation):
    """Expect a send of the message type routed to the local endpoint."""

    record_type = SendRecord
    verb = "sent locally"

    def candidates(self, context: RecordingContext) -> list[MessageRecord]:
        return [r for r in super().candidates(context) if isinstance(r, SendRecord) and r.is_local]


class ExpectPublish(MessageExpectation):
    """Expect a publish of the message type."""

    record_type = PublishRecord
    verb = "published"


class ExpectReply(MessageExpectation):
    """Expect a reply with the message type."""

    record_type = ReplyRecord
    verb = "sent as a reply"


class ExpectDefer(MessageExpectation):
    """
    Expect a deferred send of the message type.

    The predicate's second argument is the delivery date, whichever way the
    handler deferred the message (delay or not-before date).
    """

    record_type = SendRecord
    verb = "deferred"

    def candidates(self, context: RecordingContext) -> list[MessageRecord]:
        return [
            r for r in super().candidates(context) if isinstance(r, SendRecord) and r.is_deferred
        ]

    def argument(self, record: MessageRecord) -> Any:
        return record.get_delivery_date()  # type: ignore[attr-defined]


__all__ = [
    "MessageExpectation",
    "ExpectSend",
    "ExpectSendLocal",
    "ExpectPublish",
    "ExpectReply",
    "ExpectDefer",
]
