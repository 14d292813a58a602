"""
Operation assertions for inspecting a completed recording context.

Expectations registered on a HandlerTest cover most tests. These helpers
are for tests that prefer to inspect the context returned by on_message()
directly, and return the matched message for further assertions.

Example:
    >>> from handlertest import HandlerTest, OperationAssertions
    >>>
    >>> context = await HandlerTest(PlaceOrderHandler()).on_message(PlaceOrder)
    >>> assertions = OperationAssertions(context)
    >>> placed = assertions.assert_published(OrderPlaced)
    >>> assert placed.order_number == 42
    >>> assertions.assert_operation_sequence([OrderPlaced, ChargeCard])
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

from handlertest.context import RecordingContext
from handlertest.exceptions import ExpectationError
from handlertest.records import (
    ForwardRecord,
    MessageRecord,
    OperationRecord,
    PublishRecord,
    ReplyRecord,
    SendRecord,
)

TMessage = TypeVar("TMessage")


def _describe(record: OperationRecord) -> str:
    if isinstance(record, MessageRecord):
        return f"{record.kind.value}:{record.message_type_name}"
    if isinstance(record, ForwardRecord):
        return f"{record.kind.value}:{record.destination}"
    return record.kind.value


class OperationAssertions:
    """
    Readable assertions over the operations a handler performed.

    Failures raise ExpectationError, which is an AssertionError.

    Attributes:
        context: The completed context being asserted against
    """

    def __init__(self, context: RecordingContext) -> None:
        """
        Initialize assertions over a context.

        Args:
            context: Typically the return value of HandlerTest.on_message()
        """
        self.context = context

    @property
    def records(self) -> tuple[OperationRecord, ...]:
        return self.context.records

    def assert_sent(self, message_type: type[TMessage]) -> TMessage:
        """
        Assert that a message of the given type was sent.

        Returns:
            The first sent message of the type

        Raises:
            ExpectationError: If no message of the type was sent
        """
        return self._first(self.context.sent_messages, message_type, "assert_sent", "sent")

    def assert_published(self, message_type: type[TMessage]) -> TMessage:
        """Assert that a message of the given type was published and return it."""
        return self._first(
            self.context.published_messages, message_type, "assert_published", "published"
        )

    def assert_replied(self, message_type: type[TMessage]) -> TMessage:
        """Assert that a reply of the given type was sent and return it."""
        return self._first(
            self.context.replied_messages, message_type, "assert_replied", "sent as a reply"
        )

    def assert_nothing_sent(self) -> None:
        """
        Assert that the handler performed no message operation at all.

        Sends, publishes and replies all count; forwards and control
        directives do not.
        """
        records = self.context.message_records
        if records:
            raise ExpectationError(
                "assert_nothing_sent",
                "messages",
                f"Expected no messages to be sent, published or replied, but found "
                f"{len(records)}: {[_describe(r) for r in records]}",
            )

    def assert_operation_count(self, count: int) -> None:
        """
        Assert the exact number of recorded operations.

        Raises:
            ExpectationError: If the count doesn't match
        """
        actual = len(self.records)
        if actual != count:
            raise ExpectationError(
                "assert_operation_count",
                "operations",
                f"Operation count mismatch: expected {count} operations, got {actual}.\n"
                f"Recorded: {[_describe(r) for r in self.records]}",
            )

    def assert_operation_sequence(self, message_types: Sequence[type]) -> None:
        """
        Assert the declared types of message operations, in emission order.

        Raises:
            ExpectationError: If the count, the types or their order differ
        """
        actual = [r.message_type for r in self.context.message_records]
        expected_names = [t.__name__ for t in message_types]
        actual_names = [t.__name__ for t in actual]

        if len(actual) != len(message_types):
            raise ExpectationError(
                "assert_operation_sequence",
                "messages",
                f"Operation count mismatch: expected {len(message_types)} message "
                f"operations, got {len(actual)}.\n"
                f"Expected: {expected_names}\n"
                f"Actual:   {actual_names}",
            )

        for i, (found, wanted) in enumerate(zip(actual, message_types, strict=True)):
            if wanted not in found.__mro__:
                raise ExpectationError(
                    "assert_operation_sequence",
                    wanted.__name__,
                    f"Operation sequence mismatch at position {i}: expected "
                    f"{wanted.__name__}, got {found.__name__}.\n"
                    f"Expected: {expected_names}\n"
                    f"Actual:   {actual_names}",
                )

    def _first(
        self,
        records: Sequence[SendRecord | PublishRecord | ReplyRecord],
        message_type: type[Any],
        assertion: str,
        verb: str,
    ) -> Any:
        for record in records:
            if record.is_of_type(message_type):
                return record.message
        found = [r.message_type_name for r in records]
        raise ExpectationError(
            assertion,
            message_type.__name__,
            f"Expected {message_type.__name__} to be {verb}, but no messages of that "
            f"type were found. Message types {verb}: {found or 'none'}",
        )

    def __repr__(self) -> str:
        return f"OperationAssertions({self.context!r})"


__all__ = ["OperationAssertions"]
