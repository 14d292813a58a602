"""
Expectations over control directives.

Control directives are flags on the context rather than records, so these
expectations read the flag directly.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, ClassVar

from handlertest.expectations.base import Expectation

if TYPE_CHECKING:
    from handlertest.context import RecordingContext


class ControlFlagExpectation(Expectation):
    """Base class for expectations over a boolean control flag."""

    operation: ClassVar[str]

    @property
    def target(self) -> str:
        return f"{self.operation}()"

    @abstractmethod
    def flag(self, context: RecordingContext) -> bool: ...

    def validate(self, context: RecordingContext) -> None:
        called = self.flag(context)
        if self.must_occur and not called:
            self.fail(f"Expected {self.target} to be called but it was not.")
        if not self.must_occur and called:
            self.fail(f"Expected {self.target} not to be called but it was.")


class ExpectDoNotContinueDispatchingCurrentMessageToHandlers(ControlFlagExpectation):
    """Expect the handler to stop dispatch of the inbound message to further handlers."""

    operation = "do_not_continue_dispatching_current_message_to_handlers"

    def flag(self, context: RecordingContext) -> bool:
        return context.do_not_continue_dispatching_called


class ExpectHandleCurrentMessageLater(ControlFlagExpectation):
    """Expect the handler to ask for the inbound message to be handled later."""

    operation = "handle_current_message_later"

    def flag(self, context: RecordingContext) -> bool:
        return context.handle_current_message_later_called


__all__ = [
    "ControlFlagExpectation",
    "ExpectDoNotContinueDispatchingCurrentMessageToHandlers",
    "ExpectHandleCurrentMessageLater",
]
