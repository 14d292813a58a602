"""Expectations over forwards of the inbound message."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from handlertest.expectations.base import Expectation, Polarity

if TYPE_CHECKING:
    from handlertest.context import RecordingContext


class ExpectForwardCurrentMessageTo(Expectation):
    """
    Expect the inbound message to be forwarded to a matching destination.

    Without a predicate, the positive form only asserts that at least one
    forward happened and the negative form that none did.

    Example:
        >>> ExpectForwardCurrentMessageTo(lambda destination: destination == "audit")
    """

    def __init__(
        self,
        check: Callable[[str], bool] | None = None,
        *,
        polarity: Polarity = Polarity.MUST_OCCUR,
    ) -> None:
        if check is not None and not callable(check):
            raise TypeError(f"check must be callable, got {type(check).__name__}")
        super().__init__(polarity=polarity)
        self._check = check

    @property
    def target(self) -> str:
        return "forward_current_message_to"

    def matches(self, destination: str) -> bool:
        return self._check is None or bool(self._check(destination))

    def validate(self, context: RecordingContext) -> None:
        destinations = context.forwarded_messages

        if self.must_occur:
            if any(self.matches(d) for d in destinations):
                return
            if destinations:
                self.fail(
                    "Expected the current message to be forwarded to a destination matching "
                    f"your constraints but it was only forwarded to: {list(destinations)}."
                )
            self.fail(
                "Expected the current message to be forwarded to a destination matching "
                "your constraints but it was not forwarded."
            )

        for destination in destinations:
            if self.matches(destination):
                self.fail(
                    "Expected the current message not to be forwarded to a destination "
                    f"matching your constraints but it was forwarded to '{destination}'."
                )


__all__ = ["ExpectForwardCurrentMessageTo"]
