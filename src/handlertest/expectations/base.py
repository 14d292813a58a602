"""
Base class and shared helpers for expectations.

An expectation is a read-only predicate over a completed RecordingContext.
It either returns silently or raises ExpectationError naming what was
expected and whether it was absent or forbidden-but-present.
"""

from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, NoReturn

from handlertest.exceptions import ExpectationError

if TYPE_CHECKING:
    from handlertest.context import RecordingContext

logger = logging.getLogger(__name__)

Check = Callable[[Any, Any], bool]


class Polarity(Enum):
    """Whether the expected operation must or must not occur."""

    MUST_OCCUR = "must_occur"
    MUST_NOT_OCCUR = "must_not_occur"


def _always(message: Any, argument: Any) -> bool:
    return True


def normalize_check(check: Callable[..., Any] | None) -> Check:
    """
    Normalize a user predicate to the two-argument form ``(message, argument)``.

    Predicates may accept only the message, or the message plus a second
    argument (send/publish/reply options, or the delivery date for defer
    expectations). The signature is inspected once, here.

    Args:
        check: A one- or two-argument predicate, or None (always true)

    Returns:
        A predicate taking (message, argument)

    Raises:
        TypeError: If check is not callable or takes no positional argument
    """
    if check is None:
        return _always
    if not callable(check):
        raise TypeError(f"check must be callable, got {type(check).__name__}")

    try:
        parameters = inspect.signature(check).parameters.values()
    except (TypeError, ValueError):
        # Builtins without signature metadata are called with the message only
        return lambda message, argument: check(message)

    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in parameters):
        return check
    positional = [
        p
        for p in parameters
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if not positional:
        raise TypeError("check must accept the message as its first positional argument")
    if len(positional) == 1:
        return lambda message, argument: check(message)
    return check


class Expectation(ABC):
    """
    Base class for all expectations.

    Subclasses implement validate(). Expectations never mutate the context
    and keep no state between evaluations, so evaluating the same
    expectation twice against the same context yields the same outcome.

    Attributes:
        polarity: MUST_OCCUR or MUST_NOT_OCCUR
    """

    def __init__(self, *, polarity: Polarity = Polarity.MUST_OCCUR) -> None:
        self.polarity = polarity

    @property
    def must_occur(self) -> bool:
        return self.polarity is Polarity.MUST_OCCUR

    @property
    def name(self) -> str:
        """Name of the expectation, e.g. 'ExpectSend' or 'ExpectNotSend'."""
        name = type(self).__name__
        if self.must_occur:
            return name
        return name.replace("Expect", "ExpectNot", 1)

    @property
    @abstractmethod
    def target(self) -> str:
        """The expected message type or operation, as shown in failures."""
        ...

    @abstractmethod
    def validate(self, context: RecordingContext) -> None:
        """
        Check the expectation against a completed context.

        Args:
            context: The context the handler ran against

        Raises:
            ExpectationError: If the expectation is violated
        """
        ...

    def fail(self, reason: str) -> NoReturn:
        logger.debug(
            f"{self.name} failed: {reason}",
            extra={"expectation": self.name, "target": self.target},
        )
        raise ExpectationError(self.name, self.target, reason)

    def __repr__(self) -> str:
        return f"{self.name}({self.target})"


__all__ = [
    "Check",
    "Expectation",
    "Polarity",
    "normalize_check",
]
