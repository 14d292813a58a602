"""Ordered collection of expectations verified after a handler run."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from handlertest.expectations.base import Expectation

if TYPE_CHECKING:
    from handlertest.context import RecordingContext

logger = logging.getLogger(__name__)


class ExpectationSet:
    """
    Expectations registered for one test run, in registration order.

    validate() is fail-fast: it raises the ExpectationError of the first
    violated expectation and does not evaluate the rest. Exceptions raised
    by user predicates propagate unchanged.

    Example:
        >>> expectations = ExpectationSet()
        >>> expectations.add(ExpectSend(Outgoing))
        >>> expectations.add(ExpectNotPublish(Alert))
        >>> expectations.validate(context)
    """

    def __init__(self) -> None:
        self._expectations: list[Expectation] = []

    def add(self, expectation: Expectation) -> None:
        if not isinstance(expectation, Expectation):
            raise TypeError(f"expected an Expectation, got {type(expectation).__name__}")
        self._expectations.append(expectation)

    def validate(self, context: RecordingContext) -> None:
        """
        Evaluate every expectation against the context, in registration order.

        Raises:
            ExpectationError: For the first violated expectation
        """
        for position, expectation in enumerate(self._expectations):
            logger.debug(
                f"Validating {expectation!r}",
                extra={"expectation": expectation.name, "position": position},
            )
            expectation.validate(context)

    def __iter__(self) -> Iterator[Expectation]:
        return iter(self._expectations)

    def __len__(self) -> int:
        return len(self._expectations)

    def __repr__(self) -> str:
        return f"ExpectationSet({self._expectations!r})"


__all__ = ["ExpectationSet"]
