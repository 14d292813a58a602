"""Tests for ExpectationSet."""

import logging

import pytest

from handlertest import ExpectationError, ExpectationSet, ExpectPublish, ExpectSend, Polarity
from tests.fixtures import Outgoing, Outgoing2


class TestExpectationSet:
    """Tests for ordered, fail-fast verification."""

    def test_empty_set_passes(self, context):
        """No expectations means nothing can fail."""
        expectations = ExpectationSet()
        expectations.validate(context)
        assert len(expectations) == 0

    def test_keeps_registration_order(self):
        """Iteration follows registration order."""
        first = ExpectSend(Outgoing)
        second = ExpectPublish(Outgoing2)
        expectations = ExpectationSet()
        expectations.add(first)
        expectations.add(second)
        assert list(expectations) == [first, second]

    def test_rejects_non_expectations(self):
        """Only Expectation instances can be added."""
        with pytest.raises(TypeError):
            ExpectationSet().add(lambda context: None)

    def test_fails_fast_on_first_violation(self, context):
        """Later expectations are not evaluated after a failure."""
        evaluated = []

        def tracking(message):
            evaluated.append(message)
            return True

        expectations = ExpectationSet()
        expectations.add(ExpectSend(Outgoing2))
        expectations.add(ExpectSend(Outgoing, tracking))
        context.send(Outgoing(number=1))

        with pytest.raises(ExpectationError) as exc_info:
            expectations.validate(context)
        assert exc_info.value.target == "Outgoing2"
        assert evaluated == []

    def test_reports_first_violation_in_registration_order(self, context):
        """With two violations, the first registered one is reported."""
        expectations = ExpectationSet()
        expectations.add(ExpectSend(Outgoing))
        expectations.add(ExpectSend(Outgoing2))
        with pytest.raises(ExpectationError) as exc_info:
            expectations.validate(context)
        assert exc_info.value.target == "Outgoing"

    def test_idempotent(self, context):
        """Validating twice against the same context gives the same outcome."""
        context.send(Outgoing(number=1))
        expectations = ExpectationSet()
        expectations.add(ExpectSend(Outgoing, lambda m: m.number == 1))
        expectations.add(ExpectSend(Outgoing2, polarity=Polarity.MUST_NOT_OCCUR))
        expectations.validate(context)
        expectations.validate(context)

        failing = ExpectationSet()
        failing.add(ExpectSend(Outgoing2))
        for _ in range(2):
            with pytest.raises(ExpectationError):
                failing.validate(context)

    def test_logs_each_evaluation(self, context, caplog):
        """Each evaluation is logged at DEBUG."""
        context.send(Outgoing(number=1))
        expectations = ExpectationSet()
        expectations.add(ExpectSend(Outgoing))
        with caplog.at_level(logging.DEBUG, logger="handlertest.expectations"):
            expectations.validate(context)
        assert "Validating ExpectSend(Outgoing)" in caplog.text
