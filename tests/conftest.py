"""
Shared pytest fixtures for the handlertest test suite.

This module provides:
- A frozen clock and a RunnerConfig built on it
- A fresh RecordingContext per test
- A MockTracer for span assertions

Message and handler types live in tests.fixtures.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from handlertest import MessageFactory, RecordingContext, RunnerConfig
from handlertest.observability import MockTracer

FROZEN_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """The instant returned by the frozen clock."""
    return FROZEN_NOW


@pytest.fixture
def frozen_config(now: datetime) -> RunnerConfig:
    """Runner configuration whose clock always returns the same instant."""
    return RunnerConfig(clock=lambda: now)


@pytest.fixture
def context(now: datetime) -> RecordingContext:
    """A fresh recording context on the frozen clock."""
    return RecordingContext(message_id="incoming-1", clock=lambda: now)


@pytest.fixture
def factory() -> MessageFactory:
    return MessageFactory()


@pytest.fixture
def tracer() -> MockTracer:
    return MockTracer()
