"""Tests for RunnerConfig."""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime
from uuid import UUID

import pytest

from handlertest import RunnerConfig, new_message_id, utc_now


class TestDefaults:
    """Tests for the default configuration."""

    def test_defaults(self):
        """Defaults use the UTC clock, UUID ids and no tracing."""
        config = RunnerConfig()
        assert config.clock is utc_now
        assert config.message_id_factory is new_message_id
        assert config.message_factory is None
        assert config.enable_tracing is False
        assert config.tracer is None

    def test_utc_now_is_timezone_aware(self):
        assert utc_now().tzinfo is UTC

    def test_new_message_id_is_unique_uuid(self):
        first, second = new_message_id(), new_message_id()
        assert first != second
        UUID(first)


class TestValidation:
    """Tests for __post_init__ validation."""

    def test_non_callable_clock_rejected(self):
        with pytest.raises(ValueError, match="clock"):
            RunnerConfig(clock=datetime(2024, 1, 1, tzinfo=UTC))

    def test_non_callable_message_id_factory_rejected(self):
        with pytest.raises(ValueError, match="message_id_factory"):
            RunnerConfig(message_id_factory="fixed-id")

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            RunnerConfig().enable_tracing = True
