"""
Configuration for handler test runs.

Every setting that a process-wide default would otherwise control is an
explicit field here, supplied per HandlerTest.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from handlertest.observability import Tracer
    from handlertest.protocols import MessageInstantiator


def utc_now() -> datetime:
    """Default recording clock: the current UTC time."""
    return datetime.now(UTC)


def new_message_id() -> str:
    """Default inbound message id generator: a random UUID string."""
    return str(uuid4())


@dataclass(frozen=True)
class RunnerConfig:
    """
    Configuration for a HandlerTest run.

    Attributes:
        clock: Source of recording time. Used to timestamp records and to
            resolve relative delivery delays into delivery dates.
        message_id_factory: Generates the inbound message id when the test
            does not supply one.
        message_factory: Creates default instances of message types
            (None = a fresh MessageFactory per run).
        enable_tracing: Emit an OpenTelemetry span per run when available.
            Ignored if tracer is provided.
        tracer: Explicit tracer to use instead of create_tracer().

    Example:
        >>> frozen = datetime(2024, 1, 1, tzinfo=UTC)
        >>> config = RunnerConfig(clock=lambda: frozen)
        >>> await HandlerTest(DeferringHandler(), config=config).expect_defer(
        ...     Reminder, lambda m, at: at == frozen + timedelta(minutes=10)
        ... ).on_message(Incoming)
    """

    clock: Callable[[], datetime] = utc_now
    message_id_factory: Callable[[], str] = new_message_id
    message_factory: MessageInstantiator | None = field(default=None)
    enable_tracing: bool = False
    tracer: Tracer | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not callable(self.clock):
            raise ValueError(
                f"clock must be a callable returning a datetime, got {type(self.clock).__name__}"
            )
        if not callable(self.message_id_factory):
            raise ValueError(
                "message_id_factory must be a callable returning a string, "
                f"got {type(self.message_id_factory).__name__}"
            )


__all__ = [
    "RunnerConfig",
    "new_message_id",
    "utc_now",
]
