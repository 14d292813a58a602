"""
Handler test runner.

HandlerTest orchestrates one verification run: it builds a fresh
RecordingContext, applies the configured inputs, invokes the handler under
test with the inbound message, waits for the handler to complete and then
verifies the registered expectations in order.

Example:
    >>> from handlertest import HandlerTest
    >>>
    >>> async def test_place_order_publishes_order_placed():
    ...     await (
    ...         HandlerTest(PlaceOrderHandler())
    ...         .set_incoming_header("Tenant", "acme")
    ...         .expect_publish(OrderPlaced, lambda m: m.tenant == "acme")
    ...         .expect_not_send(RefundPayment)
    ...         .on_message(PlaceOrder, lambda m: setattr(m, "order_number", 42))
    ...     )

Lifecycle:
    CONFIGURED -> INVOKING -> AWAITING -> VERIFYING -> PASSED | FAILED

    A handler fault propagates unchanged from AWAITING (or INVOKING) and
    verification is skipped. Each HandlerTest runs at most once; build a
    new one for every run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, Self

from handlertest.config import RunnerConfig
from handlertest.context import Mutator, RecordingContext
from handlertest.exceptions import ConfigurationError, ExpectationError
from handlertest.expectations import (
    ExpectationSet,
    ExpectDefer,
    ExpectDoNotContinueDispatchingCurrentMessageToHandlers,
    Expectation,
    ExpectForwardCurrentMessageTo,
    ExpectHandleCurrentMessageLater,
    ExpectPublish,
    ExpectReply,
    ExpectSend,
    ExpectSendLocal,
    Polarity,
)
from handlertest.handlers import HandlerAdapter
from handlertest.messages import MessageFactory
from handlertest.observability import (
    ATTR_ERROR_TYPE,
    ATTR_EXPECTATION_COUNT,
    ATTR_EXPECTATION_PASSED,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
    ATTR_MESSAGE_ID,
    ATTR_MESSAGE_TYPE,
    ATTR_MESSAGING_SYSTEM,
    ATTR_OPERATION_COUNT,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)

SPAN_NAME = "handlertest.handler.on_message"


class RunnerState(Enum):
    """States of a handler test run."""

    CONFIGURED = "configured"
    INVOKING = "invoking"
    AWAITING = "awaiting"
    VERIFYING = "verifying"
    PASSED = "passed"
    FAILED = "failed"


class HandlerTest:
    """
    Fluent builder and runner for one handler verification.

    Configuration methods return the runner itself so a test reads as one
    chained expression ending in ``await ... .on_message(...)``.

    Attributes:
        handler: The handler instance under test
        config: The runner configuration
        expectations: Registered expectations, in registration order
    """

    def __init__(self, handler: Any, *, config: RunnerConfig | None = None) -> None:
        """
        Initialize the runner.

        Args:
            handler: A handler instance, a handler class to default-construct,
                or a callable taking (message, context)
            config: Runner configuration (defaults to RunnerConfig())

        Raises:
            ConfigurationError: If the handler exposes no handle() capability
        """
        if isinstance(handler, type):
            try:
                handler = handler()
            except TypeError as e:
                raise ConfigurationError(
                    f"Cannot default-construct handler {handler.__name__}: {e}"
                ) from e

        self.handler = handler
        self.config = config or RunnerConfig()
        self.expectations = ExpectationSet()
        self._adapter = HandlerAdapter(handler)
        self._tracer: Tracer = self.config.tracer or create_tracer(
            __name__, self.config.enable_tracing
        )
        self._dependency_mutators: list[Callable[[Any], None]] = []
        self._context_mutators: list[Callable[[RecordingContext], None]] = []
        self._headers: dict[str, str] = {}
        self._state = RunnerState.CONFIGURED
        self._context: RecordingContext | None = None

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def context(self) -> RecordingContext | None:
        """The context of the last run, or None before on_message()."""
        return self._context

    # =========================================================================
    # Inputs
    # =========================================================================

    def with_external_dependencies(self, mutator: Callable[[Any], None]) -> Self:
        """
        Register a callback applied to the handler instance before invocation.

        Use it to inject fakes for the handler's own collaborators.
        """
        self._require_callable(mutator, "with_external_dependencies")
        self._dependency_mutators.append(mutator)
        return self

    def configure_handler_context(self, mutator: Callable[[RecordingContext], None]) -> Self:
        """Register a callback applied to the fresh context before invocation."""
        self._require_callable(mutator, "configure_handler_context")
        self._context_mutators.append(mutator)
        return self

    def set_incoming_header(self, key: str, value: str) -> Self:
        """Configure an incoming header. Setting a key again replaces the value."""
        self._headers[key] = value
        return self

    # =========================================================================
    # Expectations
    # =========================================================================

    def expect(self, expectation: Expectation) -> Self:
        """Register an arbitrary expectation."""
        self.expectations.add(expectation)
        return self

    def expect_send(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        return self.expect(ExpectSend(message_type, check))

    def expect_not_send(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        return self.expect(ExpectSend(message_type, check, polarity=Polarity.MUST_NOT_OCCUR))

    def expect_send_local(
        self, message_type: type, check: Callable[..., Any] | None = None
    ) -> Self:
        return self.expect(ExpectSendLocal(message_type, check))

    def expect_not_send_local(
        self, message_type: type, check: Callable[..., Any] | None = None
    ) -> Self:
        return self.expect(ExpectSendLocal(message_type, check, polarity=Polarity.MUST_NOT_OCCUR))

    def expect_publish(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        return self.expect(ExpectPublish(message_type, check))

    def expect_not_publish(
        self, message_type: type, check: Callable[..., Any] | None = None
    ) -> Self:
        return self.expect(ExpectPublish(message_type, check, polarity=Polarity.MUST_NOT_OCCUR))

    def expect_reply(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        return self.expect(ExpectReply(message_type, check))

    def expect_not_reply(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        return self.expect(ExpectReply(message_type, check, polarity=Polarity.MUST_NOT_OCCUR))

    def expect_defer(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        """Expect a deferred send; a two-argument check receives the delivery date."""
        return self.expect(ExpectDefer(message_type, check))

    def expect_not_defer(self, message_type: type, check: Callable[..., Any] | None = None) -> Self:
        return self.expect(ExpectDefer(message_type, check, polarity=Polarity.MUST_NOT_OCCUR))

    def expect_forward_current_message_to(
        self, check: Callable[[str], bool] | None = None
    ) -> Self:
        return self.expect(ExpectForwardCurrentMessageTo(check))

    def expect_not_forward_current_message_to(
        self, check: Callable[[str], bool] | None = None
    ) -> Self:
        return self.expect(ExpectForwardCurrentMessageTo(check, polarity=Polarity.MUST_NOT_OCCUR))

    def expect_do_not_continue_dispatching_current_message_to_handlers(self) -> Self:
        return self.expect(ExpectDoNotContinueDispatchingCurrentMessageToHandlers())

    def expect_not_do_not_continue_dispatching_current_message_to_handlers(self) -> Self:
        return self.expect(
            ExpectDoNotContinueDispatchingCurrentMessageToHandlers(
                polarity=Polarity.MUST_NOT_OCCUR
            )
        )

    def expect_handle_current_message_later(self) -> Self:
        return self.expect(ExpectHandleCurrentMessageLater())

    def expect_not_handle_current_message_later(self) -> Self:
        return self.expect(ExpectHandleCurrentMessageLater(polarity=Polarity.MUST_NOT_OCCUR))

    # =========================================================================
    # Run
    # =========================================================================

    async def on_message(
        self,
        message: Any,
        mutator: Mutator | None = None,
        *,
        message_id: str | None = None,
    ) -> RecordingContext:
        """
        Run the handler against an inbound message and verify expectations.

        Args:
            message: The inbound message instance, or a message type to
                default-construct
            mutator: Optional callback applied to the inbound message
            message_id: Inbound message id (generated when omitted)

        Returns:
            The completed RecordingContext, for further inspection

        Raises:
            ConfigurationError: If this runner has already run, or the
                configuration is contradictory
            ExpectationError: For the first violated expectation
            Exception: Whatever the handler raises, unchanged
        """
        if self._state is not RunnerState.CONFIGURED:
            raise ConfigurationError(
                f"HandlerTest for {self._adapter.name} has already run (state: "
                f"{self._state.value}). Create a new HandlerTest for each run."
            )
        if message is None:
            raise TypeError("message must be a message instance or a message type, got None")

        message_factory = self.config.message_factory or MessageFactory()
        context = RecordingContext(
            message_id=message_id if message_id is not None else self.config.message_id_factory(),
            headers=self._headers,
            clock=self.config.clock,
            message_factory=message_factory,
        )
        self._context = context
        for configure in self._context_mutators:
            configure(context)
        for inject in self._dependency_mutators:
            inject(self.handler)

        if isinstance(message, type):
            message_type_name = message.__name__
            message = message_factory.instantiate(message)
        else:
            message_type_name = type(message).__name__
        if mutator is not None:
            mutator(message)

        extra = {
            "handler": self._adapter.name,
            "message_type": message_type_name,
            "message_id": context.message_id,
        }

        with self._tracer.span(
            SPAN_NAME,
            {
                ATTR_HANDLER_NAME: self._adapter.name,
                ATTR_MESSAGE_TYPE: message_type_name,
                ATTR_MESSAGE_ID: context.message_id,
                ATTR_MESSAGING_SYSTEM: "handlertest",
            },
        ) as span:
            self._transition(RunnerState.INVOKING, extra)
            try:
                pending = self._adapter.handle(message, context)
                self._transition(RunnerState.AWAITING, extra)
                await pending
            except BaseException as e:
                self._transition(RunnerState.FAILED, extra)
                if span:
                    span.set_attribute(ATTR_HANDLER_SUCCESS, False)
                    span.set_attribute(ATTR_ERROR_TYPE, type(e).__name__)
                raise

            records = context.take_snapshot()
            if span:
                span.set_attribute(ATTR_HANDLER_SUCCESS, True)
                span.set_attribute(ATTR_OPERATION_COUNT, len(records))
                span.set_attribute(ATTR_EXPECTATION_COUNT, len(self.expectations))

            self._transition(RunnerState.VERIFYING, extra)
            try:
                self.expectations.validate(context)
            except ExpectationError:
                self._transition(RunnerState.FAILED, extra)
                if span:
                    span.set_attribute(ATTR_EXPECTATION_PASSED, False)
                raise
            except Exception:
                # A predicate raised; it propagates unchanged
                self._transition(RunnerState.FAILED, extra)
                raise

            if span:
                span.set_attribute(ATTR_EXPECTATION_PASSED, True)
            self._transition(RunnerState.PASSED, extra)

        return context

    # =========================================================================
    # Internals
    # =========================================================================

    def _transition(self, state: RunnerState, extra: dict[str, Any]) -> None:
        logger.debug(
            f"{self._adapter.name}: {self._state.value} -> {state.value}",
            extra={**extra, "state": state.value},
        )
        self._state = state

    @staticmethod
    def _require_callable(value: Any, method: str) -> None:
        if not callable(value):
            raise TypeError(f"{method}() expects a callable, got {type(value).__name__}")

    def __repr__(self) -> str:
        return (
            f"HandlerTest({self._adapter.name}, state={self._state.value}, "
            f"expectations={len(self.expectations)})"
        )


__all__ = [
    "HandlerTest",
    "RunnerState",
]
