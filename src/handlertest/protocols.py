"""
Canonical protocol definitions for the handlertest library.

Protocols:
- MessageHandler: the single-method capability a handler under test exposes
- MessageHandlerContext: the operation surface a handler may call
- MessageInstantiator: creates default instances of message types

Example:
    >>> from handlertest.protocols import MessageHandler
    >>>
    >>> class PlaceOrderHandler:
    ...     async def handle(self, message: PlaceOrder, context: MessageHandlerContext) -> None:
    ...         await context.publish(OrderPlaced(order_number=message.order_number))
    ...
    >>> isinstance(PlaceOrderHandler(), MessageHandler)
    True
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from handlertest.options import PublishOptions, ReplyOptions, SendOptions

T = TypeVar("T")


@runtime_checkable
class MessageHandlerContext(Protocol):
    """
    Protocol for the context passed to a handler.

    Every outgoing operation returns an awaitable. Implementations record
    the operation before returning, so awaiting is not required for the
    operation to take effect.
    """

    message_id: str
    reply_to_address: str | None

    @property
    def message_headers(self) -> Mapping[str, str]: ...

    def send(
        self,
        message: Any,
        mutator: Callable[[Any], None] | None = None,
        *,
        options: SendOptions | None = None,
    ) -> Awaitable[None]: ...

    def send_local(
        self,
        message: Any,
        mutator: Callable[[Any], None] | None = None,
        *,
        options: SendOptions | None = None,
    ) -> Awaitable[None]: ...

    def publish(
        self,
        message: Any,
        mutator: Callable[[Any], None] | None = None,
        *,
        options: PublishOptions | None = None,
    ) -> Awaitable[None]: ...

    def reply(
        self,
        message: Any,
        mutator: Callable[[Any], None] | None = None,
        *,
        options: ReplyOptions | None = None,
    ) -> Awaitable[None]: ...

    def defer(
        self,
        message: Any,
        when: timedelta | datetime,
        mutator: Callable[[Any], None] | None = None,
        *,
        options: SendOptions | None = None,
    ) -> Awaitable[None]: ...

    def forward_current_message_to(self, destination: str) -> Awaitable[None]: ...

    def do_not_continue_dispatching_current_message_to_handlers(self) -> None: ...

    def handle_current_message_later(self) -> Awaitable[None]: ...


@runtime_checkable
class MessageHandler(Protocol):
    """
    Protocol for message handlers.

    A handler consumes one inbound message and a context and may perform
    any number of outgoing operations through the context. ``handle`` may
    be a coroutine function or a plain function; a plain function may also
    return an awaitable.
    """

    def handle(self, message: Any, context: MessageHandlerContext) -> Awaitable[None] | None:
        """
        Handle one inbound message.

        Args:
            message: The inbound message
            context: The context exposing outgoing operations
        """
        ...


@runtime_checkable
class MessageInstantiator(Protocol):
    """Capability that creates a default instance of a message type."""

    def instantiate(self, message_type: type[T]) -> T: ...


__all__ = [
    "MessageHandler",
    "MessageHandlerContext",
    "MessageInstantiator",
]
