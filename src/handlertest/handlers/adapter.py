"""
Handler adapter for normalizing handlers under test.

Handlers come in several shapes: objects with an async ``handle`` method,
objects with a synchronous ``handle`` method (which may still return an
awaitable), and bare callables taking ``(message, context)``. The adapter
normalizes all of them to one async interface so the runner has exactly one
suspension point and never inspects concrete method names beyond the
``handle`` capability.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from handlertest.exceptions import ConfigurationError
from handlertest.protocols import MessageHandler, MessageHandlerContext

logger = logging.getLogger(__name__)

# Type for the normalized handler function
AsyncHandlerFunc = Callable[[Any, MessageHandlerContext], Awaitable[None]]


def get_handler_name(handler: Any) -> str:
    """
    Get a descriptive name for a handler for logging and failure messages.

    Args:
        handler: Any handler object (class instance, function, lambda)

    Returns:
        String name for the handler
    """
    if inspect.isfunction(handler) or inspect.ismethod(handler):
        return str(handler.__qualname__)
    if hasattr(handler, "__class__") and handler.__class__.__name__ != "function":
        return str(handler.__class__.__name__)
    elif hasattr(handler, "__name__"):
        return str(handler.__name__)
    else:
        return repr(handler)


class HandlerAdapter:
    """
    Adapter that normalizes a handler to ``async handle(message, context)``.

    Accepts:
    - Objects satisfying the MessageHandler protocol (async or sync handle)
    - Async callables ``(message, context)``
    - Sync callables ``(message, context)``, optionally returning an awaitable

    Exceptions raised by the handler, synchronously or from its awaitable,
    propagate unchanged.

    Example:
        >>> adapter = HandlerAdapter(PlaceOrderHandler())
        >>> await adapter.handle(message, context)

    Attributes:
        original: The original unwrapped handler
        name: Descriptive name for logging
    """

    def __init__(self, handler: Any) -> None:
        """
        Initialize the adapter with a handler.

        Args:
            handler: Object with a handle() method or a callable

        Raises:
            ConfigurationError: If handler is a class, or has no handle() method
                and isn't callable
        """
        self._original = handler
        self._name = get_handler_name(handler)
        self._async_handler = self._normalize(handler)

    def _normalize(self, handler: Any) -> AsyncHandlerFunc:
        if isinstance(handler, type):
            raise ConfigurationError(
                f"Handler must be an instance, got the class {handler.__name__}. "
                "Construct it first or pass it to HandlerTest, which default-constructs classes."
            )
        if isinstance(handler, MessageHandler):
            handle_method = handler.handle
        elif callable(handler):
            handle_method = handler
        else:
            raise ConfigurationError(
                f"Handler must have a handle(message, context) method or be callable, "
                f"got {type(handler).__name__}"
            )

        if inspect.iscoroutinefunction(handle_method):
            return handle_method  # type: ignore[no-any-return]

        async def async_wrapper(message: Any, context: MessageHandlerContext) -> None:
            result = handle_method(message, context)
            if inspect.isawaitable(result):
                await result

        return async_wrapper

    @property
    def original(self) -> Any:
        """Get the original unwrapped handler."""
        return self._original

    @property
    def name(self) -> str:
        """Get the handler's descriptive name."""
        return self._name

    async def handle(self, message: Any, context: MessageHandlerContext) -> None:
        """
        Invoke the handler and wait for it to complete.

        Args:
            message: The inbound message
            context: The context passed to the handler
        """
        await self._async_handler(message, context)

    def __repr__(self) -> str:
        return f"HandlerAdapter({self._name})"


__all__ = [
    "HandlerAdapter",
    "AsyncHandlerFunc",
    "get_handler_name",
]
