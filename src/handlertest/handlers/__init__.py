"""
Handler normalization for the test runner.

Example:
    >>> from handlertest.handlers import HandlerAdapter
    >>> adapter = HandlerAdapter(PlaceOrderHandler())
    >>> await adapter.handle(message, context)
"""

from handlertest.handlers.adapter import AsyncHandlerFunc, HandlerAdapter, get_handler_name

__all__ = [
    "HandlerAdapter",
    "AsyncHandlerFunc",
    "get_handler_name",
]
