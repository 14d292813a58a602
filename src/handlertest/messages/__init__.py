"""
Message base classes and default message instantiation.

Example:
    >>> from handlertest.messages import Command, MessageFactory
    >>>
    >>> class PlaceOrder(Command):
    ...     order_number: str
    ...
    >>> MessageFactory().instantiate(PlaceOrder).order_number
    ''
"""

from handlertest.messages.base import Command, Event, Message
from handlertest.messages.factory import MessageFactory, is_interface, type_default

__all__ = [
    "Message",
    "Command",
    "Event",
    "MessageFactory",
    "is_interface",
    "type_default",
]
