"""
Base classes for handler messages.

Handlers can exchange any Python objects, but deriving messages from these
bases gives them pydantic validation, structural equality, a readable repr
in failure messages, and the type-default construction the harness uses
when a test asks for a message by type.

Example:
    >>> class PlaceOrder(Command):
    ...     order_number: str
    ...     quantity: int
    ...
    >>> class OrderPlaced(Event):
    ...     order_number: str
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Message(BaseModel):
    """
    Base class for all messages.

    Messages are mutable so that mutator callbacks (``lambda m: ...``)
    can fill them in after default construction.
    """

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)


class Command(Message):
    """A message that asks exactly one receiver to do something."""

    pass


class Event(Message):
    """A message that announces something has happened to any subscriber."""

    pass


__all__ = [
    "Message",
    "Command",
    "Event",
]
