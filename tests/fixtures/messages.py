"""
Message types shared by the handlertest test suite.

Covers every message shape the harness instantiates: pydantic messages,
subclassed messages, a dataclass, and interface messages declared as a
Protocol or as an abstract class.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from handlertest import Command, Event, Message


class Priority(Enum):
    NORMAL = "normal"
    HIGH = "high"


class Incoming(Command):
    """Default inbound message for handlers that ignore their input."""

    data: str


class Outgoing(Command):
    number: int


class Outgoing2(Command):
    number: int


class SpecialOutgoing(Outgoing):
    """Subclass used to check that expectations match subtypes."""

    flavour: str


class Reminder(Command):
    note: str


class MyCommand(Command):
    """Inbound command whose handler copies incoming headers."""

    header1: str
    header2: str


class HeadersCopied(Event):
    header1: str
    header2: str


class MyRequest(Command):
    text: str
    should_reply: bool


class MyReply(Message):
    text: str


class OrderPlaced(Event):
    order_number: int
    items: list[str]
    priority: Priority
    note: str | None


class Send1(Protocol):
    """Interface message declared as a Protocol."""

    data: str


class Publish1(Protocol):
    data: str


class AuditEntry(ABC):
    """Interface message declared as an abstract class."""

    @property
    @abstractmethod
    def entity(self) -> str: ...

    @abstractmethod
    def describe(self) -> str: ...


@dataclass
class Ping:
    count: int
    tags: list[str] = field(default_factory=list)
    label: str = "ping"


class NeedsArguments:
    """Plain class that cannot be default-constructed."""

    def __init__(self, value: int) -> None:
        self.value = value
