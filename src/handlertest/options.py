"""
Delivery options for outgoing operations.

Options objects are opaque bags of delivery metadata that a handler passes
along with an outgoing message. The harness records them by identity and
only interprets the delivery date, which defer expectations need.

Example:
    >>> options = SendOptions()
    >>> options.delay_delivery_with(timedelta(minutes=10))
    >>> options.set_header("Priority", "high")
    >>> await context.send(order_placed, options=options)
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from handlertest.exceptions import ConfigurationError


class ExtendableOptions(BaseModel):
    """
    Options shared by send, publish and reply operations.

    Attributes:
        destination: Explicit destination override (None = routing decides)
        message_id: Explicit id for the outgoing message (None = generated)
        headers: Custom headers to attach to the outgoing message
    """

    model_config = ConfigDict(validate_assignment=True)

    destination: str | None = Field(
        default=None,
        description="Explicit destination address",
    )
    message_id: str | None = Field(
        default=None,
        description="Explicit outgoing message id",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Custom outgoing headers",
    )

    def set_destination(self, destination: str) -> Self:
        if not destination:
            raise ValueError("destination must be a non-empty string")
        self.destination = destination
        return self

    def set_message_id(self, message_id: str) -> Self:
        self.message_id = message_id
        return self

    def set_header(self, key: str, value: str) -> Self:
        self.headers[key] = value
        return self

    def get_headers(self) -> dict[str, str]:
        """Return a copy of the custom headers."""
        return dict(self.headers)


class SendOptions(ExtendableOptions):
    """
    Options for send and send-local operations.

    A send can be deferred either by a relative delay or by an absolute
    not-before date, never both.

    Attributes:
        delivery_delay: Relative delay (resolved against recording time)
        not_before: Absolute earliest delivery date
        route_to_this_endpoint: True when the message is sent locally
    """

    delivery_delay: timedelta | None = None
    not_before: datetime | None = None
    route_to_this_endpoint: bool = False

    def delay_delivery_with(self, delay: timedelta) -> Self:
        """
        Defer delivery by a relative duration.

        Args:
            delay: How long after recording time the message becomes deliverable

        Raises:
            ValueError: If delay is negative
            ConfigurationError: If a not-before date was already set
        """
        if delay < timedelta(0):
            raise ValueError(f"delivery delay must not be negative, got {delay}")
        if self.not_before is not None:
            raise ConfigurationError(
                "Cannot delay delivery: do_not_deliver_before() was already called "
                "on these options. Use one deferral style per message."
            )
        self.delivery_delay = delay
        return self

    def do_not_deliver_before(self, when: datetime) -> Self:
        """
        Defer delivery until an absolute date.

        Raises:
            ConfigurationError: If a delivery delay was already set
        """
        if self.delivery_delay is not None:
            raise ConfigurationError(
                "Cannot set a not-before date: delay_delivery_with() was already "
                "called on these options. Use one deferral style per message."
            )
        self.not_before = when
        return self

    def route_to_local_endpoint(self) -> Self:
        self.route_to_this_endpoint = True
        return self

    def is_deferred(self) -> bool:
        return self.delivery_delay is not None or self.not_before is not None

    def resolve_delivery_date(self, recorded_at: datetime) -> datetime | None:
        """
        Resolve the absolute delivery date for a send recorded at a given time.

        Args:
            recorded_at: When the send was recorded

        Returns:
            recorded_at + delivery_delay, the not-before date, or None
        """
        if self.delivery_delay is not None:
            return recorded_at + self.delivery_delay
        return self.not_before


class PublishOptions(ExtendableOptions):
    """Options for publish operations."""

    pass


class ReplyOptions(ExtendableOptions):
    """Options for reply operations."""

    def route_reply_to(self, address: str) -> Self:
        """Send the reply to an address other than the inbound reply-to address."""
        return self.set_destination(address)


__all__ = [
    "ExtendableOptions",
    "SendOptions",
    "PublishOptions",
    "ReplyOptions",
]
