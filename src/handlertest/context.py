"""
Recording context passed to handlers under test.

The RecordingContext stands in for a real message handler context. Instead
of dispatching anything it appends one OperationRecord per outgoing
operation and exposes the accumulated records and control flags for
expectations to inspect once the handler has completed.

Example:
    >>> context = RecordingContext()
    >>> await context.send(Outgoing, lambda m: setattr(m, "number", 1))
    >>> context.sent_messages[0].message.number
    1

Thread Safety:
    Every operation may be called from any thread or task, including tasks
    and threads the handler spawns itself. Appending a record and assigning
    its sequence number happen under one lock, so concurrent operations
    are serialized into a valid linearization and never lost.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Generator, Iterator, Mapping
from datetime import datetime, timedelta
from typing import Any, TypeVar

from handlertest.config import new_message_id, utc_now
from handlertest.exceptions import MissingHeaderError
from handlertest.messages.factory import MessageFactory
from handlertest.options import ExtendableOptions, PublishOptions, ReplyOptions, SendOptions
from handlertest.protocols import MessageInstantiator
from handlertest.records import (
    ForwardRecord,
    MessageRecord,
    OperationRecord,
    PublishRecord,
    ReplyRecord,
    SendRecord,
)

logger = logging.getLogger(__name__)

TRecord = TypeVar("TRecord", bound=OperationRecord)

Mutator = Callable[[Any], None]


class CompletedOperation:
    """
    Awaitable returned by every context operation.

    Operations are recorded synchronously, before this value is returned,
    so it is already complete. Awaiting it never suspends and it may be
    awaited any number of times, from any event loop.
    """

    __slots__ = ()

    def __await__(self) -> Generator[Any, None, None]:
        return
        yield

    def __repr__(self) -> str:
        return "CompletedOperation()"


_COMPLETED = CompletedOperation()
_NO_DEFAULT: Any = object()


class IncomingHeaders(Mapping[str, str]):
    """
    Headers of the inbound message, as configured by the test.

    Looking up a key that was never configured raises MissingHeaderError
    rather than returning a default, through both ``headers[key]`` and
    ``headers.get(key)``. Only an explicit ``get(key, default)`` falls back.
    Setting a key twice keeps the last value.
    """

    def __init__(self, headers: Mapping[str, str] | None = None) -> None:
        self._headers: dict[str, str] = dict(headers or {})

    def __getitem__(self, key: str) -> str:
        try:
            return self._headers[key]
        except KeyError:
            raise MissingHeaderError(key, self._headers) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def get(self, key: str, default: Any = _NO_DEFAULT) -> Any:  # type: ignore[override]
        if default is _NO_DEFAULT:
            return self[key]
        return self._headers.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._headers[key] = value

    def __repr__(self) -> str:
        return f"IncomingHeaders({self._headers!r})"


class RecordingContext:
    """
    Message handler context that records operations instead of performing them.

    A RecordingContext is created fresh for each test run and must not be
    shared between runs.

    Attributes:
        message_id: Id of the inbound message (a UUID string by default)
        reply_to_address: Reply-to address of the inbound message
    """

    def __init__(
        self,
        *,
        message_id: str | None = None,
        reply_to_address: str | None = None,
        headers: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] = utc_now,
        message_factory: MessageInstantiator | None = None,
    ) -> None:
        """
        Initialize an empty recording context.

        Args:
            message_id: Inbound message id (generated when omitted)
            reply_to_address: Inbound reply-to address
            headers: Initial incoming headers
            clock: Source of recording time
            message_factory: Creates default instances for operations that
                receive a message type instead of an instance
        """
        self.message_id = message_id if message_id is not None else new_message_id()
        self.reply_to_address = reply_to_address
        self._headers = IncomingHeaders(headers)
        self._clock = clock
        self._message_factory = message_factory or MessageFactory()

        self._records: list[OperationRecord] = []
        self._lock = threading.Lock()
        self._snapshot_size: int | None = None
        self._do_not_continue_dispatching = False
        self._handle_current_message_later = False

    # =========================================================================
    # Incoming message state
    # =========================================================================

    @property
    def message_headers(self) -> IncomingHeaders:
        """Headers of the inbound message."""
        return self._headers

    def set_incoming_header(self, key: str, value: str) -> None:
        self._headers.set(key, value)

    # =========================================================================
    # Outgoing operations
    # =========================================================================

    def send(
        self,
        message: Any,
        mutator: Mutator | None = None,
        *,
        options: SendOptions | None = None,
    ) -> CompletedOperation:
        """
        Record a send.

        Args:
            message: A message instance, or a message type to default-construct
            mutator: Optional callback applied to the message before recording
            options: Send options (a fresh SendOptions when omitted)

        Returns:
            An already-completed awaitable

        Raises:
            TypeError: If message is None or options are of the wrong type
        """
        send_options = self._options(options, SendOptions, "send")
        return self._record_send(
            message, mutator, send_options, local=send_options.route_to_this_endpoint
        )

    def send_local(
        self,
        message: Any,
        mutator: Mutator | None = None,
        *,
        options: SendOptions | None = None,
    ) -> CompletedOperation:
        """Record a send routed to the local endpoint."""
        send_options = self._options(options, SendOptions, "send_local")
        send_options.route_to_local_endpoint()
        return self._record_send(message, mutator, send_options, local=True)

    def defer(
        self,
        message: Any,
        when: timedelta | datetime,
        mutator: Mutator | None = None,
        *,
        options: SendOptions | None = None,
    ) -> CompletedOperation:
        """
        Record a deferred send.

        Args:
            message: A message instance or type
            when: A timedelta (delay from recording time) or a datetime
                (do not deliver before)
            mutator: Optional callback applied to the message
            options: Send options to defer (a fresh SendOptions when omitted)

        Raises:
            TypeError: If when is neither a timedelta nor a datetime
            ConfigurationError: If options already carry the other deferral style
        """
        send_options = self._options(options, SendOptions, "defer")
        if isinstance(when, timedelta):
            send_options.delay_delivery_with(when)
        elif isinstance(when, datetime):
            send_options.do_not_deliver_before(when)
        else:
            raise TypeError(f"when must be a timedelta or a datetime, got {type(when).__name__}")
        return self.send(message, mutator, options=send_options)

    def publish(
        self,
        message: Any,
        mutator: Mutator | None = None,
        *,
        options: PublishOptions | None = None,
    ) -> CompletedOperation:
        """Record a publish."""
        publish_options = self._options(options, PublishOptions, "publish")
        instance, declared = self._resolve_message(message, mutator)
        self._append(
            lambda sequence, recorded_at: PublishRecord(
                sequence=sequence,
                recorded_at=recorded_at,
                message=instance,
                message_type=declared,
                options=publish_options,
            )
        )
        return _COMPLETED

    def reply(
        self,
        message: Any,
        mutator: Mutator | None = None,
        *,
        options: ReplyOptions | None = None,
    ) -> CompletedOperation:
        """Record a reply to the inbound message."""
        reply_options = self._options(options, ReplyOptions, "reply")
        instance, declared = self._resolve_message(message, mutator)
        self._append(
            lambda sequence, recorded_at: ReplyRecord(
                sequence=sequence,
                recorded_at=recorded_at,
                message=instance,
                message_type=declared,
                options=reply_options,
            )
        )
        return _COMPLETED

    def forward_current_message_to(self, destination: str) -> CompletedOperation:
        """
        Record a forward of the inbound message.

        Each call appends its own record; forwarding to several destinations
        is legal.

        Raises:
            ValueError: If destination is empty
        """
        if not isinstance(destination, str) or not destination:
            raise ValueError(f"destination must be a non-empty string, got {destination!r}")
        self._append(
            lambda sequence, recorded_at: ForwardRecord(
                sequence=sequence,
                recorded_at=recorded_at,
                destination=destination,
            )
        )
        return _COMPLETED

    def do_not_continue_dispatching_current_message_to_handlers(self) -> None:
        """Signal that no further handlers should receive the inbound message."""
        with self._lock:
            self._do_not_continue_dispatching = True
        logger.debug("Recorded do_not_continue_dispatching_current_message_to_handlers")

    def handle_current_message_later(self) -> CompletedOperation:
        """Signal that the inbound message should be handled again later."""
        with self._lock:
            self._handle_current_message_later = True
        logger.debug("Recorded handle_current_message_later")
        return _COMPLETED

    # =========================================================================
    # Recorded state
    # =========================================================================

    @property
    def records(self) -> tuple[OperationRecord, ...]:
        """
        All recorded operations in emission order.

        Once the runner has taken its verification snapshot, operations
        appended afterwards are excluded.
        """
        with self._lock:
            end = self._snapshot_size if self._snapshot_size is not None else len(self._records)
            return tuple(self._records[:end])

    def records_of(self, record_type: type[TRecord]) -> tuple[TRecord, ...]:
        return tuple(r for r in self.records if isinstance(r, record_type))

    @property
    def sent_messages(self) -> tuple[SendRecord, ...]:
        """All sends, including local and deferred sends."""
        return self.records_of(SendRecord)

    @property
    def deferred_messages(self) -> tuple[SendRecord, ...]:
        return tuple(r for r in self.sent_messages if r.is_deferred)

    @property
    def published_messages(self) -> tuple[PublishRecord, ...]:
        return self.records_of(PublishRecord)

    @property
    def replied_messages(self) -> tuple[ReplyRecord, ...]:
        return self.records_of(ReplyRecord)

    @property
    def message_records(self) -> tuple[MessageRecord, ...]:
        return self.records_of(MessageRecord)

    @property
    def forwarded_messages(self) -> tuple[str, ...]:
        """Destinations the inbound message was forwarded to, in order."""
        return tuple(r.destination for r in self.records_of(ForwardRecord))

    @property
    def do_not_continue_dispatching_called(self) -> bool:
        with self._lock:
            return self._do_not_continue_dispatching

    @property
    def handle_current_message_later_called(self) -> bool:
        with self._lock:
            return self._handle_current_message_later

    def take_snapshot(self) -> tuple[OperationRecord, ...]:
        """
        Fix the set of records visible to verification.

        Called by the runner once the handler has completed. Later calls
        keep the first snapshot.

        Returns:
            The records visible to verification
        """
        with self._lock:
            if self._snapshot_size is None:
                self._snapshot_size = len(self._records)
            return tuple(self._records[: self._snapshot_size])

    # =========================================================================
    # Internals
    # =========================================================================

    def _options(self, options: Any, expected: type[ExtendableOptions], operation: str) -> Any:
        if options is None:
            return expected()
        if not isinstance(options, expected):
            raise TypeError(
                f"{operation}() expects {expected.__name__}, got {type(options).__name__}"
            )
        return options

    def _record_send(
        self, message: Any, mutator: Mutator | None, send_options: SendOptions, *, local: bool
    ) -> CompletedOperation:
        instance, declared = self._resolve_message(message, mutator)

        def build(sequence: int, recorded_at: datetime) -> SendRecord:
            return SendRecord(
                sequence=sequence,
                recorded_at=recorded_at,
                message=instance,
                message_type=declared,
                options=send_options,
                local=local,
                delivery_date=send_options.resolve_delivery_date(recorded_at),
            )

        self._append(build)
        return _COMPLETED

    def _resolve_message(self, message: Any, mutator: Mutator | None) -> tuple[Any, type]:
        if message is None:
            raise TypeError("message must be a message instance or a message type, got None")
        if mutator is not None and not callable(mutator):
            raise TypeError(f"mutator must be callable, got {type(mutator).__name__}")

        if isinstance(message, type):
            declared = message
            instance = self._message_factory.instantiate(message)
        else:
            declared = type(message)
            instance = message

        if mutator is not None:
            mutator(instance)
        return instance, declared

    def _append(self, build: Callable[[int, datetime], OperationRecord]) -> OperationRecord:
        with self._lock:
            record = build(len(self._records), self._clock())
            self._records.append(record)
            late = self._snapshot_size is not None

        extra = {
            "operation": record.kind.value,
            "sequence": record.sequence,
            "message_id": self.message_id,
        }
        if isinstance(record, MessageRecord):
            extra["message_type"] = record.message_type_name
        if late:
            logger.warning(
                f"Operation {record.kind.value} recorded after the handler completed; "
                "it is not visible to verification. Await all work started by the handler.",
                extra=extra,
            )
        else:
            logger.debug(f"Recorded {record.kind.value} #{record.sequence}", extra=extra)
        return record

    def __repr__(self) -> str:
        return (
            f"RecordingContext(message_id={self.message_id!r}, "
            f"operations={len(self.records)})"
        )


__all__ = [
    "CompletedOperation",
    "IncomingHeaders",
    "RecordingContext",
]
