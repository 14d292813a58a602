"""Tests for RecordingContext."""

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import UTC, datetime, timedelta

import pytest

from handlertest import (
    CompletedOperation,
    ConfigurationError,
    MissingHeaderError,
    OperationKind,
    PublishOptions,
    RecordingContext,
    ReplyOptions,
    SendOptions,
)
from tests.fixtures import Outgoing, Outgoing2, Send1


class TestIncomingState:
    """Tests for inbound message state."""

    def test_generated_message_id_is_uuid(self):
        """Without an explicit id, the context generates a UUID string."""
        from uuid import UUID

        context = RecordingContext()
        UUID(context.message_id)

    def test_explicit_message_id_and_reply_to(self):
        """Explicit id and reply-to address should be kept."""
        context = RecordingContext(message_id="abc", reply_to_address="sender")
        assert context.message_id == "abc"
        assert context.reply_to_address == "sender"

    def test_configured_header_lookup(self, context):
        """Configured headers should be readable by key."""
        context.set_incoming_header("Key1", "Header1")
        assert context.message_headers["Key1"] == "Header1"

    def test_last_header_write_wins(self, context):
        """Setting a header twice keeps the last value."""
        context.set_incoming_header("Key1", "first")
        context.set_incoming_header("Key1", "second")
        assert context.message_headers["Key1"] == "second"
        assert len(context.message_headers) == 1

    def test_headers_are_case_sensitive(self, context):
        """Keys differing only in case are different headers."""
        context.set_incoming_header("Key1", "value")
        with pytest.raises(MissingHeaderError):
            context.message_headers["key1"]

    def test_missing_header_raises(self, context):
        """An unconfigured key must never return a default."""
        context.set_incoming_header("Key1", "value")
        with pytest.raises(MissingHeaderError) as exc_info:
            context.message_headers["Tenant"]
        assert exc_info.value.key == "Tenant"
        assert exc_info.value.configured_keys == ["Key1"]

    def test_mapping_get_and_contains(self, context):
        """Mapping helpers should behave like any other mapping."""
        context.set_incoming_header("Key1", "value")
        assert "Key1" in context.message_headers
        assert "Other" not in context.message_headers
        assert context.message_headers.get("Other", "fallback") == "fallback"
        assert context.message_headers.get("Key1") == "value"

    def test_get_without_default_raises(self, context):
        """get() without an explicit default does not return None for unset keys."""
        context.set_incoming_header("Key1", "value")
        with pytest.raises(MissingHeaderError) as exc_info:
            context.message_headers.get("Unset")
        assert exc_info.value.key == "Unset"

    def test_initial_headers(self):
        """Headers passed to the constructor should be configured."""
        context = RecordingContext(headers={"A": "1"})
        assert dict(context.message_headers) == {"A": "1"}


class TestMessageOperations:
    """Tests for send, publish and reply recording."""

    @pytest.mark.asyncio
    async def test_send_instance(self, context, now):
        """Sending an instance records it with its own type."""
        message = Outgoing(number=1)
        await context.send(message)

        [record] = context.sent_messages
        assert record.message is message
        assert record.message_type is Outgoing
        assert record.sequence == 0
        assert record.recorded_at == now
        assert record.kind is OperationKind.SEND

    @pytest.mark.asyncio
    async def test_send_type_with_mutator(self, context):
        """Sending a type default-constructs it and applies the mutator."""
        await context.send(Outgoing, lambda m: setattr(m, "number", 5))
        assert context.sent_messages[0].message.number == 5

    @pytest.mark.asyncio
    async def test_send_interface_type_records_declared_type(self, context):
        """Interface messages are recorded under the interface, not the proxy."""
        await context.send(Send1, lambda m: setattr(m, "data", "x"))
        record = context.sent_messages[0]
        assert record.message_type is Send1
        assert record.message.data == "x"

    @pytest.mark.asyncio
    async def test_mutator_applied_to_instance(self, context):
        """A mutator is also applied to a supplied instance."""
        message = Outgoing(number=1)
        await context.send(message, lambda m: setattr(m, "number", 2))
        assert message.number == 2

    @pytest.mark.asyncio
    async def test_options_kept_by_identity(self, context):
        """The recorded options are the object the handler passed."""
        options = SendOptions().set_header("A", "1")
        await context.send(Outgoing, options=options)
        assert context.sent_messages[0].options is options

    @pytest.mark.asyncio
    async def test_send_local_routes_to_this_endpoint(self, context):
        """send_local is a send flagged as local."""
        await context.send_local(Outgoing)
        [record] = context.sent_messages
        assert record.is_local

    @pytest.mark.asyncio
    async def test_send_local_does_not_rewrite_earlier_send(self, context):
        """Reusing one options object for send then send_local keeps the first send remote."""
        options = SendOptions()
        await context.send(Outgoing(number=1), options=options)
        first = context.sent_messages[0]

        await context.send_local(Outgoing(number=2), options=options)

        remote, local = context.sent_messages
        assert remote is first
        assert not remote.is_local
        assert local.is_local
        assert remote.options is options
        assert local.options is options

    @pytest.mark.asyncio
    async def test_publish_and_reply(self, context):
        """Publish and reply produce their own record kinds."""
        await context.publish(Outgoing, options=PublishOptions())
        await context.reply(Outgoing2, options=ReplyOptions().route_reply_to("x"))
        assert [r.kind for r in context.records] == [OperationKind.PUBLISH, OperationKind.REPLY]
        assert context.replied_messages[0].options.destination == "x"
        assert context.published_messages[0].message_type is Outgoing

    def test_operations_return_completed_awaitable(self, context):
        """The record exists before the returned value is awaited."""
        result = context.send(Outgoing)
        assert isinstance(result, CompletedOperation)
        assert len(context.records) == 1

    @pytest.mark.asyncio
    async def test_completed_operation_can_be_awaited_twice(self, context):
        """Awaiting the signal again is harmless."""
        result = context.publish(Outgoing)
        await result
        await result
        assert len(context.published_messages) == 1

    def test_none_message_rejected(self, context):
        """A None message fails at the call site."""
        with pytest.raises(TypeError, match="got None"):
            context.send(None)

    def test_wrong_options_type_rejected(self, context):
        """Publish options cannot be passed to send."""
        with pytest.raises(TypeError, match="SendOptions"):
            context.send(Outgoing, options=PublishOptions())

    def test_non_callable_mutator_rejected(self, context):
        """A mutator must be callable."""
        with pytest.raises(TypeError, match="mutator"):
            context.publish(Outgoing, "not callable")

    def test_sequence_follows_emission_order(self, context):
        """Sequence numbers follow emission order across kinds."""
        context.send(Outgoing)
        context.publish(Outgoing2)
        context.forward_current_message_to("audit")
        assert [r.sequence for r in context.records] == [0, 1, 2]


class TestDefer:
    """Tests for deferred sends."""

    @pytest.mark.asyncio
    async def test_defer_with_delay(self, context, now):
        """A delay resolves against the recording clock."""
        await context.defer(Outgoing, timedelta(minutes=10))
        [record] = context.deferred_messages
        assert record.get_delivery_date() == now + timedelta(minutes=10)
        assert record.options.delivery_delay == timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_defer_until_date(self, context):
        """A date is recorded as given."""
        when = datetime(2030, 1, 1, tzinfo=UTC)
        await context.defer(Outgoing, when)
        assert context.deferred_messages[0].get_delivery_date() == when

    @pytest.mark.asyncio
    async def test_deferred_sends_are_sends(self, context):
        """Deferred sends also appear among sent messages."""
        await context.defer(Outgoing, timedelta(seconds=1))
        await context.send(Outgoing2)
        assert len(context.sent_messages) == 2
        assert len(context.deferred_messages) == 1

    def test_defer_with_invalid_when(self, context):
        """when must be a timedelta or a datetime."""
        with pytest.raises(TypeError, match="timedelta or a datetime"):
            context.defer(Outgoing, 10)

    def test_defer_with_contradictory_options(self, context):
        """Deferring options that already carry a date by a delay is contradictory."""
        options = SendOptions().do_not_deliver_before(datetime(2030, 1, 1, tzinfo=UTC))
        with pytest.raises(ConfigurationError):
            context.defer(Outgoing, timedelta(minutes=1), options=options)
        assert context.records == ()


class TestForwardAndControl:
    """Tests for forwards and control directives."""

    @pytest.mark.asyncio
    async def test_each_forward_recorded(self, context):
        """Forwarding to several destinations records each one in order."""
        await context.forward_current_message_to("dest1")
        await context.forward_current_message_to("dest2")
        assert context.forwarded_messages == ("dest1", "dest2")

    def test_empty_destination_rejected(self, context):
        """Empty destinations fail at the call site."""
        with pytest.raises(ValueError):
            context.forward_current_message_to("")

    def test_control_flags_default_false(self, context):
        """No directive has been issued on a fresh context."""
        assert not context.do_not_continue_dispatching_called
        assert not context.handle_current_message_later_called

    @pytest.mark.asyncio
    async def test_control_flags_are_idempotent(self, context):
        """Calling a directive twice keeps the flag set and records nothing."""
        context.do_not_continue_dispatching_current_message_to_handlers()
        context.do_not_continue_dispatching_current_message_to_handlers()
        await context.handle_current_message_later()
        await context.handle_current_message_later()
        assert context.do_not_continue_dispatching_called
        assert context.handle_current_message_later_called
        assert context.records == ()


class TestSnapshot:
    """Tests for the verification snapshot."""

    def test_records_after_snapshot_are_hidden(self, context, caplog):
        """Late operations are stored but not visible, and a warning is logged."""
        context.send(Outgoing)
        snapshot = context.take_snapshot()

        with caplog.at_level(logging.WARNING, logger="handlertest.context"):
            context.send(Outgoing2)

        assert len(snapshot) == 1
        assert [r.message_type for r in context.records] == [Outgoing]
        assert "recorded after the handler completed" in caplog.text

    def test_second_snapshot_keeps_first(self, context):
        """take_snapshot is stable once taken."""
        context.send(Outgoing)
        context.take_snapshot()
        context.send(Outgoing2)
        assert len(context.take_snapshot()) == 1

    def test_recording_is_logged_at_debug(self, context, caplog):
        """Each recorded operation is logged with structured extras."""
        with caplog.at_level(logging.DEBUG, logger="handlertest.context"):
            context.publish(Outgoing)
        [record] = [r for r in caplog.records if r.name == "handlertest.context"]
        assert record.operation == "publish"
        assert record.message_type == "Outgoing"
        assert record.sequence == 0


class TestConcurrency:
    """Tests for concurrent callers."""

    def test_threads_never_lose_records(self, context):
        """Concurrent sends from many threads are all recorded with unique sequences."""
        barrier = threading.Barrier(8)

        def worker(offset: int) -> None:
            barrier.wait()
            for i in range(100):
                context.send(Outgoing(number=offset * 100 + i))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        records = context.records
        assert len(records) == 800
        assert [r.sequence for r in records] == list(range(800))
        assert {r.message.number for r in records} == set(range(800))

    @pytest.mark.asyncio
    async def test_tasks_never_lose_records(self, context):
        """Concurrent tasks are recorded as a valid interleaving."""

        async def worker(n: int) -> None:
            await asyncio.sleep(0)
            await context.publish(Outgoing(number=n))

        await asyncio.gather(*(worker(n) for n in range(50)))
        assert sorted(r.message.number for r in context.published_messages) == list(range(50))
