"""Tests for EventBus."""

from datetime import datetime, timezone

import pytest

from health_client.models import BusMessage, Topic


class TestEventBusSubscribe:
    """Tests for EventBus subscription."""

    def test_every_topic_registered(self, event_bus):
        """Test all topics start with an empty handler list."""
        for topic in Topic:
            assert event_bus._subscribers[topic] == []

    def test_subscribe_multiple_handlers(self, event_bus):
        """Test subscribing multiple handlers to same topic."""

        async def handler1(msg: BusMessage):
            pass

        async def handler2(msg: BusMessage):
            pass

        event_bus.subscribe(Topic.CONVERSATION, handler1)
        event_bus.subscribe(Topic.CONVERSATION, handler2)

        assert len(event_bus._subscribers[Topic.CONVERSATION]) == 2


class TestEventBusPublish:
    """Tests for EventBus publishing."""

    @pytest.mark.asyncio
    async def test_publish_multiple_subscribers(self, event_bus):
        """Test publishing to multiple subscribers in subscription order."""
        calls = []

        async def handler1(msg: BusMessage):
            calls.append(("h1", msg))

        async def handler2(msg: BusMessage):
            calls.append(("h2", msg))

        event_bus.subscribe(Topic.STATUS, handler1)
        event_bus.subscribe(Topic.STATUS, handler2)

        msg = BusMessage(
            id="bus1",
            topic=Topic.STATUS,
            payload={"banner": None},
            source="test",
            timestamp=datetime.now(timezone.utc),
        )
        await event_bus.publish(msg)

        assert [name for name, _ in calls] == ["h1", "h2"]
        assert calls[0][1].payload == {"banner": None}

    @pytest.mark.asyncio
    async def test_publish_different_topics(self, event_bus):
        """Test that subscribers only receive messages from their topic."""
        conversation_calls = []
        appointment_calls = []

        async def conversation_handler(msg: BusMessage):
            conversation_calls.append(msg)

        async def appointment_handler(msg: BusMessage):
            appointment_calls.append(msg)

        event_bus.subscribe(Topic.CONVERSATION, conversation_handler)
        event_bus.subscribe(Topic.APPOINTMENTS, appointment_handler)

        await event_bus.emit(Topic.CONVERSATION, {"entries": []}, source="test")

        assert len(conversation_calls) == 1
        assert len(appointment_calls) == 0

    @pytest.mark.asyncio
    async def test_emit_fills_envelope(self, event_bus):
        """Test emit() generates id, timestamp and source."""
        received = []

        async def handler(msg: BusMessage):
            received.append(msg)

        event_bus.subscribe(Topic.RECORDING, handler)
        await event_bus.emit(Topic.RECORDING, {"state": "idle"}, source="recorder")

        msg = received[0]
        assert msg.id
        assert msg.source == "recorder"
        assert msg.topic is Topic.RECORDING
        assert msg.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_publish_error_in_handler(self, event_bus):
        """Test that errors in one handler don't affect others."""
        calls = []

        async def failing_handler(msg: BusMessage):
            calls.append("failing")
            raise RuntimeError("Test error")

        async def normal_handler(msg: BusMessage):
            calls.append("normal")

        event_bus.subscribe(Topic.CONVERSATION, failing_handler)
        event_bus.subscribe(Topic.CONVERSATION, normal_handler)

        # Should not raise error
        await event_bus.emit(Topic.CONVERSATION, {}, source="test")

        assert "failing" in calls
        assert "normal" in calls
