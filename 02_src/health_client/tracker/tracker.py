"""Tracker implementation for creating TraceEvents."""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Protocol

from ..event_bus import IEventBus
from ..models import BusMessage, Topic, TraceEvent


class ITracker(Protocol):
    """Creating TraceEvents. Two channels: EventBus subscription + direct calls."""

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and keep it in the ring buffer."""
        ...

    def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, oldest first."""
        ...


class Tracker:
    """Keeps the most recent TraceEvents in memory."""

    def __init__(self, event_bus: IEventBus, max_events: int = 1000):
        self._event_bus = event_bus
        self._events: deque[TraceEvent] = deque(maxlen=max_events)

    async def start(self) -> None:
        """Subscribe to all EventBus topics."""
        for topic in Topic:
            self._event_bus.subscribe(topic, self._handle_bus_message)

    async def _handle_bus_message(self, bus_message: BusMessage) -> None:
        """Handle incoming BusMessage from EventBus."""
        payload_summary = str(bus_message.payload)[:100]

        await self.track(
            event_type="state_published",
            actor=bus_message.source,
            data={
                "topic": bus_message.topic.value,
                "payload_summary": payload_summary,
            },
        )

    async def track(self, event_type: str, actor: str, data: dict) -> None:
        """Create TraceEvent and keep it in the ring buffer."""
        self._events.append(
            TraceEvent(
                id=str(uuid.uuid4()),
                event_type=event_type,
                actor=actor,
                data=data,
                timestamp=datetime.now(timezone.utc),
            )
        )

    def get_events(
        self,
        after: datetime | None = None,
        event_types: list[str] | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[TraceEvent]:
        """Get trace events with optional filters, oldest first."""
        events = [
            e
            for e in self._events
            if (after is None or e.timestamp > after)
            and (not event_types or e.event_type in event_types)
            and (actor is None or e.actor == actor)
        ]
        return events[-limit:]
