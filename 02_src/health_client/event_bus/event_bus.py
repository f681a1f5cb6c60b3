"""EventBus implementation for pub/sub of state snapshots."""

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, Protocol

from ..logging_config import get_logger
from ..models import BusMessage, Topic

logger = get_logger(__name__)


TopicHandler = Callable[[BusMessage], Awaitable[None]]


class IEventBus(Protocol):
    """In-memory pub/sub for exchanging BusMessages."""

    def subscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        ...

    async def publish(self, message: BusMessage) -> None:
        """Publish BusMessage to every subscriber of its topic."""
        ...


class EventBus:
    """In-memory pub/sub event bus."""

    def __init__(self):
        self._subscribers: dict[Topic, list[TopicHandler]] = {
            topic: [] for topic in Topic
        }

    def subscribe(self, topic: Topic, handler: TopicHandler) -> None:
        """Subscribe a handler to a topic."""
        self._subscribers[topic].append(handler)

    async def publish(self, message: BusMessage) -> None:
        """Publish BusMessage to every subscriber of its topic."""
        if not message.id:
            message.id = str(uuid.uuid4())

        handlers = self._subscribers.get(message.topic, [])
        if not handlers:
            return

        results = await asyncio.gather(
            *[handler(message) for handler in handlers],
            return_exceptions=True,
        )

        # A failing observer must not break the publisher
        for i, result in enumerate(results):
            if isinstance(result, Exception):
                logger.error("Error in %s handler %s: %s", message.topic.value, i, result)

    async def emit(self, topic: Topic, payload: dict, source: str) -> None:
        """Build and publish a BusMessage."""
        await self.publish(
            BusMessage(
                id=str(uuid.uuid4()),
                topic=topic,
                payload=payload,
                source=source,
                timestamp=datetime.now(timezone.utc),
            )
        )
