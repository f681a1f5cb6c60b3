"""Conversation state store."""

from typing import Iterable, Protocol

from ..event_bus import IEventBus
from ..models import MessageEntry, Topic

GREETING = "Hello! I'm your health assistant. How can I help you today?"


class IConversationStore(Protocol):
    """Ordered log of conversation entries; append/remove only."""

    def snapshot(self) -> tuple[MessageEntry, ...]:
        """Full ordered log."""
        ...

    async def append(self, entry: MessageEntry) -> None:
        """Add one entry at the end."""
        ...

    async def append_many(self, entries: Iterable[MessageEntry]) -> None:
        """Add several entries at the end as one change."""
        ...

    async def replace(self, entry_id: str, entries: Iterable[MessageEntry]) -> None:
        """Remove one entry and append others as one change."""
        ...

    async def remove_processing_placeholders(self) -> None:
        """Remove every processing entry."""
        ...


class ConversationStore:
    """Single-writer conversation log.

    Every mutation is applied in full before the new snapshot is published,
    so observers never see half of a multi-entry change.
    """

    def __init__(
        self,
        event_bus: IEventBus,
        initial: Iterable[MessageEntry] = (),
    ):
        self._event_bus = event_bus
        self._entries: list[MessageEntry] = list(initial)

    def snapshot(self) -> tuple[MessageEntry, ...]:
        return tuple(self._entries)

    def processing_count(self) -> int:
        return sum(1 for entry in self._entries if entry.is_processing)

    async def append(self, entry: MessageEntry) -> None:
        self._entries.append(entry)
        await self._publish()

    async def append_many(self, entries: Iterable[MessageEntry]) -> None:
        self._entries.extend(entries)
        await self._publish()

    async def remove(self, entry_id: str) -> None:
        await self.replace(entry_id, ())

    async def replace(self, entry_id: str, entries: Iterable[MessageEntry]) -> None:
        kept = [entry for entry in self._entries if entry.entry_id != entry_id]
        kept.extend(entries)
        self._entries = kept
        await self._publish()

    async def remove_processing_placeholders(self) -> None:
        if not self.processing_count():
            return
        self._entries = [entry for entry in self._entries if not entry.is_processing]
        await self._publish()

    async def _publish(self) -> None:
        await self._event_bus.emit(
            Topic.CONVERSATION,
            {"entries": [entry.to_dict() for entry in self._entries]},
            source="conversation_store",
        )
