"""Transfer pipeline: submit, await one result, reconcile into the log."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Sequence

from ..logging_config import get_logger
from ..models import MessageEntry
from ..stores import IConversationStore
from ..tracker import ITracker

logger = get_logger(__name__)


class TransferKind(str, Enum):
    """What the user submitted."""

    TEXT = "text"
    VOICE = "voice"
    IMAGE = "image"


@dataclass(frozen=True)
class Transfer:
    """One submission to the remote service.

    ``send`` issues exactly one request and returns the validated reply;
    ``map_result`` turns that reply into the entries to append.
    """

    kind: TransferKind
    send: Callable[[], Awaitable[Any]]
    map_result: Callable[[Any], Sequence[MessageEntry]]
    fallback: str
    placeholder: str | None = None  # voice and image
    echo: MessageEntry | None = None  # text: the user's own message


@dataclass(frozen=True)
class TransferOutcome:
    """How a transfer settled."""

    kind: TransferKind
    ok: bool
    entries: tuple[MessageEntry, ...]
    error: str | None = None


class TransferPipeline:
    """Runs transfers against the conversation log.

    Any number of transfers may be in flight. Each one removes only its own
    placeholder, in the same store mutation that appends its result. When the
    last in-flight transfer settles, stray processing entries are swept.
    Failures never propagate: they become one fallback entry.
    """

    def __init__(self, conversation: IConversationStore, tracker: ITracker):
        self._conversation = conversation
        self._tracker = tracker
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def run(self, transfer: Transfer) -> TransferOutcome:
        self._in_flight += 1
        try:
            return await self._run(transfer)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                await self._conversation.remove_processing_placeholders()

    async def _run(self, transfer: Transfer) -> TransferOutcome:
        kind = transfer.kind.value

        if transfer.echo is not None:
            await self._conversation.append(transfer.echo)

        placeholder = None
        if transfer.placeholder is not None:
            placeholder = MessageEntry.placeholder(transfer.placeholder)
            await self._conversation.append(placeholder)

        await self._tracker.track(
            "transfer_started", "transfer_pipeline", {"kind": kind}
        )

        try:
            reply = await transfer.send()
            entries = tuple(transfer.map_result(reply))
        except Exception as e:
            logger.error(
                "%s transfer failed: %s",
                kind,
                e,
                exc_info=True,
                extra={"context": {"kind": kind}},
            )
            fallback = MessageEntry.assistant(transfer.fallback)
            await self._settle(placeholder, (fallback,))
            await self._tracker.track(
                "transfer_failed", "transfer_pipeline", {"kind": kind, "error": str(e)}
            )
            return TransferOutcome(
                kind=transfer.kind, ok=False, entries=(fallback,), error=str(e)
            )

        await self._settle(placeholder, entries)
        await self._tracker.track(
            "transfer_succeeded",
            "transfer_pipeline",
            {"kind": kind, "entries": len(entries)},
        )
        return TransferOutcome(kind=transfer.kind, ok=True, entries=entries)

    async def _settle(
        self,
        placeholder: MessageEntry | None,
        entries: Sequence[MessageEntry],
    ) -> None:
        if placeholder is None:
            await self._conversation.append_many(entries)
        else:
            await self._conversation.replace(placeholder.entry_id, entries)
