"""Recording session manager: one capture at a time, one payload per capture."""

import asyncio
import itertools
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from ..errors import PermissionDenied, RecordingFailure
from ..logging_config import get_logger
from ..models import AudioPayload, RecordingState
from .devices import IAudioDevice

logger = get_logger(__name__)

RECORDING_FAILED = "Recording failed. Please try again or type your message instead."

CompletionCallback = Callable[[AudioPayload], None]
TickListener = Callable[[str], Awaitable[None]]

_session_ids = itertools.count(1)


def format_elapsed(seconds: float) -> str:
    """Render elapsed seconds as M:SS."""
    whole = max(int(seconds), 0)
    return f"{whole // 60}:{whole % 60:02d}"


@dataclass
class _Session:
    session_id: int
    started_at: float
    chunks: list[bytes] = field(default_factory=list)
    accepting: bool = True


class RecordingSessionManager:
    """State machine Idle -> Capturing -> Finalizing -> Idle.

    The completion callback runs exactly once per session that reaches
    ``stop()``: after the device was released and after every chunk the
    device delivered for that session was buffered.
    """

    def __init__(
        self,
        device: IAudioDevice,
        on_complete: CompletionCallback | None = None,
        on_tick: TickListener | None = None,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float = 1.0,
    ):
        self._device = device
        self._on_complete = on_complete
        self._on_tick = on_tick
        self._clock = clock
        self._tick_interval = tick_interval
        self._state = RecordingState.IDLE
        self._starting = False
        self._session: _Session | None = None
        self._timer: asyncio.Task | None = None
        self._elapsed_text = format_elapsed(0)
        # Set whenever the state is Idle
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def elapsed_text(self) -> str:
        return self._elapsed_text

    async def wait_until_idle(self) -> None:
        """Wait until no session is capturing or finalizing."""
        await self._idle.wait()

    async def start(self) -> bool:
        """Open the device and begin capturing.

        Returns False when a session is already active. Raises
        PermissionDenied when the microphone cannot be acquired; no session
        exists afterwards.
        """
        if self._starting or self._state is not RecordingState.IDLE:
            logger.info(
                "Recording start rejected: session already %s", self._state.value
            )
            return False

        session = _Session(session_id=next(_session_ids), started_at=self._clock())
        self._starting = True
        try:
            await self._device.open(lambda chunk: self._on_chunk(session, chunk))
        except PermissionDenied as e:
            logger.warning("Microphone unavailable: %s", e.__cause__ or e)
            session.accepting = False
            raise
        finally:
            self._starting = False

        self._session = session
        self._idle.clear()
        self._state = RecordingState.CAPTURING
        self._elapsed_text = format_elapsed(0)
        self._timer = asyncio.create_task(self._run_timer(session))
        logger.info("Recording session %s started", session.session_id)
        return True

    async def stop(self) -> AudioPayload | None:
        """Finalize the active session and hand its payload off.

        No-op (returns None) unless a session is capturing.
        """
        if self._state is not RecordingState.CAPTURING or self._session is None:
            return None

        session = self._session
        self._state = RecordingState.FINALIZING
        await self._cancel_timer()

        try:
            await self._device.close()
            # Let chunk handoffs already queued by the device thread run
            await asyncio.sleep(0)
            session.accepting = False
            data = self._device.encode(b"".join(session.chunks))
        except Exception as e:
            logger.error(
                "Finalizing recording session %s failed: %s",
                session.session_id,
                e,
                exc_info=True,
            )
            raise RecordingFailure(RECORDING_FAILED) from e
        finally:
            session.accepting = False
            self._session = None
            self._state = RecordingState.IDLE
            self._elapsed_text = format_elapsed(0)
            self._idle.set()

        payload = AudioPayload(
            data=data,
            filename=self._device.filename,
            content_type=self._device.content_type,
            duration_seconds=int(self._clock() - session.started_at),
        )
        logger.info(
            "Recording session %s finalized: %d chunks, %d bytes",
            session.session_id,
            len(session.chunks),
            len(payload.data),
        )
        if self._on_complete is not None:
            self._on_complete(payload)
        return payload

    def _on_chunk(self, session: _Session, chunk: bytes) -> None:
        if not session.accepting:
            logger.debug("Dropping late chunk for session %s", session.session_id)
            return
        session.chunks.append(chunk)

    async def _run_timer(self, session: _Session) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self._elapsed_text = format_elapsed(self._clock() - session.started_at)
            if self._on_tick is not None:
                try:
                    await self._on_tick(self._elapsed_text)
                except Exception as e:
                    logger.error("Recording tick listener failed: %s", e)

    async def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None:
            return
        timer.cancel()
        try:
            await timer
        except asyncio.CancelledError:
            pass
