"""Audio input devices."""

import asyncio
import io
import wave
from typing import Any, Callable, Dict, List, Optional, Protocol

from ..config import AudioSettings
from ..errors import PermissionDenied
from ..logging_config import get_logger

logger = get_logger(__name__)

MIC_UNAVAILABLE = (
    "Unable to access microphone. "
    "Please ensure you have granted microphone permissions."
)

ChunkSink = Callable[[bytes], None]


class IAudioDevice(Protocol):
    """Capture capability: delivers ordered binary chunks to a sink."""

    filename: str
    content_type: str

    async def open(self, sink: ChunkSink) -> None:
        """Acquire the input and start delivering chunks.

        Raises PermissionDenied when access is refused or no input exists.
        """
        ...

    async def close(self) -> None:
        """Stop capture and release the input. No sink calls after return."""
        ...

    def encode(self, data: bytes) -> bytes:
        """Wrap the concatenated chunks into the upload container."""
        ...


def select_input_device(
    candidates: List[Dict[str, Any]],
    prefer_name: Optional[str] = None,
) -> Dict[str, Any]:
    inputs = [d for d in candidates if d.get("max_input_channels", 0) > 0]
    if not inputs:
        raise PermissionDenied(MIC_UNAVAILABLE)
    if prefer_name:
        preferred = [
            d for d in inputs if prefer_name.lower() in d.get("name", "").lower()
        ]
        if preferred:
            return preferred[0]
        logger.warning(
            "No input device matches %r, using %s",
            prefer_name,
            inputs[0].get("name"),
        )
    return inputs[0]


class SoundDeviceMicrophone:
    """Microphone capture through PortAudio (``sounddevice``).

    Chunks are raw 16-bit PCM; ``encode`` wraps them into a WAV container.
    The PortAudio callback thread only hands chunks over to the event loop.
    """

    filename = "recording.wav"
    content_type = "audio/wav"

    def __init__(self, settings: AudioSettings):
        self._settings = settings
        self._stream = None

    async def open(self, sink: ChunkSink) -> None:
        try:
            import sounddevice as sd
        except Exception as exc:  # pragma: no cover - environment-dependent
            raise PermissionDenied(MIC_UNAVAILABLE) from exc

        loop = asyncio.get_running_loop()

        def _callback(indata, _frames, _time, status):
            if status:
                logger.warning("Input stream status: %s", status)
            loop.call_soon_threadsafe(sink, bytes(indata))

        try:
            device = select_input_device(
                list(sd.query_devices()), prefer_name=self._settings.device_name
            )
            stream = sd.RawInputStream(
                samplerate=self._settings.sample_rate_hz,
                channels=self._settings.channels,
                dtype="int16",
                device=device.get("index"),
                callback=_callback,
            )
        except (sd.PortAudioError, ValueError) as exc:
            raise PermissionDenied(MIC_UNAVAILABLE) from exc

        try:
            stream.start()
        except sd.PortAudioError as exc:
            stream.close()
            raise PermissionDenied(MIC_UNAVAILABLE) from exc

        self._stream = stream
        logger.info("Microphone opened: %s", device.get("name"))

    async def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        # stop() blocks until the last callback has returned
        await asyncio.to_thread(self._shutdown, stream)

    @staticmethod
    def _shutdown(stream) -> None:
        try:
            stream.stop()
        finally:
            stream.close()

    def encode(self, data: bytes) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as handle:
            handle.setnchannels(self._settings.channels)
            handle.setsampwidth(2)
            handle.setframerate(self._settings.sample_rate_hz)
            handle.writeframes(data)
        return buffer.getvalue()
