"""Audio recording module."""

from .devices import (
    MIC_UNAVAILABLE,
    ChunkSink,
    IAudioDevice,
    SoundDeviceMicrophone,
    select_input_device,
)
from .session import RecordingSessionManager, format_elapsed

__all__ = [
    "MIC_UNAVAILABLE",
    "ChunkSink",
    "IAudioDevice",
    "SoundDeviceMicrophone",
    "select_input_device",
    "RecordingSessionManager",
    "format_elapsed",
]
