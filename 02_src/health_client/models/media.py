"""Recording and media data models."""

import mimetypes
from dataclasses import dataclass
from enum import Enum


class RecordingState(str, Enum):
    """Lifecycle of a single audio capture session."""

    IDLE = "idle"
    CAPTURING = "capturing"
    FINALIZING = "finalizing"


@dataclass(frozen=True)
class AudioPayload:
    """Finalized recording, handed off by value."""

    data: bytes
    filename: str = "recording.wav"
    content_type: str = "audio/wav"
    duration_seconds: int = 0


@dataclass(frozen=True)
class ImageFile:
    """A locally selected image waiting for upload."""

    filename: str
    data: bytes
    content_type: str = ""

    def __post_init__(self) -> None:
        if not self.content_type:
            guessed, _ = mimetypes.guess_type(self.filename)
            object.__setattr__(
                self, "content_type", guessed or "application/octet-stream"
            )
