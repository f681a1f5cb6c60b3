"""Core data models for the health assistant client."""

from .appointments import (
    AppointmentDraft,
    AppointmentPatch,
    AppointmentRecord,
    format_instant,
    to_instant,
)
from .bus import BusMessage, Topic
from .media import AudioPayload, ImageFile, RecordingState
from .messages import MessageEntry, Sender
from .tracing import TraceEvent

__all__ = [
    # Conversation
    "MessageEntry",
    "Sender",
    # Appointments
    "AppointmentRecord",
    "AppointmentDraft",
    "AppointmentPatch",
    "format_instant",
    "to_instant",
    # Media
    "AudioPayload",
    "ImageFile",
    "RecordingState",
    # Bus
    "BusMessage",
    "Topic",
    # Tracing
    "TraceEvent",
]
