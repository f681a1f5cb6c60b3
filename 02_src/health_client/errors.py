"""Error taxonomy for the health assistant client.

Every error carries a user-facing ``message``. None of them escapes an
Orchestrator operation: each is recovered where it is detected and turned
into banner text, inline status text, or a fallback chat entry.
"""


class HealthClientError(Exception):
    """Base class for client errors with a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDenied(HealthClientError):
    """Microphone access refused, or no audio input available."""


class TransferFailure(HealthClientError):
    """Chat, voice or image transfer failed (network, status or body)."""


class ValidationError(HealthClientError):
    """Local input rejected before any network call."""


class FetchFailure(HealthClientError):
    """Appointment list or appointment mutation failed."""


class RecordingFailure(HealthClientError):
    """Capture stopped but no usable payload could be produced."""
