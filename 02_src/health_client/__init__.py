"""Health assistant client."""

from .config import AudioSettings, ClientConfig
from .errors import (
    FetchFailure,
    HealthClientError,
    PermissionDenied,
    RecordingFailure,
    TransferFailure,
    ValidationError,
)
from .event_bus import EventBus, IEventBus
from .models import (
    AppointmentDraft,
    AppointmentPatch,
    AppointmentRecord,
    AudioPayload,
    BusMessage,
    ImageFile,
    MessageEntry,
    RecordingState,
    Sender,
    Topic,
    TraceEvent,
)
from .orchestrator import IOrchestrator, Orchestrator
from .recording import IAudioDevice, RecordingSessionManager, SoundDeviceMicrophone
from .service import HealthServiceClient, IHealthService
from .stores import AppointmentStore, ConversationStore, StatusBoard
from .tracker import ITracker, Tracker
from .transfer import Transfer, TransferKind, TransferOutcome, TransferPipeline

__all__ = [
    # Orchestrator
    "Orchestrator",
    "IOrchestrator",
    # Config
    "ClientConfig",
    "AudioSettings",
    # Errors
    "HealthClientError",
    "PermissionDenied",
    "TransferFailure",
    "ValidationError",
    "FetchFailure",
    "RecordingFailure",
    # Models
    "MessageEntry",
    "Sender",
    "AppointmentRecord",
    "AppointmentDraft",
    "AppointmentPatch",
    "AudioPayload",
    "ImageFile",
    "RecordingState",
    "BusMessage",
    "Topic",
    "TraceEvent",
    # Components
    "IEventBus",
    "EventBus",
    "ITracker",
    "Tracker",
    "IHealthService",
    "HealthServiceClient",
    "ConversationStore",
    "AppointmentStore",
    "StatusBoard",
    "Transfer",
    "TransferKind",
    "TransferOutcome",
    "TransferPipeline",
    "IAudioDevice",
    "SoundDeviceMicrophone",
    "RecordingSessionManager",
]
