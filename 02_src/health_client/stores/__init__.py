"""State stores owned by the Orchestrator."""

from .appointments import AppointmentStore
from .conversation import GREETING, ConversationStore, IConversationStore
from .status import StatusBoard, StatusState

__all__ = [
    "AppointmentStore",
    "ConversationStore",
    "IConversationStore",
    "GREETING",
    "StatusBoard",
    "StatusState",
]
