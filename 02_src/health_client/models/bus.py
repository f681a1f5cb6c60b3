"""EventBus data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Topic(str, Enum):
    """EventBus topics, one per observable piece of client state."""

    CONVERSATION = "conversation"
    APPOINTMENTS = "appointments"
    RECORDING = "recording"
    STATUS = "status"


@dataclass
class BusMessage:
    """A state change published through the EventBus."""

    id: str
    topic: Topic
    payload: dict  # snapshot of the state behind the topic
    source: str  # component that published
    timestamp: datetime
