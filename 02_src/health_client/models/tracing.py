"""Tracing and observability data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TraceEvent:
    """A single observability event for the debug surface."""

    id: str
    event_type: str  # e.g. "transfer_started", "appointments_refreshed"
    actor: str  # who created this event
    data: dict  # full self-contained data for display
    timestamp: datetime
