"""Appointment-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ..errors import ValidationError

PURPOSE_REQUIRED = "Please enter a purpose for the appointment"
DRAFT_LEAD_TIME = timedelta(minutes=30)


def to_instant(value: datetime) -> datetime:
    """Convert local wall-clock input (naive = local time) to a UTC instant."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc)


def format_instant(value: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a ``Z`` suffix."""
    text = to_instant(value).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def _default_scheduled_at() -> datetime:
    return (datetime.now() + DRAFT_LEAD_TIME).replace(second=0, microsecond=0)


@dataclass(frozen=True)
class AppointmentRecord:
    """An appointment as persisted by the remote service."""

    id: str
    scheduled_at: datetime  # absolute instant
    purpose: str
    status: str  # opaque, defined by the service

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "scheduled_at": format_instant(self.scheduled_at),
            "purpose": self.purpose,
            "status": self.status,
        }


@dataclass
class AppointmentDraft:
    """Editable scratch state for the new-appointment form."""

    scheduled_at: datetime = field(default_factory=_default_scheduled_at)
    purpose: str = ""

    def validate(self) -> None:
        if not self.purpose.strip():
            raise ValidationError(PURPOSE_REQUIRED)

    def reset(self) -> None:
        self.scheduled_at = _default_scheduled_at()
        self.purpose = ""


@dataclass
class AppointmentPatch:
    """Fields to change on an existing appointment."""

    scheduled_at: datetime | None = None
    purpose: str | None = None

    def validate(self) -> None:
        if self.purpose is not None and not self.purpose.strip():
            raise ValidationError(PURPOSE_REQUIRED)

    @classmethod
    def from_record(cls, record: AppointmentRecord) -> "AppointmentPatch":
        return cls(scheduled_at=record.scheduled_at, purpose=record.purpose)
