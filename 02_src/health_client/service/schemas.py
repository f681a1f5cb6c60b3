"""Wire models for the remote health service."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..models import AppointmentRecord


class ChatReply(BaseModel):
    """Response of POST /chat."""

    response: str


class VoiceReply(BaseModel):
    """Response of POST /voice-to-text."""

    transcribed_text: str = Field(min_length=1)
    response: str


class ImageAnalysis(BaseModel):
    """Response of POST /analyze-image."""

    analysis: str = Field(min_length=1)


class AppointmentOut(BaseModel):
    """One element of GET /appointments/{user_id}."""

    id: str
    date_time: datetime
    purpose: str
    status: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("status", mode="before")
    @classmethod
    def _status_as_text(cls, value: Any) -> str:
        # Opaque display value, null shown as empty
        return "" if value is None else str(value)

    @field_validator("date_time")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from the service are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_record(self) -> AppointmentRecord:
        return AppointmentRecord(
            id=self.id,
            scheduled_at=self.date_time,
            purpose=self.purpose,
            status=self.status,
        )


class AppointmentIn(BaseModel):
    """Body of POST /appointments and PUT /appointments/{id}."""

    user_id: str
    date_time: str | None = None
    purpose: str | None = None
