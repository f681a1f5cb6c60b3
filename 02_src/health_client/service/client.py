"""HTTP client for the remote health assistant service."""

from datetime import datetime
from typing import Protocol, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from ..config import ClientConfig
from ..errors import FetchFailure, HealthClientError, TransferFailure
from ..logging_config import get_logger
from ..models import (
    AppointmentPatch,
    AppointmentRecord,
    AudioPayload,
    ImageFile,
    format_instant,
)
from .schemas import (
    AppointmentIn,
    AppointmentOut,
    ChatReply,
    ImageAnalysis,
    VoiceReply,
)

logger = get_logger(__name__)

IMAGE_PROMPT = "What do you see in this medical image?"

ReplyT = TypeVar("ReplyT", bound=BaseModel)

_appointment_list = TypeAdapter(list[AppointmentOut])


class IHealthService(Protocol):
    """Abstraction over the remote health assistant API."""

    async def chat(self, message: str) -> ChatReply:
        """Send a text message, return the assistant reply."""
        ...

    async def voice_to_text(self, payload: AudioPayload) -> VoiceReply:
        """Upload a recording, return transcription and reply."""
        ...

    async def analyze_image(
        self, image: ImageFile, prompt: str = IMAGE_PROMPT
    ) -> ImageAnalysis:
        """Upload an image, return its analysis."""
        ...

    async def list_appointments(self) -> list[AppointmentRecord]:
        """Fetch every appointment of the configured user."""
        ...

    async def create_appointment(self, scheduled_at: datetime, purpose: str) -> None:
        """Create an appointment."""
        ...

    async def update_appointment(
        self, appointment_id: str, patch: AppointmentPatch
    ) -> None:
        """Update an appointment."""
        ...

    async def delete_appointment(self, appointment_id: str) -> None:
        """Delete an appointment."""
        ...

    async def aclose(self) -> None:
        """Release the underlying connection pool."""
        ...


class HealthServiceClient:
    """httpx-backed client; one method per remote operation.

    Chat, voice and image calls raise ``TransferFailure``; appointment calls
    raise ``FetchFailure``. Any transport error, non-2xx status, undecodable
    body or missing field is reported through those two types only.
    """

    def __init__(
        self,
        config: ClientConfig,
        client: httpx.AsyncClient | None = None,
    ):
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.http_timeout,
        )

    @property
    def user_id(self) -> str:
        return self._config.user_id

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def chat(self, message: str) -> ChatReply:
        response = await self._request(
            "POST",
            "/chat",
            TransferFailure,
            json={"user_id": self.user_id, "message": message},
        )
        return self._parse(response, ChatReply, TransferFailure)

    async def voice_to_text(self, payload: AudioPayload) -> VoiceReply:
        response = await self._request(
            "POST",
            "/voice-to-text",
            TransferFailure,
            params={"user_id": self.user_id},
            files={
                "audio_file": (payload.filename, payload.data, payload.content_type)
            },
        )
        return self._parse(response, VoiceReply, TransferFailure)

    async def analyze_image(
        self, image: ImageFile, prompt: str = IMAGE_PROMPT
    ) -> ImageAnalysis:
        response = await self._request(
            "POST",
            "/analyze-image",
            TransferFailure,
            params={"user_id": self.user_id},
            files={"image_file": (image.filename, image.data, image.content_type)},
            data={"prompt": prompt},
        )
        return self._parse(response, ImageAnalysis, TransferFailure)

    async def list_appointments(self) -> list[AppointmentRecord]:
        response = await self._request(
            "GET", f"/appointments/{self.user_id}", FetchFailure
        )
        try:
            items = _appointment_list.validate_python(response.json())
        except (ValueError, SchemaError) as e:
            raise FetchFailure(f"Unexpected response body: {e}") from e
        return [item.to_record() for item in items]

    async def create_appointment(self, scheduled_at: datetime, purpose: str) -> None:
        body = AppointmentIn(
            user_id=self.user_id,
            date_time=format_instant(scheduled_at),
            purpose=purpose,
        )
        await self._request(
            "POST", "/appointments", FetchFailure, json=body.model_dump()
        )

    async def update_appointment(
        self, appointment_id: str, patch: AppointmentPatch
    ) -> None:
        body = AppointmentIn(
            user_id=self.user_id,
            date_time=format_instant(patch.scheduled_at) if patch.scheduled_at else None,
            purpose=patch.purpose,
        )
        await self._request(
            "PUT",
            f"/appointments/{appointment_id}",
            FetchFailure,
            json=body.model_dump(exclude_none=True),
        )

    async def delete_appointment(self, appointment_id: str) -> None:
        await self._request(
            "DELETE",
            f"/appointments/{appointment_id}",
            FetchFailure,
            params={"user_id": self.user_id},
        )

    async def _request(
        self,
        method: str,
        path: str,
        error_cls: type[HealthClientError],
        **kwargs,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise error_cls(f"HTTP error: {e}") from e
        return response

    @staticmethod
    def _parse(
        response: httpx.Response,
        model: type[ReplyT],
        error_cls: type[HealthClientError],
    ) -> ReplyT:
        try:
            return model.model_validate(response.json())
        except (ValueError, SchemaError) as e:
            raise error_cls(f"Unexpected response body: {e}") from e
