"""Orchestrator: wires user actions to recording, transfers and stores."""

import asyncio
from datetime import datetime
from typing import Any, Coroutine, Protocol

from .config import ClientConfig
from .errors import HealthClientError, PermissionDenied, ValidationError
from .event_bus import EventBus
from .logging_config import get_logger
from .models import (
    AppointmentDraft,
    AppointmentPatch,
    AudioPayload,
    ImageFile,
    MessageEntry,
    RecordingState,
    Topic,
    format_instant,
)
from .recording import IAudioDevice, RecordingSessionManager, SoundDeviceMicrophone
from .service import HealthServiceClient, IHealthService
from .stores import GREETING, AppointmentStore, ConversationStore, StatusBoard
from .tracker import ITracker, Tracker
from .transfer import (
    TransferOutcome,
    TransferPipeline,
    image_transfer,
    text_transfer,
    voice_transfer,
)

logger = get_logger(__name__)

NO_FILE_SELECTED = "Please select an image file."
UPLOADING = "Uploading..."
UPLOAD_SUCCEEDED = "Image uploaded and analyzed successfully!"
UPLOAD_FAILED = "Error uploading image. Please ensure the API server is running."
APPOINTMENT_CREATED = "Appointment created successfully"
APPOINTMENT_UPDATED = "Appointment updated successfully"
APPOINTMENT_DELETED = "Appointment deleted"


class IOrchestrator(Protocol):
    """User-facing operations of the client."""

    @property
    def tracker(self) -> ITracker:
        """Trace events for the debug surface."""
        ...

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Stop capture, let transfers settle, close the HTTP client."""
        ...

    async def send_text(self, text: str) -> TransferOutcome | None:
        """Send a chat message."""
        ...

    async def start_recording(self) -> bool:
        """Begin microphone capture."""
        ...

    async def stop_recording(self) -> bool:
        """Finish capture and hand the recording to a voice transfer."""
        ...

    async def toggle_recording(self) -> bool:
        """Start capture when idle, stop it when capturing."""
        ...

    async def select_image(
        self, filename: str, data: bytes, content_type: str = ""
    ) -> ImageFile:
        """Remember the image to upload."""
        ...

    async def upload_image(self) -> TransferOutcome | None:
        """Send the selected image for analysis."""
        ...

    async def refresh_appointments(self) -> bool:
        """Re-fetch the appointment list."""
        ...

    async def update_draft(
        self,
        scheduled_at: datetime | None = None,
        purpose: str | None = None,
    ) -> AppointmentDraft:
        """Edit the new-appointment form."""
        ...

    async def submit_appointment(self) -> bool:
        """Create an appointment from the draft."""
        ...

    def begin_edit(self, appointment_id: str) -> AppointmentPatch | None:
        """Open the edit form for a known appointment."""
        ...

    def cancel_edit(self) -> None:
        """Close the edit form."""
        ...

    async def save_edit(self, patch: AppointmentPatch | None = None) -> bool:
        """Apply the edit form."""
        ...

    async def delete_appointment(self, appointment_id: str) -> bool:
        """Delete after the user confirmed."""
        ...

    async def dismiss_banner(self) -> None:
        """Hide the diagnostic banner."""
        ...

    def snapshot(self) -> dict:
        """Everything the render layer shows."""
        ...


class Orchestrator:
    """Single writer of the conversation, appointment and status state."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        service: IHealthService | None = None,
        device: IAudioDevice | None = None,
    ):
        self._config = config or ClientConfig.from_env()
        self._injected_service = service
        self._injected_device = device

        # Components (will be initialized in start())
        self._event_bus: EventBus | None = None
        self._tracker: Tracker | None = None
        self._service: IHealthService | None = None
        self._conversation: ConversationStore | None = None
        self._appointments: AppointmentStore | None = None
        self._status: StatusBoard | None = None
        self._pipeline: TransferPipeline | None = None
        self._recording: RecordingSessionManager | None = None

        # Transfers run to completion even if nobody awaits them
        self._tasks: set[asyncio.Task] = set()
        self._selected_image: ImageFile | None = None
        self._draft = AppointmentDraft()
        self._editing: tuple[str, AppointmentPatch] | None = None

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting orchestrator")

        # 1. EventBus (no dependencies)
        self._event_bus = EventBus()

        # 2. Tracker (depends on EventBus)
        self._tracker = Tracker(self._event_bus)
        await self._tracker.start()

        # 3. Remote service client
        self._service = self._injected_service or HealthServiceClient(self._config)
        logger.info("Health service client ready for %s", self._config.api_url)

        # 4. Stores (depend on EventBus, service, tracker)
        self._conversation = ConversationStore(
            self._event_bus, [MessageEntry.assistant(GREETING)]
        )
        self._appointments = AppointmentStore(
            self._service, self._event_bus, self._tracker
        )
        self._status = StatusBoard(self._event_bus)

        # 5. Transfer pipeline (depends on conversation store)
        self._pipeline = TransferPipeline(self._conversation, self._tracker)

        # 6. Recording (depends on device)
        device = self._injected_device or SoundDeviceMicrophone(self._config.audio)
        self._recording = RecordingSessionManager(
            device,
            on_complete=self._on_recording_complete,
            on_tick=self._publish_recording,
        )
        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Stop capture, let transfers settle, close the HTTP client."""
        logger.info("Stopping orchestrator")
        if self._recording:
            if self._recording.state is RecordingState.CAPTURING:
                await self.stop_recording()
            # A stop already in progress spawns its voice transfer on return
            await self._recording.wait_until_idle()
        await self.wait_for_transfers()
        if self._service and self._injected_service is None:
            await self._service.aclose()
            logger.info("Health service client closed")

    async def wait_for_transfers(self) -> None:
        """Wait until every spawned transfer has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # Conversation

    async def send_text(self, text: str) -> TransferOutcome | None:
        if not text.strip():
            return None
        return await self.pipeline.run(text_transfer(self.service, text))

    async def start_recording(self) -> bool:
        try:
            started = await self.recording.start()
        except PermissionDenied as e:
            await self.status.set_banner(e.message)
            return False
        await self._publish_recording(self.recording.elapsed_text)
        return started

    async def stop_recording(self) -> bool:
        try:
            payload = await self.recording.stop()
        except HealthClientError as e:
            await self.status.set_banner(e.message)
            payload = None
        await self._publish_recording(self.recording.elapsed_text)
        return payload is not None

    async def toggle_recording(self) -> bool:
        """Start capture when idle, stop it when capturing."""
        if self.recording.state is RecordingState.CAPTURING:
            return await self.stop_recording()
        return await self.start_recording()

    async def select_image(
        self, filename: str, data: bytes, content_type: str = ""
    ) -> ImageFile:
        self._selected_image = ImageFile(
            filename=filename, data=data, content_type=content_type
        )
        await self.status.set_upload_status("")
        return self._selected_image

    async def upload_image(self) -> TransferOutcome | None:
        try:
            image = self._require_image()
        except ValidationError as e:
            await self.status.set_upload_status(e.message)
            return None

        await self.status.set_upload_status(UPLOADING)
        outcome = await self.pipeline.run(image_transfer(self.service, image))
        await self.status.set_upload_status(
            UPLOAD_SUCCEEDED if outcome.ok else UPLOAD_FAILED
        )
        return outcome

    # Appointments

    async def show_appointments(self) -> bool:
        """The appointments view was opened."""
        return await self.refresh_appointments()

    async def refresh_appointments(self) -> bool:
        if self.appointments.is_busy:
            return False
        ok = await self.appointments.refresh()
        await self.status.set_banner(self.appointments.error)
        return ok

    async def update_draft(
        self,
        scheduled_at: datetime | None = None,
        purpose: str | None = None,
    ) -> AppointmentDraft:
        if scheduled_at is not None:
            self._draft.scheduled_at = scheduled_at
        if purpose is not None:
            self._draft.purpose = purpose
        await self.status.set_form_status("")
        return self._draft

    async def submit_appointment(self) -> bool:
        if self.appointments.is_busy:
            return False
        try:
            created = await self.appointments.create(self._draft)
        except ValidationError as e:
            await self.status.set_form_status(e.message)
            return False

        await self.status.set_banner(self.appointments.error)
        if created:
            self._draft.reset()
            await self.status.set_form_status(APPOINTMENT_CREATED)
        return created

    def begin_edit(self, appointment_id: str) -> AppointmentPatch | None:
        record = self.appointments.get(appointment_id)
        if record is None:
            return None
        patch = AppointmentPatch.from_record(record)
        self._editing = (appointment_id, patch)
        return patch

    def cancel_edit(self) -> None:
        self._editing = None

    async def save_edit(self, patch: AppointmentPatch | None = None) -> bool:
        if self._editing is None or self.appointments.is_busy:
            return False
        appointment_id, current = self._editing
        patch = patch or current
        try:
            updated = await self.appointments.update(appointment_id, patch)
        except ValidationError as e:
            await self.status.set_form_status(e.message)
            return False

        await self.status.set_banner(self.appointments.error)
        if updated:
            self._editing = None
            await self.status.set_form_status(APPOINTMENT_UPDATED)
        return updated

    async def delete_appointment(self, appointment_id: str) -> bool:
        """Delete after the user confirmed."""
        if self.appointments.is_busy:
            return False
        deleted = await self.appointments.delete(appointment_id)
        await self.status.set_banner(self.appointments.error)
        if deleted:
            await self.status.set_form_status(APPOINTMENT_DELETED)
        return deleted

    async def dismiss_banner(self) -> None:
        await self.status.dismiss_banner()

    def snapshot(self) -> dict:
        """Everything the render layer shows."""
        status = self.status.state
        editing = None
        if self._editing is not None:
            appointment_id, patch = self._editing
            editing = {
                "id": appointment_id,
                "scheduled_at": (
                    format_instant(patch.scheduled_at) if patch.scheduled_at else None
                ),
                "purpose": patch.purpose,
            }
        return {
            "messages": [entry.to_dict() for entry in self.conversation.snapshot()],
            "recording": {
                "state": self.recording.state.value,
                "elapsed": self.recording.elapsed_text,
            },
            "selected_image": (
                self._selected_image.filename if self._selected_image else None
            ),
            "appointments": [r.to_dict() for r in self.appointments.records],
            "appointments_busy": self.appointments.is_busy,
            "draft": {
                "scheduled_at": self._draft.scheduled_at.isoformat(timespec="minutes"),
                "purpose": self._draft.purpose,
            },
            "editing": editing,
            "banner": status.banner,
            "upload_status": status.upload_status,
            "form_status": status.form_status,
        }

    # Internals

    def _require_image(self) -> ImageFile:
        if self._selected_image is None:
            raise ValidationError(NO_FILE_SELECTED)
        return self._selected_image

    def _on_recording_complete(self, payload: AudioPayload) -> None:
        self._spawn(self.pipeline.run(voice_transfer(self.service, payload)))

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _publish_recording(self, elapsed_text: str) -> None:
        await self.event_bus.emit(
            Topic.RECORDING,
            {"state": self.recording.state.value, "elapsed": elapsed_text},
            source="recording_session_manager",
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def draft(self) -> AppointmentDraft:
        return self._draft

    @property
    def event_bus(self) -> EventBus:
        """Get event bus instance."""
        if not self._event_bus:
            raise RuntimeError("Orchestrator not started")
        return self._event_bus

    @property
    def tracker(self) -> Tracker:
        """Get tracker instance."""
        if not self._tracker:
            raise RuntimeError("Orchestrator not started")
        return self._tracker

    @property
    def service(self) -> IHealthService:
        """Get remote service client."""
        if not self._service:
            raise RuntimeError("Orchestrator not started")
        return self._service

    @property
    def conversation(self) -> ConversationStore:
        """Get conversation store."""
        if not self._conversation:
            raise RuntimeError("Orchestrator not started")
        return self._conversation

    @property
    def appointments(self) -> AppointmentStore:
        """Get appointment store."""
        if not self._appointments:
            raise RuntimeError("Orchestrator not started")
        return self._appointments

    @property
    def status(self) -> StatusBoard:
        """Get status board."""
        if not self._status:
            raise RuntimeError("Orchestrator not started")
        return self._status

    @property
    def pipeline(self) -> TransferPipeline:
        """Get transfer pipeline."""
        if not self._pipeline:
            raise RuntimeError("Orchestrator not started")
        return self._pipeline

    @property
    def recording(self) -> RecordingSessionManager:
        """Get recording session manager."""
        if not self._recording:
            raise RuntimeError("Orchestrator not started")
        return self._recording
