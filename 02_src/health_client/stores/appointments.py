"""Appointment state store."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..errors import FetchFailure
from ..event_bus import IEventBus
from ..logging_config import get_logger
from ..models import AppointmentDraft, AppointmentPatch, AppointmentRecord, Topic
from ..service import IHealthService
from ..tracker import ITracker

logger = get_logger(__name__)

FETCH_FAILED = (
    "Unable to connect to the server. Please ensure the API server is running."
)
CREATE_FAILED = (
    "Failed to create appointment. Please ensure the API server is running."
)
UPDATE_FAILED = (
    "Failed to update appointment. Please ensure the API server is running."
)
DELETE_FAILED = (
    "Failed to delete appointment. Please ensure the API server is running."
)


class AppointmentStore:
    """Cached appointment list, always re-fetched after a mutation.

    Only one operation runs at a time: while ``is_busy`` is set, further
    refresh/create/update/delete calls return False without a request.
    """

    def __init__(
        self,
        service: IHealthService,
        event_bus: IEventBus,
        tracker: ITracker,
    ):
        self._service = service
        self._event_bus = event_bus
        self._tracker = tracker
        self._records: tuple[AppointmentRecord, ...] = ()
        self._error: str | None = None
        self._busy = False

    @property
    def records(self) -> tuple[AppointmentRecord, ...]:
        return self._records

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_busy(self) -> bool:
        return self._busy

    def get(self, appointment_id: str) -> AppointmentRecord | None:
        return next((r for r in self._records if r.id == appointment_id), None)

    async def refresh(self) -> bool:
        """Replace the local set with the remote one."""
        async with self._operation("refresh") as accepted:
            if not accepted:
                return False
            return await self._load()

    async def create(self, draft: AppointmentDraft) -> bool:
        """Create from the draft, then refresh.

        Raises ValidationError before any request when the purpose is empty.
        Returns True when the service accepted the appointment.
        """
        draft.validate()
        async with self._operation("create") as accepted:
            if not accepted:
                return False
            try:
                await self._service.create_appointment(
                    draft.scheduled_at, draft.purpose
                )
            except FetchFailure:
                await self._fail(CREATE_FAILED)
                return False
            await self._tracker.track(
                "appointment_created", "appointment_store", {"purpose": draft.purpose}
            )
            await self._load()
            return True

    async def update(self, appointment_id: str, patch: AppointmentPatch) -> bool:
        """Apply the patch remotely, then refresh."""
        patch.validate()
        async with self._operation("update") as accepted:
            if not accepted:
                return False
            try:
                await self._service.update_appointment(appointment_id, patch)
            except FetchFailure:
                await self._fail(UPDATE_FAILED)
                return False
            await self._tracker.track(
                "appointment_updated", "appointment_store", {"id": appointment_id}
            )
            await self._load()
            return True

    async def delete(self, appointment_id: str) -> bool:
        """Delete remotely, then refresh."""
        async with self._operation("delete") as accepted:
            if not accepted:
                return False
            try:
                await self._service.delete_appointment(appointment_id)
            except FetchFailure:
                await self._fail(DELETE_FAILED)
                return False
            await self._tracker.track(
                "appointment_deleted", "appointment_store", {"id": appointment_id}
            )
            await self._load()
            return True

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[bool]:
        if self._busy:
            logger.info("Appointment %s ignored: operation in flight", name)
            yield False
            return

        self._busy = True
        self._error = None
        await self._publish()
        try:
            yield True
        finally:
            self._busy = False
            await self._publish()

    async def _load(self) -> bool:
        try:
            records = await self._service.list_appointments()
        except FetchFailure as e:
            logger.error("Fetching appointments failed: %s", e)
            # Never show stale records next to an error
            self._records = ()
            await self._fail(FETCH_FAILED)
            return False

        self._records = tuple(records)
        self._error = None
        await self._publish()
        await self._tracker.track(
            "appointments_refreshed",
            "appointment_store",
            {"count": len(self._records)},
        )
        return True

    async def _fail(self, message: str) -> None:
        self._error = message
        await self._publish()

    async def _publish(self) -> None:
        await self._event_bus.emit(
            Topic.APPOINTMENTS,
            {
                "records": [record.to_dict() for record in self._records],
                "error": self._error,
                "is_busy": self._busy,
            },
            source="appointment_store",
        )
