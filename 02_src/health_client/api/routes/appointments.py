"""Appointment API routes."""

from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ...models import AppointmentPatch
from ...orchestrator import IOrchestrator


class AppointmentRequest(BaseModel):
    """Request model for scheduling an appointment."""

    scheduled_at: datetime | None = None  # naive = local wall-clock time
    purpose: str


class AppointmentUpdateRequest(BaseModel):
    """Request model for editing an appointment."""

    scheduled_at: datetime | None = None
    purpose: str | None = None


class AppointmentsResponse(BaseModel):
    """Appointment list snapshot."""

    ok: bool
    appointments: list[dict]
    busy: bool
    banner: str | None = None
    form_status: str = ""


def create_appointments_router(orchestrator: IOrchestrator) -> APIRouter:
    """Create appointments router."""
    router = APIRouter(prefix="/api/appointments", tags=["appointments"])

    def appointments(ok: bool) -> dict:
        snapshot = orchestrator.snapshot()
        return {
            "ok": ok,
            "appointments": snapshot["appointments"],
            "busy": snapshot["appointments_busy"],
            "banner": snapshot["banner"],
            "form_status": snapshot["form_status"],
        }

    @router.get("", response_model=AppointmentsResponse)
    async def list_appointments() -> dict:
        """Get the cached appointment list."""
        return appointments(True)

    @router.post("/refresh", response_model=AppointmentsResponse)
    async def refresh_appointments() -> dict:
        """Re-fetch the appointment list."""
        return appointments(await orchestrator.refresh_appointments())

    @router.post("", response_model=AppointmentsResponse)
    async def create_appointment(request: AppointmentRequest) -> dict:
        """Schedule an appointment from the submitted form."""
        await orchestrator.update_draft(
            scheduled_at=request.scheduled_at, purpose=request.purpose
        )
        return appointments(await orchestrator.submit_appointment())

    @router.put("/{appointment_id}", response_model=AppointmentsResponse)
    async def update_appointment(
        appointment_id: str, request: AppointmentUpdateRequest
    ) -> dict:
        """Edit an appointment."""
        if orchestrator.begin_edit(appointment_id) is None:
            raise HTTPException(status_code=404, detail="Appointment not found")
        patch = AppointmentPatch(
            scheduled_at=request.scheduled_at, purpose=request.purpose
        )
        saved = await orchestrator.save_edit(patch)
        if not saved:
            # The edit form was opened by this request only
            orchestrator.cancel_edit()
        return appointments(saved)

    @router.delete("/{appointment_id}", response_model=AppointmentsResponse)
    async def delete_appointment(appointment_id: str) -> dict:
        """Delete an appointment (confirmation happens in the front-end)."""
        return appointments(await orchestrator.delete_appointment(appointment_id))

    return router
