"""User-visible status texts: banner and inline control status."""

from dataclasses import asdict, dataclass

from ..event_bus import IEventBus
from ..models import Topic


@dataclass
class StatusState:
    banner: str | None = None  # persistent, dismissable
    upload_status: str = ""  # next to the image upload control
    form_status: str = ""  # next to the appointment form


class StatusBoard:
    """Holds the diagnostic banner and the inline status texts."""

    def __init__(self, event_bus: IEventBus):
        self._event_bus = event_bus
        self._state = StatusState()

    @property
    def state(self) -> StatusState:
        return StatusState(**asdict(self._state))

    async def set_banner(self, message: str | None) -> None:
        self._state.banner = message
        await self._publish()

    async def dismiss_banner(self) -> None:
        await self.set_banner(None)

    async def set_upload_status(self, message: str) -> None:
        self._state.upload_status = message
        await self._publish()

    async def set_form_status(self, message: str) -> None:
        self._state.form_status = message
        await self._publish()

    async def _publish(self) -> None:
        await self._event_bus.emit(
            Topic.STATUS, asdict(self._state), source="status_board"
        )
