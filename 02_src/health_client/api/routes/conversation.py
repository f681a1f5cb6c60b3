"""Conversation, recording and image API routes."""

from fastapi import APIRouter, File, UploadFile
from pydantic import BaseModel

from ...orchestrator import IOrchestrator


class MessageRequest(BaseModel):
    """Request model for sending a chat message."""

    text: str


class MessagesResponse(BaseModel):
    """Conversation log snapshot."""

    messages: list[dict]


class RecordingResponse(BaseModel):
    """Recording state snapshot."""

    ok: bool
    state: str
    elapsed: str
    banner: str | None = None


class ImageResponse(BaseModel):
    """Image selection/upload result."""

    selected_image: str | None
    upload_status: str
    messages: list[dict]


def create_conversation_router(orchestrator: IOrchestrator) -> APIRouter:
    """Create conversation router."""
    router = APIRouter(prefix="/api", tags=["conversation"])

    def messages() -> dict:
        return {"messages": orchestrator.snapshot()["messages"]}

    def recording(ok: bool) -> dict:
        snapshot = orchestrator.snapshot()
        return {"ok": ok, **snapshot["recording"], "banner": snapshot["banner"]}

    def image() -> dict:
        snapshot = orchestrator.snapshot()
        return {
            "selected_image": snapshot["selected_image"],
            "upload_status": snapshot["upload_status"],
            "messages": snapshot["messages"],
        }

    @router.get("/messages", response_model=MessagesResponse)
    async def get_messages() -> dict:
        """Get the conversation log."""
        return messages()

    @router.post("/messages", response_model=MessagesResponse)
    async def send_message(request: MessageRequest) -> dict:
        """Send a chat message and wait for the reply (or fallback)."""
        await orchestrator.send_text(request.text)
        return messages()

    @router.get("/recording", response_model=RecordingResponse)
    async def get_recording() -> dict:
        """Get recording state and elapsed time."""
        return recording(True)

    @router.post("/recording/start", response_model=RecordingResponse)
    async def start_recording() -> dict:
        """Start microphone capture."""
        return recording(await orchestrator.start_recording())

    @router.post("/recording/stop", response_model=RecordingResponse)
    async def stop_recording() -> dict:
        """Stop capture; the voice transfer continues in the background."""
        return recording(await orchestrator.stop_recording())

    @router.post("/recording/toggle", response_model=RecordingResponse)
    async def toggle_recording() -> dict:
        """Mic button."""
        return recording(await orchestrator.toggle_recording())

    @router.post("/images", response_model=ImageResponse)
    async def select_image(image_file: UploadFile = File(...)) -> dict:
        """Select an image for upload."""
        data = await image_file.read()
        await orchestrator.select_image(
            image_file.filename or "image", data, image_file.content_type or ""
        )
        return image()

    @router.post("/images/upload", response_model=ImageResponse)
    async def upload_image() -> dict:
        """Upload the selected image for analysis."""
        await orchestrator.upload_image()
        return image()

    return router
