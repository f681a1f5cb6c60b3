"""Transfer definitions for text, voice and image submissions."""

from ..models import AudioPayload, ImageFile, MessageEntry
from ..service import ChatReply, IHealthService, ImageAnalysis, VoiceReply
from .pipeline import Transfer, TransferKind

TEXT_FALLBACK = (
    "Sorry, there was an error processing your request. "
    "Please ensure the API server is running."
)
VOICE_PLACEHOLDER = "Processing your voice message..."
VOICE_FALLBACK = (
    "Sorry, there was an error processing your voice message. "
    "Please try again or type your message instead."
)
IMAGE_PLACEHOLDER = "Analyzing your image..."
IMAGE_ECHO = "Uploaded an image for analysis."
IMAGE_FALLBACK = (
    "Sorry, there was an error analyzing your image. Please try again."
)


def text_transfer(service: IHealthService, text: str) -> Transfer:
    def map_result(reply: ChatReply) -> list[MessageEntry]:
        return [MessageEntry.assistant(reply.response)]

    return Transfer(
        kind=TransferKind.TEXT,
        send=lambda: service.chat(text),
        map_result=map_result,
        fallback=TEXT_FALLBACK,
        echo=MessageEntry.user(text),
    )


def voice_transfer(service: IHealthService, payload: AudioPayload) -> Transfer:
    def map_result(reply: VoiceReply) -> list[MessageEntry]:
        return [
            MessageEntry.user(reply.transcribed_text),
            MessageEntry.assistant(reply.response),
        ]

    return Transfer(
        kind=TransferKind.VOICE,
        send=lambda: service.voice_to_text(payload),
        map_result=map_result,
        fallback=VOICE_FALLBACK,
        placeholder=VOICE_PLACEHOLDER,
    )


def image_transfer(service: IHealthService, image: ImageFile) -> Transfer:
    def map_result(reply: ImageAnalysis) -> list[MessageEntry]:
        return [
            MessageEntry.user(IMAGE_ECHO),
            MessageEntry.assistant(reply.analysis),
        ]

    return Transfer(
        kind=TransferKind.IMAGE,
        send=lambda: service.analyze_image(image),
        map_result=map_result,
        fallback=IMAGE_FALLBACK,
        placeholder=IMAGE_PLACEHOLDER,
    )
