"""Remote health service module."""

from .client import IMAGE_PROMPT, HealthServiceClient, IHealthService
from .schemas import AppointmentOut, ChatReply, ImageAnalysis, VoiceReply

__all__ = [
    "IMAGE_PROMPT",
    "HealthServiceClient",
    "IHealthService",
    "AppointmentOut",
    "ChatReply",
    "ImageAnalysis",
    "VoiceReply",
]
