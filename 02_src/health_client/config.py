"""Project-level configuration and path helpers."""

import os
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_API_URL = "https://ai-health-assistant-0art.onrender.com"
DEFAULT_USER_ID = "sdn"  # fixed identity until an auth flow exists


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return float(value)


@dataclass
class AudioSettings:
    """Microphone capture settings."""

    device_name: str | None = None
    sample_rate_hz: int = 16000
    channels: int = 1


@dataclass
class ClientConfig:
    """Runtime configuration for the health assistant client."""

    api_url: str = DEFAULT_API_URL
    user_id: str = DEFAULT_USER_ID
    http_timeout: float | None = None  # None: rely on the service's own bound
    audio: AudioSettings | None = None

    def __post_init__(self) -> None:
        self.api_url = self.api_url.rstrip("/")
        if self.audio is None:
            self.audio = AudioSettings()

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build config from environment variables (see .env)."""
        audio = AudioSettings(
            device_name=os.getenv("AUDIO_DEVICE_NAME") or None,
            sample_rate_hz=int(os.getenv("AUDIO_SAMPLE_RATE", "16000")),
            channels=int(os.getenv("AUDIO_CHANNELS", "1")),
        )
        return cls(
            api_url=os.getenv("HEALTH_API_URL", DEFAULT_API_URL),
            user_id=os.getenv("HEALTH_USER_ID", DEFAULT_USER_ID),
            http_timeout=_optional_float(os.getenv("HEALTH_HTTP_TIMEOUT")),
            audio=audio,
        )
