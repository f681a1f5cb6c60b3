"""Pytest configuration and fixtures."""

import asyncio
import json
import sys
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from health_client.errors import PermissionDenied  # noqa: E402
from health_client.recording import MIC_UNAVAILABLE  # noqa: E402

USER_ID = "test-user"
API_URL = "http://health.test"


class RemoteStub:
    """In-memory stand-in for the remote health service."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.appointments: list[dict] = []
        self.replies: dict[str, object] = {
            "/chat": {"response": "Test response"},
            "/voice-to-text": {
                "transcribed_text": "I have a headache",
                "response": "Have you taken any medication?",
            },
            "/analyze-image": {"analysis": "A small rash on the forearm."},
        }
        self.failing: set[str] = set()  # paths answering 500
        self.unreachable: set[str] = set()  # paths raising ConnectError
        self.gates: dict[str, asyncio.Event] = {}  # paths held until set()
        self._next_id = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        path = request.url.path

        gate = self.gates.get(path)
        if gate is not None:
            await gate.wait()
        if path in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.failing:
            return httpx.Response(500, json={"detail": "internal error"})

        if path == "/appointments" and request.method == "POST":
            body = json.loads(request.content)
            self._next_id += 1
            self.appointments.append(
                {
                    "id": f"apt-{self._next_id}",
                    "date_time": body["date_time"],
                    "purpose": body["purpose"],
                    "status": "scheduled",
                }
            )
            return httpx.Response(200, json={"status": "success"})

        if path == f"/appointments/{USER_ID}" and request.method == "GET":
            return httpx.Response(200, json=self.appointments)

        if path.startswith("/appointments/") and request.method in ("PUT", "DELETE"):
            appointment_id = path.rsplit("/", 1)[-1]
            match = [a for a in self.appointments if a["id"] == appointment_id]
            if not match:
                return httpx.Response(404, json={"detail": "not found"})
            if request.method == "DELETE":
                self.appointments.remove(match[0])
            else:
                match[0].update(json.loads(request.content))
                match[0].pop("user_id", None)
            return httpx.Response(200, json={"status": "success"})

        if path in self.replies and request.method == "POST":
            return httpx.Response(200, json=self.replies[path])

        return httpx.Response(404, json={"detail": "not found"})

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    async def wait_for(self, count: int) -> None:
        """Yield to the loop until ``count`` requests arrived."""
        for _ in range(200):
            if len(self.requests) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} requests, got {len(self.requests)}")


class FakeMicrophone:
    """Capture device driven by the test."""

    filename = "recording.wav"
    content_type = "audio/wav"

    def __init__(self):
        self.deny = False
        self.fail_encode = False
        self.opened = 0
        self.closed = 0
        self.events: list[str] = []
        self._sink = None

    @property
    def is_open(self) -> bool:
        return self._sink is not None

    async def open(self, sink) -> None:
        if self.deny:
            raise PermissionDenied(MIC_UNAVAILABLE)
        self.opened += 1
        self._sink = sink
        self.events.append("open")

    async def close(self) -> None:
        self.closed += 1
        self._sink = None
        self.events.append("close")

    def emit(self, chunk: bytes) -> None:
        assert self._sink is not None, "microphone is not open"
        self._sink(chunk)

    def encode(self, data: bytes) -> bytes:
        if self.fail_encode:
            raise OSError("encoder crashed")
        return data


@pytest.fixture
def remote():
    """Fake remote health service."""
    return RemoteStub()


@pytest.fixture
def config():
    """Client config pointing at the fake service."""
    from health_client.config import ClientConfig

    return ClientConfig(api_url=API_URL, user_id=USER_ID)


@pytest_asyncio.fixture
async def http_client(remote, config):
    """httpx client routed to the fake service."""
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(remote), base_url=config.api_url
    )
    yield client
    await client.aclose()


@pytest.fixture
def service(config, http_client):
    """HealthServiceClient over the fake service."""
    from health_client.service import HealthServiceClient

    return HealthServiceClient(config, client=http_client)


@pytest.fixture
def event_bus():
    """Create EventBus."""
    from health_client.event_bus import EventBus

    return EventBus()


@pytest.fixture
def tracker(event_bus):
    """Create Tracker with event bus."""
    from health_client.tracker import Tracker

    return Tracker(event_bus=event_bus)


@pytest.fixture
def conversation(event_bus):
    """Create an empty ConversationStore."""
    from health_client.stores import ConversationStore

    return ConversationStore(event_bus)


@pytest.fixture
def pipeline(conversation, tracker):
    """Create TransferPipeline over the conversation store."""
    from health_client.transfer import TransferPipeline

    return TransferPipeline(conversation, tracker)


@pytest.fixture
def appointment_store(service, event_bus, tracker):
    """Create AppointmentStore over the fake service."""
    from health_client.stores import AppointmentStore

    return AppointmentStore(service, event_bus, tracker)


@pytest.fixture
def microphone():
    """Fake capture device."""
    return FakeMicrophone()


@pytest_asyncio.fixture
async def orchestrator(config, service, microphone):
    """Started Orchestrator wired to the fakes."""
    from health_client.orchestrator import Orchestrator

    orch = Orchestrator(config, service=service, device=microphone)
    await orch.start()
    yield orch
    await orch.stop()
