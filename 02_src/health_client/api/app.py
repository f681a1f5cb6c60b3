"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..orchestrator import IOrchestrator, Orchestrator
from .routes import appointments, conversation, observability


def create_fastapi_app(orchestrator: IOrchestrator | None = None) -> FastAPI:
    """Create and configure FastAPI application around one Orchestrator."""
    orchestrator = orchestrator or Orchestrator()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage orchestrator lifespan."""
        await orchestrator.start()
        yield
        await orchestrator.stop()

    fastapi_app = FastAPI(
        title="Health Assistant Client API",
        description="Local API driving the health assistant client state",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.orchestrator = orchestrator

    # Enable CORS for the front-end dev server
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:5174"],  # Vite default
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(conversation.create_conversation_router(orchestrator))
    fastapi_app.include_router(appointments.create_appointments_router(orchestrator))
    fastapi_app.include_router(observability.create_observability_router(orchestrator))

    return fastapi_app
