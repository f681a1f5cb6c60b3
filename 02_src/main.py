"""Main entry point for the health assistant client."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from health_client.api import create_fastapi_app
from health_client.config import ClientConfig
from health_client.logging_config import get_logger, setup_logging
from health_client.orchestrator import Orchestrator


def main():
    """Run the local client API."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()

    # Get configuration from environment
    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))
    config = ClientConfig.from_env()
    get_logger(__name__).info(
        "Serving client API on %s:%s for user %s", api_host, api_port, config.user_id
    )

    app = create_fastapi_app(Orchestrator(config))

    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
