"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from sidebet import __version__
from sidebet.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings, app=None) -> None:
    """
    Initialize Logfire and bridge stdlib logging into it.

    Must be called ONCE at startup, before the scheduler or API server runs.

    Instruments:
    - FastAPI (when an app is passed)
    - HTTPX clients
    - Python logging (root logger handler)

    Args:
        settings: Application settings containing the Logfire token
        app: Optional FastAPI application to instrument
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="sidebet",
            service_version=__version__,
        )

        if app is not None:
            logfire.instrument_fastapi(app)

        logfire.instrument_httpx()

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        # Continue running - observability is optional
