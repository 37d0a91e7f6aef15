"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from marketsettle import __version__
from marketsettle.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings) -> None:
    """
    Initialize Logfire and bridge Python logging into it.

    Must be called ONCE at command startup, before any settlement code runs.
    Without a token this is a no-op; observability never
    blocks a settlement run.

    Args:
        settings: Application settings containing Logfire token
    """
    if not settings.logfire_token:
        logger.debug("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="marketsettle",
            service_version=__version__,
            environment=settings.network,
        )

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
