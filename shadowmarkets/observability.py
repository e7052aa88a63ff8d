"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire

from shadowmarkets import __version__
from shadowmarkets.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings) -> None:
    """Configure Logfire once at startup, before any tick runs.

    Instruments pydantic-ai agents and httpx clients (gateway, GitHub, LLM
    APIs) and bridges stdlib logging. Disabled without a token; failures only
    warn.
    """
    if not settings.logfire_token:
        logger.info("Logfire token not set - observability disabled")
        return

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="shadowmarkets",
            service_version=__version__,
            environment="paper" if settings.chain.paper_mode else "live",
        )
        logfire.instrument_pydantic_ai()
        logfire.instrument_httpx()

        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
