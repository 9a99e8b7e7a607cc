"""Entry point for the form gateway.

Logs in to the identity provider once, then serves GET /fetch-form on
GATEWAY_HOST:GATEWAY_PORT until SIGINT/SIGTERM. Exits 1 if login fails;
the HTTP listener never starts in that case.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from .config import (
    BROWSER_HEADLESS,
    CACHE_MAX_ENTRIES,
    CHALLENGE_CODE_SOURCE,
    CHALLENGE_CODE_TIMEOUT,
    CHALLENGE_HOST,
    CHALLENGE_PORT,
    CORS_ORIGIN,
    GATEWAY_HOST,
    GATEWAY_PORT,
    GOOGLE_EMAIL,
    GOOGLE_PASSWORD,
    LOG_FORMAT,
    LOG_LEVEL,
    VERIFICATION_OPTION_SELECTOR,
)
from .lifecycle import GatewayLifecycle
from .models.session import Credentials
from .session_manager.browser import BrowserSession, CamoufoxLauncher
from .session_manager.cache import ResponseCache
from .session_manager.challenge import verification_options
from .session_manager.codes import build_code_provider

logging.basicConfig(stream=sys.stderr, level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger("form-gateway")


def build_lifecycle() -> GatewayLifecycle:
    """Wire the session, cache and code bridge from environment settings."""
    code_provider = build_code_provider(
        CHALLENGE_CODE_SOURCE,
        timeout=CHALLENGE_CODE_TIMEOUT,
        host=CHALLENGE_HOST,
        port=CHALLENGE_PORT,
    )
    session = BrowserSession(
        Credentials(email=GOOGLE_EMAIL, password=GOOGLE_PASSWORD),
        code_provider,
        launcher=CamoufoxLauncher(headless=BROWSER_HEADLESS),
        verification_options=verification_options(VERIFICATION_OPTION_SELECTOR),
    )
    return GatewayLifecycle(
        session,
        ResponseCache(max_entries=CACHE_MAX_ENTRIES),
        code_provider,
        host=GATEWAY_HOST,
        port=GATEWAY_PORT,
        cors_origin=CORS_ORIGIN,
    )


async def serve() -> int:
    return await build_lifecycle().run()


def main():
    """Run the gateway until interrupted."""
    logger.info("Starting form gateway...")
    sys.exit(asyncio.run(serve()))


if __name__ == "__main__":
    main()
