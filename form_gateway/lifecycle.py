"""Lifecycle Coordinator: log in first, then serve, then tear down on a signal."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from aiohttp.web import AppRunner, TCPSite

from .config import CORS_ORIGIN, GATEWAY_HOST, GATEWAY_PORT
from .session_manager.browser import BrowserSession
from .session_manager.cache import ResponseCache
from .session_manager.codes import CodeProvider
from .session_manager.gateway import create_app

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class GatewayLifecycle:
    """Owns the session, the cache and the HTTP site for one process."""

    def __init__(
        self,
        session: BrowserSession,
        cache: ResponseCache,
        code_provider: CodeProvider,
        host: str = GATEWAY_HOST,
        port: int = GATEWAY_PORT,
        cors_origin: str = CORS_ORIGIN,
    ):
        self.session = session
        self.cache = cache
        self.code_provider = code_provider
        self.host = host
        self.port = port
        self.cors_origin = cors_origin
        self.runner: Optional[AppRunner] = None
        self._stopped = asyncio.Event()

    async def start(self):
        """Log in, then start accepting connections. A failed login raises before any socket is bound."""
        await self.session.initialize()

        app = create_app(self.session, self.cache, self.cors_origin)
        runner = AppRunner(app)
        await runner.setup()
        self.runner = runner
        site = TCPSite(runner, self.host, self.port)
        await site.start()
        logger.info(f"Server running on http://{self.host}:{self.port}")

    async def shutdown(self):
        """Stop serving and release the browser. Safe to call more than once."""
        logger.info("Shutting down server...")
        if self.runner:
            runner, self.runner = self.runner, None
            await runner.cleanup()
        await self.session.close()
        await self.code_provider.close()

    def request_stop(self):
        self._stopped.set()

    def install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            loop.add_signal_handler(sig, self.request_stop)

    async def run(self) -> int:
        """Serve until SIGINT/SIGTERM. Returns the process exit code."""
        self.install_signal_handlers()

        # A signal may arrive while login still waits for a verification code
        starting = asyncio.ensure_future(self.start())
        stopping = asyncio.ensure_future(self._stopped.wait())
        await asyncio.wait({starting, stopping}, return_when=asyncio.FIRST_COMPLETED)

        if not starting.done():
            starting.cancel()
            await asyncio.gather(starting, return_exceptions=True)
            await self.shutdown()
            return 0

        try:
            starting.result()
        except Exception as e:
            logger.error(f"Server failed to start: {e}")
            stopping.cancel()
            await self.shutdown()
            return 1

        await stopping
        await self.shutdown()
        return 0
