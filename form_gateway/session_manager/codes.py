"""Verification code bridge: gets a one-time code from a human during login.

The login flow awaits ``CodeProvider.request_code()``. Providers:

    console - prompt on the terminal (default)
    http    - accept POST /challenge-code on a short-lived local listener
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from aiohttp import web

from ..constants import CODE_PROMPT
from ..errors import ChallengeCodeTimeoutError, LoginError
from ..models.session import ChallengeContext

logger = logging.getLogger(__name__)


class CodeProvider:
    """Resolves a pending future with a code supplied from outside the login flow.

    ``timeout`` bounds the wait in seconds; 0 waits forever.
    """

    def __init__(self, timeout: float = 0.0):
        self.timeout = timeout
        self._pending: Optional[asyncio.Future] = None

    @property
    def awaiting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def submit(self, code: str) -> bool:
        """Hand a code to the waiting login flow. Returns False if nobody is waiting."""
        if not self.awaiting:
            return False
        self._pending.set_result(code)
        return True

    def fail(self, exc: BaseException) -> bool:
        if not self.awaiting:
            return False
        self._pending.set_exception(exc)
        return True

    async def request_code(self, context: ChallengeContext) -> str:
        """Block until a code is submitted and return it stripped."""
        self._pending = asyncio.get_running_loop().create_future()
        try:
            await self._on_awaiting(context)
            if self.timeout > 0:
                code = await asyncio.wait_for(self._pending, self.timeout)
            else:
                code = await self._pending
        except asyncio.TimeoutError as e:
            raise ChallengeCodeTimeoutError(
                f"No verification code received within {self.timeout:g}s."
            ) from e
        finally:
            self._pending = None
            await self._on_settled()
        return code.strip()

    async def _on_awaiting(self, context: ChallengeContext):
        """Hook: start collecting a code."""

    async def _on_settled(self):
        """Hook: stop collecting a code."""

    async def close(self):
        if self.awaiting:
            self._pending.cancel()
        await self._on_settled()


class ConsoleCodeProvider(CodeProvider):
    """Prompts on the terminal and reads one line."""

    def __init__(self, timeout: float = 0.0, prompt: str = CODE_PROMPT):
        super().__init__(timeout)
        self.prompt = prompt

    async def _on_awaiting(self, context: ChallengeContext):
        loop = asyncio.get_running_loop()
        # Daemon thread: a prompt abandoned on timeout must not keep the process alive
        reader = threading.Thread(
            target=self._read_line, args=(loop,), name="code-prompt", daemon=True
        )
        reader.start()

    def _read_line(self, loop: asyncio.AbstractEventLoop):
        try:
            line = input(self.prompt)
        except EOFError:
            loop.call_soon_threadsafe(
                self.fail, LoginError("Standard input closed while waiting for a verification code.")
            )
            return
        loop.call_soon_threadsafe(self.submit, line)


class HttpCodeProvider(CodeProvider):
    """Accepts the code over HTTP while, and only while, one is awaited.

    POST /challenge-code  {"code": "123456"}
        202 accepted, 400 missing code, 409 no code awaited
    """

    def __init__(self, host: str, port: int, timeout: float = 0.0):
        super().__init__(timeout)
        self.host = host
        self.port = port
        self._runner: Optional[web.AppRunner] = None

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/challenge-code", self.handle_submit)
        return app

    async def handle_submit(self, request: web.Request) -> web.Response:
        try:
            body = await request.json() if request.can_read_body else {}
        except ValueError:
            return web.json_response({"error": "Body must be JSON."}, status=400)

        code = body.get("code") if isinstance(body, dict) else None
        if not isinstance(code, str) or not code.strip():
            return web.json_response({"error": "code is required."}, status=400)

        if not self.submit(code):
            return web.json_response({"error": "No verification code is awaited."}, status=409)

        logger.info("Verification code received over HTTP.")
        return web.json_response({"message": "Code accepted."}, status=202)

    async def _on_awaiting(self, context: ChallengeContext):
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(
            f"Waiting for verification code: POST http://{self.host}:{self.port}/challenge-code"
        )

    async def _on_settled(self):
        if self._runner:
            runner, self._runner = self._runner, None
            await runner.cleanup()


def build_code_provider(
    source: str,
    timeout: float = 0.0,
    host: str = "127.0.0.1",
    port: int = 3001,
) -> CodeProvider:
    """Create the provider named by CHALLENGE_CODE_SOURCE."""
    if source == "console":
        return ConsoleCodeProvider(timeout=timeout)
    if source == "http":
        return HttpCodeProvider(host, port, timeout=timeout)
    raise ValueError(f"Unknown challenge code source: {source!r}")
