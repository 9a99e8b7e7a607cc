"""Camoufox browser automation: launch, login, authenticated page reuse."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Mapping, Optional

from camoufox.async_api import AsyncCamoufox
from playwright.async_api import Browser, BrowserContext, Page

from ..config import BROWSER_HEADLESS, CHALLENGE_WAIT_TIMEOUT_MS, NAVIGATION_TIMEOUT_MS
from ..constants import (
    ERROR_NOT_INITIALIZED,
    ERROR_OPTION_NOT_FOUND,
    IDENTITY_PROVIDER_URL,
    SELECTORS,
)
from ..errors import SessionNotReadyError, SessionStateError, VerificationOptionNotFoundError
from ..models.session import (
    TRANSITIONS,
    ChallengeContext,
    ChallengeKind,
    Credentials,
    SessionState,
)
from .challenge import VERIFICATION_OPTIONS, detect_challenge
from .codes import CodeProvider

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CamoufoxLauncher:
    """Starts and stops the Camoufox browser process."""

    def __init__(self, headless: bool = BROWSER_HEADLESS):
        self.headless = headless
        self._camoufox: Optional[AsyncCamoufox] = None

    async def launch(self) -> Browser:
        logger.info(f"Launching Camoufox (headless={self.headless})...")
        self._camoufox = AsyncCamoufox(headless=self.headless, humanize=True)
        try:
            return await self._camoufox.__aenter__()
        except Exception:
            # The Playwright driver may already be running
            await self._abandon()
            raise

    async def _abandon(self):
        camoufox, self._camoufox = self._camoufox, None
        try:
            await camoufox.__aexit__(None, None, None)
        except Exception as e:
            logger.warning(f"Error stopping camoufox after failed launch: {e}")

    async def close(self):
        if self._camoufox:
            camoufox, self._camoufox = self._camoufox, None
            await camoufox.__aexit__(None, None, None)


class BrowserSession:
    """The single authenticated browser session shared by all fetches.

    ``initialize()`` drives the login state machine once. Afterwards the page
    is only used through ``render()``, which runs one navigate-then-capture
    transaction at a time.
    """

    def __init__(
        self,
        credentials: Credentials,
        code_provider: CodeProvider,
        launcher: Optional[CamoufoxLauncher] = None,
        verification_options: Optional[Mapping[ChallengeKind, str]] = None,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        challenge_wait_timeout_ms: int = CHALLENGE_WAIT_TIMEOUT_MS,
    ):
        self._credentials = credentials
        self._code_provider = code_provider
        self._launcher = launcher or CamoufoxLauncher()
        self._options = verification_options or VERIFICATION_OPTIONS
        self._navigation_timeout_ms = navigation_timeout_ms
        self._challenge_wait_timeout_ms = challenge_wait_timeout_ms

        self._state = SessionState.UNINITIALIZED
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._page_lock = asyncio.Lock()
        self.challenge: Optional[ChallengeContext] = None
        self.started_at: Optional[str] = None
        self.authenticated_at: Optional[str] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def is_authenticated(self) -> bool:
        return (
            self._state is SessionState.AUTHENTICATED
            and self._browser is not None
            and self._page is not None
        )

    def _transition(self, new_state: SessionState):
        if new_state not in TRANSITIONS[self._state]:
            raise SessionStateError(
                f"Illegal session transition {self._state.value} -> {new_state.value}"
            )
        logger.debug(f"Session {self._state.value} -> {new_state.value}")
        self._state = new_state

    # ── Login ────────────────────────────────────────────────────────────────

    async def initialize(self):
        """Launch the browser and log in. Raises on any failure, leaving the session FAILED."""
        self._transition(SessionState.LOGGING_IN)
        self.started_at = _now()
        logger.info("Initializing browser and logging in...")

        try:
            self._browser = await self._launcher.launch()
            self._context = await self._browser.new_context()
            self._page = await self._context.new_page()
            self._page.set_default_navigation_timeout(self._navigation_timeout_ms)

            await self._submit_identifier()

            challenge = await detect_challenge(self._page, self._options)
            if challenge.detected:
                await self._complete_challenge(challenge)
            else:
                await self._submit_password()

        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            self.challenge = None
            await self._release()
            self._transition(SessionState.FAILED)
            raise

        self.authenticated_at = _now()
        self._transition(SessionState.AUTHENTICATED)
        logger.info("Logged in successfully.")

    async def _submit_identifier(self):
        page = self._page
        await page.goto(IDENTITY_PROVIDER_URL, wait_until="domcontentloaded")
        await page.fill(SELECTORS["identifier_input"], self._credentials.email)
        await page.click(SELECTORS["identifier_next"])

        # Either the password prompt or a verification step follows
        await page.wait_for_selector(
            SELECTORS["next_step"],
            state="visible",
            timeout=self._challenge_wait_timeout_ms,
        )

    async def _submit_password(self):
        page = self._page
        await page.fill(SELECTORS["password_input"], self._credentials.password)
        async with page.expect_navigation(wait_until="domcontentloaded"):
            await page.click(SELECTORS["password_next"])

    async def _complete_challenge(self, challenge: ChallengeContext):
        self._transition(SessionState.AWAITING_CHALLENGE)
        self.challenge = challenge
        logger.info("Verification prompt detected. Attempting email code verification...")

        if challenge.kind is not ChallengeKind.EMAIL_CODE or not challenge.option_selector:
            raise VerificationOptionNotFoundError(ERROR_OPTION_NOT_FOUND)

        page = self._page
        async with page.expect_navigation(wait_until="domcontentloaded"):
            await page.click(challenge.option_selector)
        logger.info("Selected email verification. Check your inbox for the code.")

        await page.wait_for_selector(SELECTORS["code_input"], state="visible")
        code = await self._code_provider.request_code(challenge)

        await page.fill(SELECTORS["code_input"], code)
        async with page.expect_navigation(wait_until="domcontentloaded"):
            await page.click(SELECTORS["code_submit"])
        self.challenge = None

    # ── Page reuse ───────────────────────────────────────────────────────────

    async def render(self, url: str) -> str:
        """Navigate the shared page to ``url`` and return the serialized document."""
        if not self.is_authenticated:
            raise SessionNotReadyError(ERROR_NOT_INITIALIZED)

        async with self._page_lock:
            # The session may have been closed while this request was queued
            if not self.is_authenticated:
                raise SessionNotReadyError(ERROR_NOT_INITIALIZED)
            await self._page.goto(url, wait_until="domcontentloaded")
            return await self._page.content()

    # ── Teardown ─────────────────────────────────────────────────────────────

    async def _release(self):
        """Close page, context and browser if held. Never raises."""
        try:
            if self._page:
                await self._page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")
        finally:
            self._page = None

        try:
            if self._context:
                await self._context.close()
        except Exception as e:
            logger.warning(f"Error closing context: {e}")
        finally:
            self._context = None

        try:
            if self._browser:
                await self._launcher.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None

    async def close(self):
        """Release the browser. Safe to call repeatedly and in any state."""
        if self._state is SessionState.CLOSED:
            return
        logger.info("Stopping browser session...")
        await self._release()
        self.challenge = None
        self._transition(SessionState.CLOSED)
        logger.info("Browser session stopped.")
