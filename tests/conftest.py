"""Stub Playwright objects and session factories shared by the test suite."""

import asyncio
from contextlib import asynccontextmanager

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from form_gateway.constants import EMAIL_CODE_OPTION_SELECTOR
from form_gateway.models.session import Credentials
from form_gateway.session_manager.browser import BrowserSession
from form_gateway.session_manager.codes import CodeProvider

PASSWORD_STEP = {"#passwordNext"}
EMAIL_CHALLENGE_STEP = {"#challenge", EMAIL_CODE_OPTION_SELECTOR, 'input[name="totpPin"]'}


class FakeElement:
    def __init__(self, selector):
        self.selector = selector


class FakePage:
    """Records navigations and answers selector queries from a fixed set."""

    def __init__(self, present=(), pages=None, goto_errors=None, goto_delay=0.0):
        self.present = set(present)
        self.pages = dict(pages or {})
        self.goto_errors = dict(goto_errors or {})
        self.goto_delay = goto_delay
        self.url = "about:blank"
        self.navigations = []
        self.login_navigations = 0
        self.fills = {}
        self.clicks = []
        self.navigation_timeout = None
        self.closed = False

    def set_default_navigation_timeout(self, timeout):
        self.navigation_timeout = timeout

    async def goto(self, url, wait_until=None, timeout=None):
        if url in self.goto_errors:
            raise self.goto_errors[url]
        self.navigations.append(url)
        self.url = url
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)

    async def content(self):
        return self.pages.get(self.url, f"<html><body>{self.url}</body></html>")

    async def fill(self, selector, value):
        self.fills[selector] = value

    async def click(self, selector):
        self.clicks.append(selector)

    def _matches(self, selector):
        return any(part.strip() in self.present for part in selector.split(","))

    async def query_selector(self, selector):
        return FakeElement(selector) if self._matches(selector) else None

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if not self._matches(selector):
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")
        return FakeElement(selector)

    @asynccontextmanager
    async def expect_navigation(self, wait_until=None, timeout=None):
        yield
        self.login_navigations += 1

    async def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page):
        self.context = FakeContext(page)

    async def new_context(self):
        return self.context


class FakeLauncher:
    """Stands in for CamoufoxLauncher without starting a browser process."""

    def __init__(self, page, launch_error=None):
        self.page = page
        self.browser = FakeBrowser(page)
        self.launch_error = launch_error
        self.launches = 0
        self.closes = 0

    async def launch(self):
        self.launches += 1
        if self.launch_error:
            raise self.launch_error
        return self.browser

    async def close(self):
        self.closes += 1


class StaticCodeProvider(CodeProvider):
    """Answers every code request immediately with a fixed code."""

    def __init__(self, code="123456"):
        super().__init__()
        self.code = code
        self.requests = []
        self.closed = False

    async def _on_awaiting(self, context):
        self.requests.append(context)
        self.submit(self.code)

    async def close(self):
        self.closed = True
        await super().close()


@pytest.fixture
def credentials():
    return Credentials(email="user@example.com", password="hunter2")


@pytest.fixture
def make_session(credentials):
    """Build a BrowserSession over a FakePage. Returns (session, page, launcher, codes)."""

    def factory(present=PASSWORD_STEP, code="123456", launch_error=None, **page_kwargs):
        page = FakePage(present=present, **page_kwargs)
        launcher = FakeLauncher(page, launch_error=launch_error)
        codes = StaticCodeProvider(code)
        session = BrowserSession(credentials, codes, launcher=launcher)
        return session, page, launcher, codes

    return factory
