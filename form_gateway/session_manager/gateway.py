"""Fetch Gateway HTTP service.

Serves pages rendered by the authenticated browser session, with an
in-memory cache in front of it.

Endpoints:
    GET /fetch-form?url=...  - Rendered HTML of ``url`` (cached after first fetch)
    GET /status              - Session state and cache counters
"""

from __future__ import annotations

import logging

from aiohttp import web

from ..config import CORS_ORIGIN
from ..constants import ERROR_FETCH_FAILED, ERROR_NOT_INITIALIZED, ERROR_URL_REQUIRED
from ..errors import SessionNotReadyError
from ..models.session import SessionStatus
from .browser import BrowserSession
from .cache import ResponseCache

logger = logging.getLogger(__name__)

SESSION_KEY = web.AppKey("session", BrowserSession)
CACHE_KEY = web.AppKey("cache", ResponseCache)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _html(html: str) -> web.Response:
    return web.Response(text=html, content_type="text/html")


# ── HTTP Handlers ────────────────────────────────────────────────────────────


async def handle_fetch_form(request: web.Request) -> web.Response:
    # A repeated key (?url=a&url=b) is not a single string
    urls = request.query.getall("url", [])
    if len(urls) != 1 or not urls[0]:
        return _error(ERROR_URL_REQUIRED, 400)
    url = urls[0]

    session = request.app[SESSION_KEY]
    cache = request.app[CACHE_KEY]

    if not session.is_authenticated:
        return _error(ERROR_NOT_INITIALIZED, 500)

    html = cache.get(url)
    if html is not None:
        logger.info(f"Cache hit for {url}")
        return _html(html)

    try:
        html = await session.render(url)
    except SessionNotReadyError:
        return _error(ERROR_NOT_INITIALIZED, 500)
    except Exception as e:
        logger.error(f"Error fetching form {url}: {e}", exc_info=True)
        return _error(ERROR_FETCH_FAILED, 500)

    html = cache.put(url, html)
    logger.info(f"Fetched and cached {url} ({len(html)} chars)")
    return _html(html)


async def handle_status(request: web.Request) -> web.Response:
    session = request.app[SESSION_KEY]
    stats = request.app[CACHE_KEY].stats()

    status = SessionStatus(
        state=session.state,
        is_authenticated=session.is_authenticated,
        cached_pages=stats["size"],
        cache_hits=stats["hits"],
        cache_misses=stats["misses"],
        started_at=session.started_at,
        authenticated_at=session.authenticated_at,
        message="Session active." if session.is_authenticated else ERROR_NOT_INITIALIZED,
    )
    return web.json_response(status.model_dump(mode="json"))


# ── CORS ─────────────────────────────────────────────────────────────────────


def cors_middleware(origin: str):
    """Allow cross-origin GETs from a single configured origin."""
    allow = {
        "Access-Control-Allow-Origin": origin,
        "Vary": "Origin",
    }
    preflight = {
        **allow,
        "Access-Control-Allow-Methods": "GET",
        "Access-Control-Allow-Headers": "Content-Type",
    }

    @web.middleware
    async def middleware(request: web.Request, handler):
        if request.method == "OPTIONS" and not isinstance(
            request.match_info.http_exception, web.HTTPNotFound
        ):
            return web.Response(status=204, headers=preflight)

        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers.update(allow)
            raise
        response.headers.update(allow)
        return response

    return middleware


# ── App Factory ──────────────────────────────────────────────────────────────


def create_app(
    session: BrowserSession,
    cache: ResponseCache,
    cors_origin: str = CORS_ORIGIN,
) -> web.Application:
    app = web.Application(middlewares=[cors_middleware(cors_origin)])
    app[SESSION_KEY] = session
    app[CACHE_KEY] = cache

    app.router.add_get("/fetch-form", handle_fetch_form, allow_head=False)
    app.router.add_get("/status", handle_status, allow_head=False)

    return app
