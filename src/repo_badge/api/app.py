"""
Badge service HTTP API.

Endpoints:
    GET /b        - Render a badge for ?user=&repo=&type=&color=&labelColor=&message=
    GET /preview  - HTML page embedding every badge type for a demo repository
    GET /health   - Liveness probe

Usage:
    python -m repo_badge.main
"""

import asyncio
import contextlib
import logging
from typing import Optional

import aiohttp
from aiohttp import web

from repo_badge.api.middleware import SlidingWindowRateLimiter, rate_limit_middleware, request_logging_middleware
from repo_badge.api.preview import DEMO_OWNER, DEMO_REPO, render_preview
from repo_badge.application.badge_service import BadgeService
from repo_badge.application.metric_resolver import MetricResolver
from repo_badge.config import ServiceSettings
from repo_badge.infrastructure.cache import ResponseCache
from repo_badge.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", ServiceSettings)
CACHE_KEY = web.AppKey("cache", ResponseCache)
LIMITER_KEY = web.AppKey("limiter", SlidingWindowRateLimiter)
GITHUB_CLIENT_KEY = web.AppKey("github_client", GitHubRestClient)
SERVICE_KEY = web.AppKey("badge_service", BadgeService)

routes = web.RouteTableDef()


@routes.get("/b")
async def badge(request: web.Request) -> web.Response:
    result = await request.app[SERVICE_KEY].handle(request.query)
    return web.Response(
        status=result.status,
        text=result.body,
        content_type=result.content_type,
        headers=result.headers,
    )


@routes.get("/preview")
async def preview(request: web.Request) -> web.Response:
    owner = request.query.get("user") or DEMO_OWNER
    repo = request.query.get("repo") or DEMO_REPO
    return web.Response(text=render_preview(owner, repo), content_type="text/html")


@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def _github_session(app: web.Application):
    """Opens the shared upstream session for the lifetime of the app."""
    client = app[GITHUB_CLIENT_KEY]
    async with aiohttp.ClientSession() as session:
        client.session = session
        logger.info(f"Opened GitHub API session for {client.api_url}.")
        yield
        client.session = None


async def _housekeeping(app: web.Application):
    """Periodically drops expired cache entries and idle rate-limit buckets."""
    cache = app[CACHE_KEY]
    limiter = app[LIMITER_KEY]
    interval = app[SETTINGS_KEY].cache_sweep_interval

    async def run() -> None:
        while True:
            await asyncio.sleep(interval)
            await cache.sweep()
            limiter.prune()

    task = asyncio.create_task(run())
    yield
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


def create_app(
    settings: Optional[ServiceSettings] = None,
    cache: Optional[ResponseCache] = None,
    github_client: Optional[GitHubRestClient] = None,
    limiter: Optional[SlidingWindowRateLimiter] = None,
) -> web.Application:
    """
    Wires the badge pipeline into an aiohttp application.

    Collaborators default to production instances built from `settings`; tests pass their own.
    """
    settings = settings or ServiceSettings()
    if cache is None:
        cache = ResponseCache(ttl=settings.cache_ttl)
    if limiter is None:
        limiter = SlidingWindowRateLimiter(settings.rate_limit_requests, settings.rate_limit_window)

    owns_client = github_client is None
    if owns_client:
        github_client = GitHubRestClient(
            session=None,
            api_url=settings.api_url,
            user_agent=settings.user_agent,
            timeout=aiohttp.ClientTimeout(total=settings.upstream_timeout),
        )

    app = web.Application(middlewares=[request_logging_middleware, rate_limit_middleware(limiter)])
    app[SETTINGS_KEY] = settings
    app[CACHE_KEY] = cache
    app[LIMITER_KEY] = limiter
    app[GITHUB_CLIENT_KEY] = github_client
    app[SERVICE_KEY] = BadgeService(MetricResolver(github_client), cache)

    if owns_client:
        app.cleanup_ctx.append(_github_session)
    app.cleanup_ctx.append(_housekeeping)
    app.add_routes(routes)
    return app
