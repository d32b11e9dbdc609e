import logging
import math
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from aiohttp import web

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


class SlidingWindowRateLimiter:
    """
    Caps each client to `limit` requests per rolling `window` seconds.

    Only touched from the event loop and never awaits, so no lock is needed.
    """

    def __init__(self, limit: int = 100, window: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}

    def check(self, client: str) -> Tuple[bool, float]:
        """
        Records a request from `client` if it fits in the budget.

        Returns:
            Tuple of (allowed, seconds until the oldest request in the window expires).
        """
        now = self._clock()
        hits = self._hits.setdefault(client, deque())
        while hits and now - hits[0] >= self.window:
            hits.popleft()

        if len(hits) >= self.limit:
            return False, self.window - (now - hits[0])

        hits.append(now)
        return True, 0.0

    def prune(self) -> None:
        """Forgets clients with no requests inside the current window."""
        now = self._clock()
        idle = [client for client, hits in self._hits.items() if not hits or now - hits[-1] >= self.window]
        for client in idle:
            del self._hits[client]


def rate_limit_middleware(limiter: SlidingWindowRateLimiter):
    @web.middleware
    async def middleware(request: web.Request, handler):
        client = request.remote or "unknown"
        allowed, retry_after = limiter.check(client)
        if not allowed:
            logger.warning(f"Rate limit exceeded for {client}.")
            return web.Response(
                status=429,
                text=RATE_LIMIT_MESSAGE,
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )
        return await handler(request)

    return middleware


@web.middleware
async def request_logging_middleware(request: web.Request, handler):
    started = time.perf_counter()
    status = 500
    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as e:
        status = e.status
        raise
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.path_qs} -> {status} ({elapsed_ms:.1f} ms)")
