import logging
from typing import Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

from repo_badge.application.badge_renderer import render_badge, render_error_badge
from repo_badge.application.metric_resolver import MetricResolver
from repo_badge.domain.exceptions import UpstreamException, ValidationException
from repo_badge.domain.models import BadgeRequest, BadgeStyle, BadgeType
from repo_badge.infrastructure.cache import ResponseCache

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = "image/svg+xml"
TEXT_CONTENT_TYPE = "text/plain"
UPSTREAM_ERROR_MESSAGE = "Error fetching data"
RENDER_ERROR_MESSAGE = "Error rendering badge"


class BadgeResponse(BaseModel):
    """A complete response body: either a full SVG badge or a full error body, never partial."""
    model_config = ConfigDict(frozen=True)

    status: int
    content_type: str
    body: str
    headers: Dict[str, str] = Field(default_factory=dict)


class BadgeService:
    """
    Orchestrates a single badge request:
    validate -> consult cache -> resolve metric -> render -> populate cache -> respond.

    Every failure is converted into a response here; nothing escapes to the server loop.
    """

    def __init__(self, resolver: MetricResolver, cache: ResponseCache):
        self.resolver = resolver
        self.cache = cache

    def _svg(self, body: str) -> BadgeResponse:
        return BadgeResponse(
            status=200,
            content_type=SVG_CONTENT_TYPE,
            body=body,
            headers={"Cache-Control": f"max-age={int(self.cache.ttl)}"},
        )

    @staticmethod
    def _error_badge(message: str) -> BadgeResponse:
        return BadgeResponse(
            status=500,
            content_type=SVG_CONTENT_TYPE,
            body=render_error_badge(message),
            headers={"Cache-Control": "no-cache"},
        )

    async def handle(self, query: Mapping[str, str]) -> BadgeResponse:
        try:
            request = BadgeRequest.from_query(query)
        except ValidationException as e:
            logger.info(f"Rejected badge request: {e}")
            return BadgeResponse(status=400, content_type=TEXT_CONTENT_TYPE, body=str(e))

        # Custom badges depend only on the caller's message, which is not part of the cache key.
        cacheable = request.badge_type is not BadgeType.CUSTOM
        cache_key = ResponseCache.make_key(request.owner, request.repo, request.badge_type)

        if cacheable:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit for {cache_key}.")
                return self._svg(cached)
            logger.debug(f"Cache miss for {cache_key}.")

        try:
            metric = await self.resolver.resolve(
                request.owner, request.repo, request.badge_type, request.message
            )
        except UpstreamException as e:
            logger.error(f"Error fetching GitHub data for {cache_key}: {e}")
            return self._error_badge(UPSTREAM_ERROR_MESSAGE)
        except ValidationException as e:
            logger.error(f"Resolver rejected {cache_key}: {e}")
            return BadgeResponse(status=400, content_type=TEXT_CONTENT_TYPE, body=str(e))
        except Exception:
            logger.exception(f"Unexpected error resolving {cache_key}.")
            return self._error_badge(UPSTREAM_ERROR_MESSAGE)

        try:
            svg = render_badge(metric.label, metric.value, BadgeStyle.for_request(request))
        except Exception:
            logger.exception(f"Failed to render badge for {cache_key}.")
            return self._error_badge(RENDER_ERROR_MESSAGE)

        # Every success except custom badges, whose message the key cannot tell apart.
        if cacheable:
            await self.cache.put(cache_key, svg)
        return self._svg(svg)
