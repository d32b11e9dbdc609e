import asyncio
import logging
import time
from typing import Callable, Dict, Optional, Tuple

from repo_badge.domain.models import BadgeType

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300  # Seconds a rendered badge stays fresh

class ResponseCache:
    """
    Process-wide in-memory store of rendered badges with a fixed time-to-live.

    Entries are written once per successful resolution and never invalidated, only expired.
    Expired entries are never served: `get` evicts them lazily and `sweep` reclaims the rest.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._store: Dict[str, Tuple[float, str]] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def make_key(owner: str, repo: str, badge_type: BadgeType) -> str:
        return f"{owner}/{repo}/{badge_type.value}"

    def __len__(self) -> int:
        return len(self._store)

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            expires_at, svg = entry
            if self._clock() >= expires_at:
                del self._store[key]
                return None
            return svg

    async def put(self, key: str, svg: str) -> None:
        async with self._lock:
            self._store[key] = (self._clock() + self.ttl, svg)

    async def sweep(self) -> int:
        """Removes every expired entry and returns how many were dropped."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, (expires_at, _) in self._store.items() if now >= expires_at]
            for key in expired:
                del self._store[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired badge(s) from the cache.")
        return len(expired)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()

