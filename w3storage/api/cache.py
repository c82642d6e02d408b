"""
Response cache keyed by request URL.

Stands in for the hosting platform's edge cache: entries live for the
``max-age`` they were stored with and the least recently used entries are
evicted once the cache is full.
"""

from collections.abc import Callable
from dataclasses import dataclass
import logging
import re
import time

from lru import LRU

from w3storage.config import CAR_CACHE_MAX_AGE, DEFAULT_CACHE_SIZE

logger = logging.getLogger(__name__)

_MAX_AGE_RE = re.compile(r"max-age=(\d+)")


@dataclass(frozen=True)
class CachedResponse:
    status_code: int
    headers: list[tuple[str, str]]
    body: bytes
    expires_at: float

    def header(self, name: str) -> str | None:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None


def max_age_of(headers: list[tuple[str, str]], default: int) -> int:
    """Read ``max-age`` from a Cache-Control header, falling back to ``default``."""
    for key, value in headers:
        if key.lower() == "cache-control":
            match = _MAX_AGE_RE.search(value)
            if match:
                return int(match.group(1))
    return default


class ResponseCache:
    """Bounded in-process cache of complete HTTP responses."""

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_SIZE,
        default_ttl: int = CAR_CACHE_MAX_AGE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the cache.

        Args:
            max_size: Maximum number of cached responses
            default_ttl: Lifetime in seconds for responses without max-age
            clock: Source of the current time, in seconds

        """
        self._entries = LRU(max_size)
        self.default_ttl = default_ttl
        self._clock = clock

    async def match(self, url: str) -> CachedResponse | None:
        """Cached response for ``url``, or None when absent or expired."""
        entry = self._entries.get(url)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            logger.debug(f"Cache entry expired: {url}")
            del self._entries[url]
            return None
        return entry

    async def put(
        self,
        url: str,
        status_code: int,
        headers: list[tuple[str, str]],
        body: bytes,
    ) -> None:
        """Store a complete response for ``url``."""
        ttl = max_age_of(headers, self.default_ttl)
        self._entries[url] = CachedResponse(
            status_code=status_code,
            headers=list(headers),
            body=body,
            expires_at=self._clock() + ttl,
        )
        logger.debug(f"Cached {len(body)} bytes for {url} (ttl={ttl}s)")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._entries
