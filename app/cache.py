"""Redis-backed cache for scraped page content."""
from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Callable, Optional, Protocol

import redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from .schemas import ScrapedContent

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "scrape:"
CACHE_KEY_URL_LENGTH = 100
CACHE_TTL_SECONDS = 7 * 24 * 60 * 60
MAX_CACHE_BYTES = 1_000_000
DEFAULT_SOCKET_TIMEOUT = 5.0


class CacheStore(Protocol):
    """Subset of the ``redis.Redis`` client used by :class:`ScrapeCache`."""

    def get(self, name: str) -> Any: ...

    def set(self, name: str, value: Any, ex: Optional[int] = None) -> Any: ...

    def delete(self, *names: str) -> Any: ...


def cache_key(url: str) -> str:
    """Return the namespaced key for ``url``.

    Only the first 100 characters of the URL are used, so long URLs sharing
    that prefix share one entry.
    """

    return f"{CACHE_KEY_PREFIX}{url[:CACHE_KEY_URL_LENGTH]}"


def _socket_timeout() -> float:
    raw = os.getenv("CACHE_SOCKET_TIMEOUT")
    if not raw:
        return DEFAULT_SOCKET_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning(
            "Invalid CACHE_SOCKET_TIMEOUT value %s; falling back to %s",
            raw,
            DEFAULT_SOCKET_TIMEOUT,
        )
        return DEFAULT_SOCKET_TIMEOUT


def build_redis_client(url: str) -> redis.Redis:
    timeout = _socket_timeout()
    return redis.Redis.from_url(
        url,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


class ScrapeCache:
    """Reads and writes :class:`ScrapedContent` records in a key-value store.

    Every read is validated; entries that do not decode or do not match the
    record shape are deleted and reported as a miss. Store errors never
    propagate: reads degrade to a miss and writes are skipped.
    """

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = CACHE_TTL_SECONDS,
        max_bytes: int = MAX_CACHE_BYTES,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._ttl_seconds = ttl_seconds
        self._max_bytes = max_bytes
        self._clock = clock

    def get(self, url: str) -> Optional[ScrapedContent]:
        key = cache_key(url)
        logger.info("Checking cache for key: %s", key)
        try:
            raw = self._store.get(key)
        except RedisError as exc:
            logger.error("Cache retrieval error for %s: %s", url, exc)
            return None

        if raw is None:
            logger.info("Cache miss for %s", url)
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.error("JSON parse error for cached content of %s: %s", url, exc)
            self._evict(key)
            return None

        try:
            content = ScrapedContent.model_validate(data)
        except ValidationError as exc:
            logger.warning("Invalid cached content format for %s: %s", url, exc)
            self._evict(key)
            return None

        if content.cached_at is not None:
            age_ms = self._clock() - content.cached_at
            logger.info("Cache hit for %s (age %d minutes)", url, round(age_ms / 1000 / 60))
        else:
            logger.info("Cache hit for %s", url)
        return content

    def set(self, content: ScrapedContent) -> bool:
        """Store ``content`` and return whether an entry was written."""

        key = cache_key(content.url)
        stamped = content.with_cached_at(self._clock())
        try:
            # model_copy skips validation, so check the stamped record explicitly
            ScrapedContent.model_validate(stamped.model_dump(by_alias=True))
        except ValidationError as exc:
            logger.error("Refusing to cache invalid content for %s: %s", content.url, exc)
            return False

        serialised = json.dumps(stamped.to_payload(), ensure_ascii=False)
        size = len(serialised.encode("utf-8"))
        if size > self._max_bytes:
            logger.warning(
                "Refusing to cache content over size limit for %s (%d bytes)",
                content.url,
                size,
            )
            return False

        try:
            self._store.set(key, serialised, ex=self._ttl_seconds)
        except RedisError as exc:
            logger.error("Cache storage error for %s: %s", content.url, exc)
            return False

        logger.info(
            "Cached content for %s (%d bytes, TTL: %ss)",
            content.url,
            size,
            self._ttl_seconds,
        )
        return True

    def _evict(self, key: str) -> None:
        try:
            self._store.delete(key)
        except RedisError as exc:
            logger.error("Failed to evict cache key %s: %s", key, exc)
