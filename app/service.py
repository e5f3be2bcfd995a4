"""Scrape pipeline: cache lookup, fetch, extraction and cache write."""
from __future__ import annotations

import logging
import os
import time
from functools import lru_cache
from typing import Optional

from .cache import ScrapeCache, build_redis_client
from .schemas import ScrapedContent
from .scrape import FetchError, PageFetcher, extract_page_content

logger = logging.getLogger(__name__)


class ScrapeService:
    """Returns the content of one URL, served from cache when possible.

    :meth:`scrape` never raises. Failed scrapes come back as a record with
    ``error`` set and are never written to the cache.
    """

    def __init__(self, fetcher: PageFetcher, cache: Optional[ScrapeCache] = None) -> None:
        self.fetcher = fetcher
        self.cache = cache

    def scrape(self, url: str) -> ScrapedContent:
        start = time.perf_counter()
        logger.info("Starting scrape for %s", url)

        if self.cache is not None:
            cached = self.cache.get(url)
            if cached is not None:
                logger.info("Returning cached content for %s", url)
                return cached

        try:
            html = self.fetcher.fetch(url)
        except FetchError as exc:
            logger.error("Error scraping %s: %s", url, exc)
            return ScrapedContent.failed(url)

        content = extract_page_content(url, html)
        if not content.ok:
            return content

        if self.cache is not None:
            self.cache.set(content)

        logger.info(
            "Scraped %s (%d characters) in %.2fs",
            url,
            len(content.content),
            time.perf_counter() - start,
        )
        return content


@lru_cache(maxsize=1)
def build_scrape_service() -> ScrapeService:
    """Create the process-wide service from environment configuration."""

    cache = None
    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        cache = ScrapeCache(build_redis_client(redis_url))
    else:
        logger.warning("REDIS_URL is not configured; scraped content will not be cached")
    return ScrapeService(fetcher=PageFetcher(), cache=cache)
