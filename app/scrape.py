"""Page fetching and text extraction utilities."""
from __future__ import annotations

import logging
import os
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup

from .schemas import MAX_CONTENT_LENGTH, Headings, ScrapedContent

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "PageDigestBot/1.0"
DEFAULT_FETCH_TIMEOUT = 15.0
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe"]
CONTENT_BLOCK_SELECTOR = '[class*="content"], [id*="content"]'

_WHITESPACE_RE = re.compile(r"\s+")


class FetchError(RuntimeError):
    """Raised when a page cannot be downloaded as HTML."""


def clean_text(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def _fetch_timeout() -> float:
    raw = os.getenv("SCRAPE_FETCH_TIMEOUT")
    if not raw:
        return DEFAULT_FETCH_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning(
            "Invalid SCRAPE_FETCH_TIMEOUT value %s; falling back to %s",
            raw,
            DEFAULT_FETCH_TIMEOUT,
        )
        return DEFAULT_FETCH_TIMEOUT
    return value if value > 0 else DEFAULT_FETCH_TIMEOUT


class PageFetcher:
    """Downloads a single page over HTTP.

    One attempt per call, bounded by ``timeout`` seconds. Anything other than
    a successful HTML response is reported as :class:`FetchError`.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout if timeout is not None else _fetch_timeout()
        self._user_agent = user_agent or os.getenv("SCRAPE_USER_AGENT", DEFAULT_USER_AGENT)

    @property
    def timeout(self) -> float:
        return self._timeout

    def fetch(self, url: str) -> str:
        try:
            response = self._session.get(
                url,
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                allow_redirects=True,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Request for {url} failed: {exc}") from exc

        content_type = response.headers.get("Content-Type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type and media_type not in HTML_CONTENT_TYPES:
            raise FetchError(f"Unexpected content type {media_type!r} for {url}")

        return response.text


def _joined_text(soup: BeautifulSoup, selector: str) -> str:
    return " ".join(tag.get_text() for tag in soup.select(selector))


def extract_page_content(url: str, html: str) -> ScrapedContent:
    """Parse HTML and build the cleaned content record for ``url``.

    Parser errors are logged and turned into the failure record; this never
    raises.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")

        for tag in soup(NON_CONTENT_TAGS):
            tag.decompose()

        title = "".join(tag.get_text() for tag in soup.find_all("title"))
        meta_description = ""
        meta_tag = soup.find("meta", attrs={"name": "description"})
        if meta_tag and meta_tag.get("content"):
            meta_description = meta_tag["content"]

        h1 = _joined_text(soup, "h1")
        h2 = _joined_text(soup, "h2")
        article_text = _joined_text(soup, "article")
        main_text = _joined_text(soup, "main")
        content_text = _joined_text(soup, CONTENT_BLOCK_SELECTOR)
        paragraphs = _joined_text(soup, "p")
        list_items = _joined_text(soup, "li")

        combined = " ".join(
            [
                title,
                meta_description,
                h1,
                h2,
                article_text,
                main_text,
                content_text,
                paragraphs,
                list_items,
            ]
        )

        return ScrapedContent(
            url=url,
            title=clean_text(title),
            headings=Headings(h1=clean_text(h1), h2=clean_text(h2)),
            meta_description=clean_text(meta_description),
            content=clean_text(combined)[:MAX_CONTENT_LENGTH],
            error=None,
        )
    except Exception as exc:
        logger.error("Failed to extract content from %s: %s", url, exc, exc_info=True)
        return ScrapedContent.failed(url)
