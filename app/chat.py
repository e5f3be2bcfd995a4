"""Answering chat messages with the content of a linked page."""
from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence

from .schemas import ChatMessage, ScrapedContent
from .urls import UrlDetector, strip_url

logger = logging.getLogger(__name__)

Completer = Callable[[Sequence[ChatMessage]], str]


class PageScraper(Protocol):
    def scrape(self, url: str) -> ScrapedContent: ...


def build_user_prompt(query: str, content: str) -> str:
    return (
        f'Answer my question: "{query}"\n'
        "Based on the following content:\n"
        "<content>\n"
        f"  {content}\n"
        "</content>"
    )


def answer_message(
    message: str,
    history: Sequence[ChatMessage],
    scraper: PageScraper,
    detector: UrlDetector,
    complete: Completer,
) -> str:
    """Reply to ``message``, grounding the answer on the first URL it mentions."""

    url = detector.find_first(message)
    scraped_text = ""
    if url:
        logger.info("URL found in message: %s", url)
        result = scraper.scrape(url)
        if result.ok:
            scraped_text = result.content
        else:
            logger.warning("Answering without page content for %s: %s", url, result.error)

    query = strip_url(message, url)
    prompt = ChatMessage(role="user", content=build_user_prompt(query, scraped_text))
    return complete([*history, prompt])
