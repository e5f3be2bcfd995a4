"""Detection of web links embedded in free-form chat messages."""
from __future__ import annotations

import re
from typing import List, Optional, Pattern, Protocol

URL_PATTERN = re.compile(
    r"https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)",
    re.IGNORECASE,
)


class UrlDetector(Protocol):
    def find_first(self, text: str) -> Optional[str]: ...

    def find_all(self, text: str) -> List[str]: ...


class RegexUrlDetector:
    """Finds http(s) URLs using a single regular expression.

    A miss is reported as ``None`` (or an empty list); callers treat it as
    "no page to scrape" rather than an error.
    """

    def __init__(self, pattern: Pattern[str] = URL_PATTERN) -> None:
        self._pattern = pattern

    def find_first(self, text: str) -> Optional[str]:
        match = self._pattern.search(text or "")
        return match.group(0) if match else None

    def find_all(self, text: str) -> List[str]:
        return [match.group(0) for match in self._pattern.finditer(text or "")]


def strip_url(text: str, url: Optional[str]) -> str:
    """Remove the first occurrence of ``url`` from ``text`` and trim it."""

    if not url:
        return text.strip()
    return text.replace(url, "", 1).strip()
