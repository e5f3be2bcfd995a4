"""Shared data structures used across modules."""
from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

MAX_CONTENT_LENGTH = 50_000
SCRAPE_FAILED_MESSAGE = "Failed to scrape URL"


class Headings(BaseModel):
    model_config = ConfigDict(frozen=True)

    h1: StrictStr
    h2: StrictStr


class ScrapedContent(BaseModel):
    """Text extracted from a single web page.

    Serialised field names (``metaDescription``, ``cachedAt``) are the ones
    persisted in the cache and returned over HTTP. Validation is strict so a
    cached payload with the wrong shape is rejected instead of coerced.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: StrictStr
    title: StrictStr
    headings: Headings
    meta_description: StrictStr = Field(alias="metaDescription")
    content: StrictStr = Field(max_length=MAX_CONTENT_LENGTH)
    error: Optional[StrictStr]
    cached_at: Optional[StrictInt] = Field(default=None, alias="cachedAt", ge=0)

    @model_validator(mode="after")
    def _failure_carries_no_text(self) -> "ScrapedContent":
        if self.error is not None and any(
            (self.title, self.meta_description, self.content, self.headings.h1, self.headings.h2)
        ):
            raise ValueError("a failed scrape cannot carry extracted text")
        return self

    @classmethod
    def failed(cls, url: str) -> "ScrapedContent":
        return cls(
            url=url,
            title="",
            headings=Headings(h1="", h2=""),
            meta_description="",
            content="",
            error=SCRAPE_FAILED_MESSAGE,
        )

    @property
    def ok(self) -> bool:
        return self.error is None

    def with_cached_at(self, timestamp_ms: int) -> "ScrapedContent":
        """Return a copy stamped with the cache write time."""

        return self.model_copy(update={"cached_at": timestamp_ms})

    def to_payload(self) -> dict[str, Any]:
        # cachedAt is omitted entirely on results that never went through the cache
        exclude = {"cached_at"} if self.cached_at is None else None
        return self.model_dump(by_alias=True, exclude=exclude)


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str
    messages: List[ChatMessage] = Field(default_factory=list)


class ChatReply(BaseModel):
    message: str
