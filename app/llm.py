"""Chat-completion client used to answer questions about scraped pages."""
from __future__ import annotations

import logging
import os
import time
from typing import Sequence

from openai import APIError, OpenAI, RateLimitError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .schemas import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama-3.1-8b-instant"

DEFAULT_CHAT_SYSTEM_PROMPT = (
    "You are a helpful AI assistant. Format your responses using markdown for better readability. "
    "Use bullet points, headers, and code blocks where appropriate. Keep your responses concise "
    "and well-structured. Base your responses only on the context text that you have been provided."
)


def _system_prompt() -> str:
    return os.getenv("CHAT_SYSTEM_PROMPT", DEFAULT_CHAT_SYSTEM_PROMPT)


def _get_client() -> OpenAI:
    api_key = os.getenv("GROQ_API_KEY")
    if not api_key:
        raise RuntimeError("GROQ_API_KEY is not configured.")
    return OpenAI(api_key=api_key, base_url=os.getenv("GROQ_BASE_URL", DEFAULT_BASE_URL))


def _model_name() -> str:
    """Return the configured chat model name."""

    value = os.getenv("GROQ_MODEL", DEFAULT_MODEL)
    return value.strip()


def _llm_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(4),
        wait=wait_exponential(multiplier=2, min=1, max=16),
        retry=retry_if_exception_type((RateLimitError, APIError)),
    )


def build_messages(history: Sequence[ChatMessage]) -> list[dict[str, str]]:
    messages = [{"role": "system", "content": _system_prompt()}]
    messages.extend({"role": message.role, "content": message.content} for message in history)
    return messages


@_llm_retry()
def get_chat_response(history: Sequence[ChatMessage]) -> str:
    """Send the conversation, prefixed with the system prompt, to the model."""
    client = _get_client()
    model = _model_name()
    messages = build_messages(history)
    logger.debug("Sending %d messages to %s", len(messages), model)
    start = time.perf_counter()
    response = client.chat.completions.create(model=model, messages=messages)
    content = response.choices[0].message.content or ""
    logger.info("Chat completion from %s in %.2fs", model, time.perf_counter() - start)
    logger.debug("Chat completion response: %s", content)
    return content
