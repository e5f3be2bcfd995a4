"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
import os
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from .chat import Completer, answer_message
from .llm import get_chat_response
from .logging_setup import configure_logging
from .schemas import ChatReply, ChatRequest
from .service import ScrapeService, build_scrape_service
from .urls import RegexUrlDetector, UrlDetector

LOG_FILE_PATH = configure_logging(os.getenv("LOG_LEVEL"))
logger = logging.getLogger(__name__)
logger.info("Logging configured. File output: %s", LOG_FILE_PATH)

app = FastAPI(title="Page Digest Chat")

CHAT_ERROR_MESSAGE = "Error"
CHAT_PATH = "/api/chat"


def get_scrape_service() -> ScrapeService:
    return build_scrape_service()


@lru_cache(maxsize=1)
def get_url_detector() -> UrlDetector:
    return RegexUrlDetector()


def get_completer() -> Completer:
    return get_chat_response


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> Response:
    # the chat route answers every failure with the generic reply
    if request.url.path == CHAT_PATH:
        logger.warning("Rejected chat request body: %s", exc.errors())
        return JSONResponse(ChatReply(message=CHAT_ERROR_MESSAGE).model_dump())
    return await request_validation_exception_handler(request, exc)


@app.post(CHAT_PATH, response_model=ChatReply)
def chat(
    payload: ChatRequest,
    service: ScrapeService = Depends(get_scrape_service),
    detector: UrlDetector = Depends(get_url_detector),
    complete: Completer = Depends(get_completer),
) -> ChatReply:
    logger.info("Message received: %s", payload.message)
    try:
        reply = answer_message(payload.message, payload.messages, service, detector, complete)
    except Exception as exc:
        logger.error("Failed to answer chat message: %s", exc, exc_info=True)
        return ChatReply(message=CHAT_ERROR_MESSAGE)
    return ChatReply(message=reply)


@app.get("/api/scrape")
def scrape(
    url: str = Query(..., min_length=1),
    service: ScrapeService = Depends(get_scrape_service),
) -> dict:
    if not url.lower().startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail="Only http(s) URLs can be scraped")
    return service.scrape(url).to_payload()
