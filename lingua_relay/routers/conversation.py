# lingua_relay/routers/conversation.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — /api/conversation router
---------------------------------------
Thin HTTP layer over ConversationRelay.

    POST /api/conversation/start           -> {"sessionId"}
    POST /api/conversation/message         -> {"message", "responseId"}
    POST /api/conversation/message/stream  -> text/plain stream of deltas

Errors are raised as RelayError subclasses and turned into
{"error": "..."} envelopes by the handlers registered in main.py. Once a
stream has started, an upstream failure just ends the body early.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from lingua_relay.core.errors import ConfigurationError
from lingua_relay.core.relay import CompletionUpstream, ConversationRelay
from lingua_relay.models import (
    ErrorResponse,
    MessageRequest,
    MessageResponse,
    StartConversationResponse,
)
from lingua_relay.runtime_state import SessionStore, session_store

router = APIRouter(prefix="/api/conversation", tags=["conversation"])
logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_session_store() -> SessionStore:
    return session_store


def get_upstream(request: Request) -> CompletionUpstream:
    """The process-wide upstream client created by the app lifespan."""
    upstream = getattr(request.app.state, "upstream", None)
    if upstream is None:
        raise ConfigurationError("Upstream client was not initialised (lifespan did not run).")
    return upstream


def get_relay(
    store: SessionStore = Depends(get_session_store),
    upstream: CompletionUpstream = Depends(get_upstream),
) -> ConversationRelay:
    """Relay bound to the global store and the shared upstream client."""
    return ConversationRelay(store, upstream)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/start", response_model=StartConversationResponse, response_model_by_alias=True)
async def start_conversation(
    store: SessionStore = Depends(get_session_store),
) -> StartConversationResponse:
    """Create an empty session and return its id."""
    return StartConversationResponse(session_id=store.create())


@router.post(
    "/message",
    response_model=MessageResponse,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
)
async def send_message(
    body: MessageRequest,
    relay: ConversationRelay = Depends(get_relay),
) -> MessageResponse:
    """Relay one message and return the whole reply."""
    logger.info(
        "[/message] session_id=%s lang=%s temperature=%s max_tokens=%s",
        body.session_id,
        body.target_lang,
        body.temperature,
        body.max_tokens,
    )
    result = await relay.send(
        body.session_id,
        body.message,
        body.target_lang,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
    )
    return MessageResponse(message=result.reply_text, response_id=result.response_id)


@router.post("/message/stream", responses=_ERROR_RESPONSES)
async def stream_message(
    body: MessageRequest,
    relay: ConversationRelay = Depends(get_relay),
) -> StreamingResponse:
    """
    Relay one message and stream the reply as raw text chunks.

    Request-level errors (400/404/500) are raised before streaming starts.
    """
    logger.info(
        "[/message/stream] session_id=%s lang=%s temperature=%s max_tokens=%s",
        body.session_id,
        body.target_lang,
        body.temperature,
        body.max_tokens,
    )
    pending = relay.open_stream(
        body.session_id,
        body.message,
        body.target_lang,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
    )
    return StreamingResponse(
        pending,
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": "no-cache"},
    )
