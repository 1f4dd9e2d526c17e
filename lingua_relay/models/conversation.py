# lingua_relay/models/conversation.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Conversation API models
--------------------------------------
Request/response payloads for the /api/conversation/* endpoints.

The wire format is camelCase (sessionId, targetLang, maxTokens, responseId)
to stay compatible with existing front-ends; Python code uses snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lingua_relay.core.config import settings


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartConversationResponse(_CamelModel):
    session_id: str = Field(..., examples=["session_1760790000000_k3j9x0q2a"])


class MessageRequest(_CamelModel):
    """
    Body of POST /api/conversation/message and /message/stream.

    Fields
    ------
    session_id:
        Id returned by /api/conversation/start.
    message:
        User text, any language.
    target_lang:
        Language the reply must be in (en, fr, es, ja, ar). Checked by the
        relay's language policy, so an unknown code is a 400 like any other
        invalid input.
    temperature / max_tokens:
        Generation parameters forwarded upstream.
    """

    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    target_lang: str = Field(..., min_length=1, examples=["fr"])
    temperature: float = Field(default=settings.default_temperature, ge=0.0, le=2.0)
    max_tokens: int = Field(default=settings.default_max_tokens, ge=1)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "sessionId": "session_1760790000000_k3j9x0q2a",
                    "message": "Hello",
                    "targetLang": "fr",
                    "temperature": 0.3,
                    "maxTokens": 128,
                }
            ]
        },
    )


class MessageResponse(_CamelModel):
    message: str
    response_id: str


class ErrorResponse(BaseModel):
    error: str
