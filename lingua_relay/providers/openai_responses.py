# lingua_relay/providers/openai_responses.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Upstream provider (OpenAI Responses API)
-------------------------------------------------------
This module is the ONLY place that knows how to talk to the upstream model.

Responsibilities:
- Build the `responses.create` payload (model, instructions, input,
  previous_response_id, temperature, max_output_tokens, store).
- Run one non-streaming call and return {id, output_text}.
- Run one streaming call and translate SDK events into the relay's closed
  event union (StreamCreated / StreamDelta / StreamDone / StreamFailed).
- Convert every SDK / transport exception into UpstreamFailureError.

It is used by lingua_relay/core/relay.py. There are no retries here: the SDK
client is built with max_retries=0 and every call is single-attempt.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, Optional

from openai import AsyncOpenAI, OpenAIError

from lingua_relay.core.config import Settings
from lingua_relay.core.errors import ConfigurationError, UpstreamFailureError
from lingua_relay.core.types import (
    StreamCreated,
    StreamDelta,
    StreamDone,
    StreamEvent,
    StreamFailed,
    UpstreamReply,
    UpstreamRequest,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Event classification
# ---------------------------------------------------------------------------


def _describe_error(error: Any) -> str:
    if error is None:
        return "unknown upstream error"
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    return f"{code}: {message}" if code else message


def classify_event(event: Any) -> Optional[StreamEvent]:
    """
    Map one SDK streaming event onto the relay's event union.

    Returns None for event kinds the relay does not care about
    (response.in_progress, output_item.added, content_part.*, ...).
    """
    kind = getattr(event, "type", None)
    response = getattr(event, "response", None)
    response_error = getattr(response, "error", None) if response is not None else None

    if kind == "error":
        return StreamFailed(_describe_error(event))

    if kind == "response.failed" or response_error is not None:
        return StreamFailed(_describe_error(response_error))

    if kind == "response.incomplete":
        details = getattr(response, "incomplete_details", None)
        reason = getattr(details, "reason", None) or "unknown reason"
        return StreamFailed(f"response incomplete: {reason}")

    if kind == "response.created":
        response_id = getattr(response, "id", None)
        return StreamCreated(response_id) if response_id else None

    if kind == "response.output_text.delta":
        delta = getattr(event, "delta", None)
        return StreamDelta(delta) if delta else None

    if kind == "response.output_text.done":
        return StreamDone()

    if kind == "response.completed":
        return StreamDone(response_id=getattr(response, "id", None))

    return None


# ---------------------------------------------------------------------------
# Upstream client
# ---------------------------------------------------------------------------


class OpenAIResponsesUpstream:
    """
    Thin async wrapper around `AsyncOpenAI().responses.create`.

    Parameters
    ----------
    api_key:
        Upstream credential. None/empty means "not configured":
        ensure_configured() raises ConfigurationError and no call is made.
    model:
        Model name sent with every request.
    base_url:
        Optional API base URL override.
    timeout_s:
        Per-request timeout handed to the SDK.
    store:
        Whether the upstream keeps responses (needed for previous_response_id).
    client:
        Pre-built AsyncOpenAI client (tests); built lazily otherwise.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        store: bool = True,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.store = store
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIResponsesUpstream":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout_s=settings.openai_timeout_s,
            store=settings.store_responses,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def ensure_configured(self) -> None:
        if self._client is None and not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set.")

    def _get_client(self) -> AsyncOpenAI:
        self.ensure_configured()
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout_s,
                max_retries=0,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the SDK client and its connection pool, if one was built."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    def build_payload(self, request: UpstreamRequest) -> Dict[str, Any]:
        """Keyword arguments for `responses.create` (without `stream`)."""
        return {
            "model": self.model,
            "temperature": request.temperature,
            "max_output_tokens": request.max_output_tokens,
            "instructions": request.instructions,
            "input": request.input,
            "previous_response_id": request.previous_response_id,
            "store": self.store,
        }

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    async def complete(self, request: UpstreamRequest) -> UpstreamReply:
        """
        One non-streaming round-trip.

        Raises
        ------
        ConfigurationError
            If no API key is configured.
        UpstreamFailureError
            On any SDK / transport failure or a response without an id.
        """
        client = self._get_client()
        try:
            response = await client.responses.create(**self.build_payload(request))
        except OpenAIError as exc:
            raise UpstreamFailureError(f"Upstream call failed: {exc}") from exc

        response_id = getattr(response, "id", None)
        if not response_id:
            raise UpstreamFailureError("Upstream response has no id.")

        return UpstreamReply(
            response_id=response_id,
            output_text=getattr(response, "output_text", None) or "",
        )

    async def stream(self, request: UpstreamRequest) -> AsyncIterator[StreamEvent]:
        """
        One streaming round-trip, yielding classified events in arrival order.

        Closing this generator early (aclose / cancellation) closes the
        underlying HTTP stream, so no further upstream reads happen.
        """
        client = self._get_client()
        try:
            sdk_stream = await client.responses.create(
                **self.build_payload(request),
                stream=True,
            )
        except OpenAIError as exc:
            raise UpstreamFailureError(f"Upstream stream could not start: {exc}") from exc

        try:
            async for raw_event in sdk_stream:
                event = classify_event(raw_event)
                if event is not None:
                    yield event
        except OpenAIError as exc:
            raise UpstreamFailureError(f"Upstream stream broke: {exc}") from exc
        finally:
            await sdk_stream.close()
