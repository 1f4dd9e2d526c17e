# lingua_relay/core/relay.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Conversation relay
---------------------------------
Forwards one conversational turn to the upstream model and hands the reply
back, either in one piece (send) or as a text stream (open_stream).

Per turn:

    validate input + resolve language policy      -> InvalidRequestError
    check the upstream credential                 -> ConfigurationError
    look up the session                           -> SessionNotFoundError
    --- session lock held from here ---
    append the user turn
    read the last continuation token
    call upstream (instructions, wrapped input, previous_response_id)
    append the assistant turn + response id       (only on success)

A failed upstream call leaves the user turn recorded without a reply.
Nothing is retried.

Streaming runs an explicit state machine (see PendingStream):

    STARTED -> RECEIVING -> COMPLETED | FAILED
    any non-terminal state -> ABANDONED  (consumer went away)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Protocol

from lingua_relay.core.errors import (
    InvalidRequestError,
    RelayError,
    UpstreamFailureError,
)
from lingua_relay.core.language import build_user_input, get_language_instructions
from lingua_relay.core.types import (
    RelayResult,
    StreamCreated,
    StreamDelta,
    StreamDone,
    StreamEvent,
    StreamFailed,
    StreamState,
    UpstreamReply,
    UpstreamRequest,
)
from lingua_relay.runtime_state import SessionStore
from lingua_relay.utils import Stopwatch, session_log_context

logger = logging.getLogger(__name__)


class CompletionUpstream(Protocol):
    """What the relay needs from an upstream provider."""

    def ensure_configured(self) -> None: ...

    async def complete(self, request: UpstreamRequest) -> UpstreamReply: ...

    def stream(self, request: UpstreamRequest) -> AsyncIterator[StreamEvent]: ...


@dataclass(frozen=True)
class _TurnPlan:
    """A validated turn, ready to be sent once the continuation token is known."""

    session_id: str
    message: str
    target_lang: str
    instructions: str
    user_input: str
    temperature: float
    max_tokens: int

    def to_request(self, previous_response_id: Optional[str]) -> UpstreamRequest:
        return UpstreamRequest(
            instructions=self.instructions,
            input=self.user_input,
            previous_response_id=previous_response_id,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
        )


# ---------------------------------------------------------------------------
# Streaming state machine
# ---------------------------------------------------------------------------


class PendingStream:
    """
    State of one streaming relay call.

    Iterate it (once) with `async for chunk in pending` to drive the call:
    every text delta is yielded as soon as it arrives. On a clean finish the
    accumulated text is committed to the session; on an upstream error the
    iterator raises UpstreamFailureError and nothing is committed.
    """

    def __init__(
        self,
        store: SessionStore,
        upstream: CompletionUpstream,
        plan: _TurnPlan,
    ) -> None:
        self._store = store
        self._upstream = upstream
        self._plan = plan
        self._consumed = False

        self.state: StreamState = StreamState.STARTED
        self.response_id: Optional[str] = None
        self.chunks: List[str] = []

    @property
    def session_id(self) -> str:
        return self._plan.session_id

    @property
    def text(self) -> str:
        return "".join(self.chunks)

    def __aiter__(self) -> AsyncIterator[str]:
        if self._consumed:
            raise RuntimeError("A PendingStream can only be consumed once.")
        self._consumed = True
        return self._run()

    def _transition(self, new_state: StreamState) -> None:
        logger.debug(
            "[stream %s] %s -> %s", self.session_id, self.state.value, new_state.value
        )
        self.state = new_state

    def _fail(self, reason: str) -> UpstreamFailureError:
        self._transition(StreamState.FAILED)
        logger.warning("[stream %s] failed: %s", self.session_id, reason)
        return UpstreamFailureError(reason)

    async def _run(self) -> AsyncIterator[str]:
        session_id = self.session_id

        async with self._store.lock(session_id):
            self._store.append_user_turn(session_id, self._plan.message)
            previous = self._store.last_continuation_token(session_id)
            events = self._upstream.stream(self._plan.to_request(previous))

            try:
                with Stopwatch(f"[stream {session_id}] upstream stream", logger):
                    async for event in events:
                        if self.state is StreamState.STARTED:
                            self._transition(StreamState.RECEIVING)

                        if isinstance(event, StreamCreated):
                            self.response_id = event.response_id
                        elif isinstance(event, StreamDelta):
                            self.chunks.append(event.text)
                            yield event.text
                        elif isinstance(event, StreamDone):
                            if self.response_id is None:
                                self.response_id = event.response_id
                            self._transition(StreamState.COMPLETED)
                            break
                        elif isinstance(event, StreamFailed):
                            raise self._fail(event.message)
                        else:
                            raise self._fail(f"unexpected upstream event {event!r}")

                if self.state is not StreamState.COMPLETED:
                    raise self._fail("upstream stream ended without a completion event")

            except (asyncio.CancelledError, GeneratorExit):
                self._transition(StreamState.ABANDONED)
                logger.info(
                    "[stream %s] consumer went away after %d chunks; nothing committed",
                    session_id,
                    len(self.chunks),
                )
                raise
            except RelayError as exc:
                if not self.state.is_terminal:
                    self._fail(exc.detail)
                raise
            except Exception as exc:
                raise self._fail(f"error while reading upstream stream: {exc}") from exc
            finally:
                aclose = getattr(events, "aclose", None)
                if aclose is not None:
                    await aclose()

            self._commit()

    def _commit(self) -> None:
        if self.response_id is None:
            logger.warning(
                "[stream %s] completed without a response id; assistant turn not recorded",
                self.session_id,
            )
            return
        self._store.append_assistant_turn(self.session_id, self.text, self.response_id)
        logger.info(
            "[stream %s] committed %d chars (response_id=%s)",
            self.session_id,
            len(self.text),
            self.response_id,
        )


# ---------------------------------------------------------------------------
# Relay
# ---------------------------------------------------------------------------


class ConversationRelay:
    """
    Relay between callers and the upstream model, backed by a SessionStore.

    Parameters
    ----------
    store:
        Session store holding history and continuation tokens.
    upstream:
        Provider implementing CompletionUpstream (OpenAIResponsesUpstream in
        production, stubs in tests).
    """

    def __init__(self, store: SessionStore, upstream: CompletionUpstream) -> None:
        self.store = store
        self.upstream = upstream

    def _prepare(
        self,
        session_id: str,
        message: str,
        target_lang: str,
        temperature: float,
        max_tokens: int,
    ) -> _TurnPlan:
        if not isinstance(session_id, str) or not session_id:
            raise InvalidRequestError("sessionId is required.")
        if not isinstance(message, str) or not message:
            raise InvalidRequestError("message must be a non-empty string.")
        if max_tokens < 1:
            raise InvalidRequestError("maxTokens must be at least 1.")

        instructions = get_language_instructions(target_lang)
        user_input = build_user_input(message, target_lang)

        self.upstream.ensure_configured()
        self.store.get(session_id)

        return _TurnPlan(
            session_id=session_id,
            message=message,
            target_lang=target_lang,
            instructions=instructions,
            user_input=user_input,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def send(
        self,
        session_id: str,
        message: str,
        target_lang: str,
        temperature: float = 0.3,
        max_tokens: int = 128,
    ) -> RelayResult:
        """
        Relay one turn and return the full reply.

        Raises
        ------
        InvalidRequestError, ConfigurationError, SessionNotFoundError
            Before anything is recorded or sent.
        UpstreamFailureError
            If the upstream call fails; the user turn stays recorded.
        """
        with session_log_context(session_id):
            plan = self._prepare(session_id, message, target_lang, temperature, max_tokens)

            async with self.store.lock(session_id):
                self.store.append_user_turn(session_id, message)
                previous = self.store.last_continuation_token(session_id)
                logger.info(
                    "[relay %s] lang=%s previous_response_id=%s",
                    session_id,
                    target_lang,
                    previous,
                )

                try:
                    with Stopwatch(f"[relay {session_id}] upstream completion", logger):
                        reply = await self.upstream.complete(plan.to_request(previous))
                except RelayError:
                    logger.warning("[relay %s] upstream call failed", session_id, exc_info=True)
                    raise
                except Exception as exc:
                    logger.exception("[relay %s] unexpected upstream error", session_id)
                    raise UpstreamFailureError(f"Upstream call failed: {exc}") from exc

                reply_text = reply.output_text.strip()
                self.store.append_assistant_turn(session_id, reply_text, reply.response_id)

        return RelayResult(reply_text=reply_text, response_id=reply.response_id)

    def open_stream(
        self,
        session_id: str,
        message: str,
        target_lang: str,
        temperature: float = 0.3,
        max_tokens: int = 128,
    ) -> PendingStream:
        """
        Validate a streaming turn and return the PendingStream that runs it.

        All request-level errors are raised here, before the first byte; the
        upstream call itself starts when the PendingStream is iterated.
        """
        with session_log_context(session_id):
            plan = self._prepare(session_id, message, target_lang, temperature, max_tokens)
            logger.info("[stream %s] lang=%s opening", session_id, target_lang)
        return PendingStream(self.store, self.upstream, plan)
