# lingua_relay/core/types.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Shared type helpers
----------------------------------
Small shared type definitions used across the core:

- Role            : "user" | "assistant"
- UpstreamRequest : everything one upstream call needs
- UpstreamReply   : result of a non-streaming upstream call
- StreamEvent     : closed union of the upstream streaming events the
                    relay understands (Created / Delta / Done / Failed)
- StreamState     : lifecycle of one streaming relay call
- RelayResult     : what the sync relay hands back to the router
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Union

Role = Literal["user", "assistant"]


# ---------------------------------------------------------------------------
# Upstream call shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UpstreamRequest:
    """
    One turn to send upstream.

    Attributes
    ----------
    instructions:
        Language policy text (system-level instructions).
    input:
        The user message, already wrapped with the target-language reminder.
    previous_response_id:
        Continuation token of the last completed assistant turn, or None on
        the first turn of a session.
    temperature / max_output_tokens:
        Generation parameters from the caller.
    """

    instructions: str
    input: str
    previous_response_id: Optional[str]
    temperature: float
    max_output_tokens: int


@dataclass(frozen=True)
class UpstreamReply:
    response_id: str
    output_text: str


# ---------------------------------------------------------------------------
# Streaming events (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StreamCreated:
    """Upstream accepted the request and assigned a response id."""

    response_id: str


@dataclass(frozen=True)
class StreamDelta:
    """One incremental chunk of output text."""

    text: str


@dataclass(frozen=True)
class StreamDone:
    """Output text is complete. May carry the response id as well."""

    response_id: Optional[str] = None


@dataclass(frozen=True)
class StreamFailed:
    """Upstream reported an error inside the stream."""

    message: str


StreamEvent = Union[StreamCreated, StreamDelta, StreamDone, StreamFailed]


class StreamState(str, Enum):
    STARTED = "started"
    RECEIVING = "receiving"
    COMPLETED = "completed"
    FAILED = "failed"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.COMPLETED, StreamState.FAILED, StreamState.ABANDONED)


# ---------------------------------------------------------------------------
# Relay result
# ---------------------------------------------------------------------------


@dataclass
class RelayResult:
    """
    Result of one synchronous relay call.

    Attributes
    ----------
    reply_text:
        Assistant reply (stripped).
    response_id:
        Upstream-assigned id, now the session's latest continuation token.
    """

    reply_text: str
    response_id: str
