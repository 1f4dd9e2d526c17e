# lingua_relay/runtime_state/sessions.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Runtime Session State
------------------------------------

This module implements the process-local session store for the relay.

Purpose
~~~~~~~
- Track per-session conversation history (user + assistant turns).
- Track the upstream continuation tokens (response ids), one per completed
  assistant turn, so follow-up messages chain on `previous_response_id`
  instead of resending the whole history.

Design notes
~~~~~~~~~~~~
- In-memory only. Sessions live as long as the process; there is no
  persistence, no TTL and no eviction.
- Assumes a single worker process. Every session has its own asyncio.Lock;
  the relay holds it across the whole read-modify-append sequence of a turn
  so two concurrent calls on one session cannot interleave.
- An unknown session id is an error (SessionNotFoundError), never an
  implicitly created empty session.
"""

from __future__ import annotations

import asyncio
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from lingua_relay.core.errors import SessionNotFoundError
from lingua_relay.core.types import Role
from lingua_relay.utils import get_logger


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logger = get_logger("lingua_relay.runtime_state")


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class SessionTurn(BaseModel):
    """One turn in the conversation history."""

    role: Role
    content: str
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionData(BaseModel):
    """
    Per-session state.

    Attributes
    ----------
    session_id:
        Unique key for the session, generated by SessionStore.create().
    created_at:
        When this session was created.
    messages:
        Conversation turns in insertion order (append-only).
    response_ids:
        Upstream continuation tokens, one per completed assistant turn.
    """

    session_id: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    messages: List[SessionTurn] = Field(default_factory=list)
    response_ids: List[str] = Field(default_factory=list)

    @property
    def assistant_turns(self) -> int:
        return sum(1 for turn in self.messages if turn.role == "assistant")

    @property
    def last_response_id(self) -> Optional[str]:
        return self.response_ids[-1] if self.response_ids else None


# ---------------------------------------------------------------------------
# Session store implementation
# ---------------------------------------------------------------------------

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 9


def _new_session_id() -> str:
    """`session_<epoch-ms>_<9 random base36 chars>`."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionStore:
    """
    In-memory session store for the relay.

    All public methods that take a session id raise SessionNotFoundError for
    ids this store never issued.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionData] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(self) -> str:
        """Insert an empty session and return its new, never-reused id."""
        session_id = _new_session_id()
        while session_id in self._sessions:
            session_id = _new_session_id()

        self._sessions[session_id] = SessionData(session_id=session_id)
        self._locks[session_id] = asyncio.Lock()
        logger.info("[SessionStore] Created session %s", session_id)
        return session_id

    def exists(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> SessionData:
        """Return the SessionData for `session_id`."""
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def lock(self, session_id: str) -> asyncio.Lock:
        """Per-session lock serialising turns on the same conversation."""
        self.get(session_id)
        return self._locks[session_id]

    def append_user_turn(self, session_id: str, text: str) -> None:
        session = self.get(session_id)
        session.messages.append(SessionTurn(role="user", content=text))
        logger.debug(
            "[SessionStore] %s: user turn #%d recorded",
            session_id,
            len(session.messages),
        )

    def append_assistant_turn(
        self,
        session_id: str,
        text: str,
        continuation_token: str,
    ) -> None:
        """Record an assistant reply together with its upstream response id."""
        session = self.get(session_id)
        session.messages.append(SessionTurn(role="assistant", content=text))
        session.response_ids.append(continuation_token)
        logger.debug(
            "[SessionStore] %s: assistant turn committed (response_id=%s)",
            session_id,
            continuation_token,
        )

    def last_continuation_token(self, session_id: str) -> Optional[str]:
        return self.get(session_id).last_response_id

    def clear(self) -> None:
        """Drop every session (tests / admin use)."""
        self._sessions.clear()
        self._locks.clear()


# Global instance used by the rest of the app
session_store = SessionStore()
