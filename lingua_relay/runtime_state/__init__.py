"""
Runtime state package for the Lingua Relay server.

Tracks per-session conversation state so follow-up messages keep their
context. Typical usage:

    from lingua_relay.runtime_state import session_store

    session_id = session_store.create()
    session_store.append_user_turn(session_id, "Hello")
    previous = session_store.last_continuation_token(session_id)
    # ... call upstream with previous_response_id=previous ...
    session_store.append_assistant_turn(session_id, reply_text, response_id)
"""

from .sessions import (
    SessionTurn,
    SessionData,
    SessionStore,
    session_store,
)

__all__ = [
    "SessionTurn",
    "SessionData",
    "SessionStore",
    "session_store",
]
