# lingua_relay/core/errors.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Error taxonomy
-----------------------------
Every failure the relay core can report to a caller is one of these:

    InvalidRequestError   -> 400  (missing fields, unsupported language)
    SessionNotFoundError  -> 404  (unknown session id)
    ConfigurationError    -> 500  (missing upstream credential)
    UpstreamFailureError  -> 500  (network / auth / quota / bad payload)

`main.py` registers one exception handler for RelayError that turns any of
them into the JSON envelope {"error": "<public_message>"}. For streaming
calls an UpstreamFailureError raised mid-stream simply ends the body.
"""

from __future__ import annotations

from typing import Optional


class RelayError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.public_message
        super().__init__(self.detail)


class InvalidRequestError(RelayError):
    status_code = 400
    public_message = "Invalid request"


class UnsupportedLanguageError(InvalidRequestError):
    """Raised when a target language code is outside the supported set."""

    def __init__(self, code: object) -> None:
        self.code = code
        super().__init__(f"Unsupported target language: {code!r}")


class SessionNotFoundError(RelayError):
    status_code = 404
    public_message = "Conversation not found"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id!r}")


class ConfigurationError(RelayError):
    status_code = 500
    public_message = "Server missing OpenAI API key"


class UpstreamFailureError(RelayError):
    status_code = 500
    public_message = "Upstream completion failed"
