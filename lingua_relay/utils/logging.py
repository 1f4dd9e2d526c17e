# lingua_relay/utils/logging.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — logging utilities
--------------------------------
Central logging configuration plus per-session log context.

Every record that goes through the handler installed by setup_logging()
carries a `session_id` attribute: the conversation being relayed when the
record was emitted, or "-" outside of one. Bind it with:

    with session_log_context(session_id):
        logger.info("calling upstream")

which renders as

    2026-10-18 14:02:11 [INFO] lingua_relay.core.relay [session_1760..._k3j9x0q2a]: calling upstream
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_NO_SESSION = "-"
_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(session_id)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_session_id: ContextVar[str] = ContextVar("lingua_relay_session_id", default=_NO_SESSION)


class SessionContextFilter(logging.Filter):
    """Stamp the current session id onto each record (never drops records)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id.get()
        return True


@contextmanager
def session_log_context(session_id: str) -> Iterator[None]:
    """Attach `session_id` to every log record emitted inside the block."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


def current_session_id() -> str:
    return _session_id.get()


def setup_logging(
    *,
    debug: bool = False,
    level: Optional[int] = None,
) -> None:
    """
    Configure root logging for the process.

    Installs one stream handler using LOG_FORMAT and SessionContextFilter.
    If the root logger already has handlers (uvicorn --log-config, pytest),
    they are kept; only the level is applied and the filter attached, so
    `session_id` is available to any formatter that asks for it.
    """
    base_level = level if level is not None else (logging.DEBUG if debug else logging.INFO)

    root = logging.getLogger()
    root.setLevel(base_level)

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    for h in root.handlers:
        if not any(isinstance(f, SessionContextFilter) for f in h.filters):
            h.addFilter(SessionContextFilter())

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(
            os.getenv("LINGUA_RELAY_NOISY_LOG_LEVEL", "WARNING")
        )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
