# lingua_relay/utils/__init__.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Utility toolbox
------------------------------
Shared helpers used across the relay server:

- logging   : central logging configuration + per-session log context
- timers    : small timing helper for upstream latency

    from lingua_relay.utils import setup_logging, get_logger, session_log_context
"""

from __future__ import annotations

from .logging import (  # noqa: F401
    SessionContextFilter,
    current_session_id,
    get_logger,
    session_log_context,
    setup_logging,
)

from .timers import (  # noqa: F401
    Stopwatch,
)
