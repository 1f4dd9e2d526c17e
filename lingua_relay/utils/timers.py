# lingua_relay/utils/timers.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — timing utilities
-------------------------------
Lightweight helper for measuring how long an upstream round-trip or a
whole stream took, and logging it.
"""

from __future__ import annotations

import logging
import time
from contextlib import ContextDecorator
from typing import Optional


class Stopwatch(ContextDecorator):
    """
    Simple stopwatch context manager.

    Example:
        from lingua_relay.utils import Stopwatch, get_logger

        logger = get_logger(__name__)

        with Stopwatch("upstream completion", logger):
            await upstream.complete(request)

    This logs something like:
        upstream completion took 0.812 s
    """

    def __init__(
        self,
        label: str,
        logger: Optional[logging.Logger] = None,
        level: int = logging.INFO,
    ) -> None:
        self.label = label
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self._start: float = 0.0

    @property
    def elapsed(self) -> float:
        """Seconds since the stopwatch was entered."""
        return time.perf_counter() - self._start

    def __enter__(self) -> "Stopwatch":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:  # type: ignore[override]
        outcome = "failed after" if exc_type is not None else "took"
        self.logger.log(self.level, "%s %s %.3f s", self.label, outcome, self.elapsed)
