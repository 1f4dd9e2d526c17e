"""
Shared test fixtures for the relay test suite.

Provides: a fresh SessionStore, a recording stub upstream, a relay wired to
both, and a FastAPI TestClient with the relay dependencies overridden.
"""

import asyncio
import os
from typing import List, Optional, Sequence

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient

from lingua_relay.core.errors import ConfigurationError
from lingua_relay.core.relay import ConversationRelay
from lingua_relay.core.types import UpstreamReply, UpstreamRequest
from lingua_relay.runtime_state import SessionStore


class StubUpstream:
    """
    In-memory stand-in for the OpenAI provider.

    - complete() pops the next queued reply (or raises `error`).
    - stream() yields the queued events; an Exception instance in the list
      is raised at that position.
    Every request is recorded in `requests`.
    """

    def __init__(
        self,
        replies: Optional[Sequence[UpstreamReply]] = None,
        events: Optional[Sequence[object]] = None,
        error: Optional[Exception] = None,
        configured: bool = True,
    ) -> None:
        self.replies: List[UpstreamReply] = list(replies or [])
        self.events: List[object] = list(events or [])
        self.error = error
        self.configured = configured
        self.requests: List[UpstreamRequest] = []
        self.stream_closed = False

    @property
    def called(self) -> bool:
        return bool(self.requests)

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("OPENAI_API_KEY is not set.")

    async def complete(self, request: UpstreamRequest) -> UpstreamReply:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)

    async def stream(self, request: UpstreamRequest):
        self.requests.append(request)
        try:
            for event in self.events:
                await asyncio.sleep(0)
                if isinstance(event, Exception):
                    raise event
                yield event
        finally:
            self.stream_closed = True


@pytest.fixture
def store() -> SessionStore:
    """Provide an empty session store."""
    return SessionStore()


@pytest.fixture
def upstream() -> StubUpstream:
    """Provide a stub upstream with nothing queued."""
    return StubUpstream()


@pytest.fixture
def relay(store: SessionStore, upstream: StubUpstream) -> ConversationRelay:
    """Provide a relay wired to the store and stub upstream."""
    return ConversationRelay(store, upstream)


@pytest.fixture
def session_id(store: SessionStore) -> str:
    """Provide a freshly started session."""
    return store.create()


async def collect(stream) -> List[str]:
    """Drain a PendingStream into a list of chunks."""
    return [chunk async for chunk in stream]


@pytest.fixture
def client(store: SessionStore, upstream: StubUpstream):
    """Provide a TestClient whose relay uses the stub upstream."""
    from lingua_relay.main import create_app
    from lingua_relay.routers.conversation import get_relay, get_session_store

    app = create_app()
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_relay] = lambda: ConversationRelay(store, upstream)

    with TestClient(app) as test_client:
        yield test_client
