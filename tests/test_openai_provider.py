"""
Tests for the OpenAI Responses provider.

The SDK client is replaced by a SimpleNamespace exposing
`responses.create`, so no network traffic happens.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from openai import OpenAIError

from lingua_relay.core.config import Settings
from lingua_relay.core.errors import ConfigurationError, UpstreamFailureError
from lingua_relay.core.types import (
    StreamCreated,
    StreamDelta,
    StreamDone,
    StreamFailed,
    UpstreamRequest,
)
from lingua_relay.providers import OpenAIResponsesUpstream, classify_event


def _event(kind: str, **fields) -> SimpleNamespace:
    return SimpleNamespace(type=kind, **fields)


class FakeSdkStream:
    """Mimics openai.AsyncStream: async-iterable with an async close()."""

    def __init__(self, events, error=None) -> None:
        self._events = list(events)
        self._error = error
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self._events:
            yield event
        if self._error is not None:
            raise self._error

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def request_() -> UpstreamRequest:
    return UpstreamRequest(
        instructions="respond in French",
        input="User message: Hello\n\nPlease respond in French only.",
        previous_response_id="r0",
        temperature=0.3,
        max_output_tokens=128,
    )


def _provider(create: AsyncMock) -> OpenAIResponsesUpstream:
    client = SimpleNamespace(responses=SimpleNamespace(create=create))
    return OpenAIResponsesUpstream(api_key="sk-test", model="gpt-4o-mini", client=client)


class TestClassifyEvent:
    def test_created(self) -> None:
        event = _event("response.created", response=SimpleNamespace(id="r1", error=None))

        assert classify_event(event) == StreamCreated("r1")

    def test_delta(self) -> None:
        assert classify_event(_event("response.output_text.delta", delta="Bon")) == StreamDelta("Bon")

    def test_empty_delta_is_dropped(self) -> None:
        assert classify_event(_event("response.output_text.delta", delta="")) is None

    def test_text_done(self) -> None:
        assert classify_event(_event("response.output_text.done", text="Bonjour")) == StreamDone()

    def test_response_completed_carries_id(self) -> None:
        event = _event("response.completed", response=SimpleNamespace(id="r1", error=None))

        assert classify_event(event) == StreamDone(response_id="r1")

    def test_error_event(self) -> None:
        event = _event("error", code="rate_limit_exceeded", message="slow down")

        assert classify_event(event) == StreamFailed("rate_limit_exceeded: slow down")

    def test_response_failed(self) -> None:
        error = SimpleNamespace(code="server_error", message="boom")
        event = _event("response.failed", response=SimpleNamespace(id="r1", error=error))

        assert classify_event(event) == StreamFailed("server_error: boom")

    def test_any_event_with_response_error_fails(self) -> None:
        error = SimpleNamespace(code=None, message="bad things")
        event = _event("response.in_progress", response=SimpleNamespace(id="r1", error=error))

        assert classify_event(event) == StreamFailed("bad things")

    def test_response_incomplete(self) -> None:
        response = SimpleNamespace(
            id="r1",
            error=None,
            incomplete_details=SimpleNamespace(reason="max_output_tokens"),
        )

        assert classify_event(_event("response.incomplete", response=response)) == StreamFailed(
            "response incomplete: max_output_tokens"
        )

    @pytest.mark.parametrize(
        "kind",
        ["response.in_progress", "response.output_item.added", "response.content_part.done"],
    )
    def test_irrelevant_events_are_dropped(self, kind: str) -> None:
        event = _event(kind, response=SimpleNamespace(id="r1", error=None))

        assert classify_event(event) is None


class TestComplete:
    @pytest.mark.asyncio
    async def test_sends_full_payload_and_returns_reply(self, request_: UpstreamRequest) -> None:
        create = AsyncMock(return_value=SimpleNamespace(id="r1", output_text="Bonjour"))

        reply = await _provider(create).complete(request_)

        assert reply.response_id == "r1"
        assert reply.output_text == "Bonjour"
        create.assert_awaited_once_with(
            model="gpt-4o-mini",
            temperature=0.3,
            max_output_tokens=128,
            instructions="respond in French",
            input="User message: Hello\n\nPlease respond in French only.",
            previous_response_id="r0",
            store=True,
        )

    @pytest.mark.asyncio
    async def test_sdk_error_becomes_upstream_failure(self, request_: UpstreamRequest) -> None:
        create = AsyncMock(side_effect=OpenAIError("invalid api key"))

        with pytest.raises(UpstreamFailureError) as exc_info:
            await _provider(create).complete(request_)

        assert isinstance(exc_info.value.__cause__, OpenAIError)
        assert create.await_count == 1

    @pytest.mark.asyncio
    async def test_response_without_id_is_a_failure(self, request_: UpstreamRequest) -> None:
        create = AsyncMock(return_value=SimpleNamespace(id=None, output_text="Hi"))

        with pytest.raises(UpstreamFailureError):
            await _provider(create).complete(request_)

    @pytest.mark.asyncio
    async def test_missing_api_key_is_a_configuration_error(
        self, request_: UpstreamRequest
    ) -> None:
        provider = OpenAIResponsesUpstream(api_key=None, model="gpt-4o-mini")

        with pytest.raises(ConfigurationError):
            provider.ensure_configured()
        with pytest.raises(ConfigurationError):
            await provider.complete(request_)


class TestStream:
    @pytest.mark.asyncio
    async def test_yields_classified_events_and_closes(self, request_: UpstreamRequest) -> None:
        sdk_stream = FakeSdkStream(
            [
                _event("response.created", response=SimpleNamespace(id="r1", error=None)),
                _event("response.in_progress", response=SimpleNamespace(id="r1", error=None)),
                _event("response.output_text.delta", delta="Bon"),
                _event("response.output_text.delta", delta="jour"),
                _event("response.output_text.done", text="Bonjour"),
            ]
        )
        create = AsyncMock(return_value=sdk_stream)

        events = [event async for event in _provider(create).stream(request_)]

        assert events == [
            StreamCreated("r1"),
            StreamDelta("Bon"),
            StreamDelta("jour"),
            StreamDone(),
        ]
        assert create.await_args.kwargs["stream"] is True
        assert sdk_stream.closed

    @pytest.mark.asyncio
    async def test_start_failure_becomes_upstream_failure(self, request_: UpstreamRequest) -> None:
        create = AsyncMock(side_effect=OpenAIError("connection refused"))

        with pytest.raises(UpstreamFailureError):
            async for _ in _provider(create).stream(request_):
                pass

    @pytest.mark.asyncio
    async def test_mid_stream_failure_closes_stream(self, request_: UpstreamRequest) -> None:
        sdk_stream = FakeSdkStream(
            [_event("response.output_text.delta", delta="Bon")],
            error=OpenAIError("stream reset"),
        )
        provider = _provider(AsyncMock(return_value=sdk_stream))
        received = []

        with pytest.raises(UpstreamFailureError):
            async for event in provider.stream(request_):
                received.append(event)

        assert received == [StreamDelta("Bon")]
        assert sdk_stream.closed

    @pytest.mark.asyncio
    async def test_early_close_closes_sdk_stream(self, request_: UpstreamRequest) -> None:
        sdk_stream = FakeSdkStream(
            [
                _event("response.output_text.delta", delta="Bon"),
                _event("response.output_text.delta", delta="jour"),
            ]
        )
        events = _provider(AsyncMock(return_value=sdk_stream)).stream(request_)

        await events.__anext__()
        await events.aclose()

        assert sdk_stream.closed


class TestClose:
    @pytest.mark.asyncio
    async def test_aclose_closes_the_sdk_client(self) -> None:
        close = AsyncMock()
        client = SimpleNamespace(close=close)
        provider = OpenAIResponsesUpstream(api_key="sk-test", model="gpt-4o-mini", client=client)

        await provider.aclose()

        close.assert_awaited_once()
        assert provider._client is None

    @pytest.mark.asyncio
    async def test_aclose_without_a_client_is_a_no_op(self) -> None:
        provider = OpenAIResponsesUpstream(api_key=None, model="gpt-4o-mini")

        await provider.aclose()

        assert provider._client is None


class TestFromSettings:
    def test_builds_from_settings(self) -> None:
        settings = Settings(
            openai_api_key="sk-abc",
            openai_model="gpt-4.1-mini",
            openai_timeout_s=5.0,
            store_responses=False,
        )

        provider = OpenAIResponsesUpstream.from_settings(settings)

        assert provider.api_key == "sk-abc"
        assert provider.model == "gpt-4.1-mini"
        assert provider.timeout_s == 5.0
        assert provider.build_payload(
            UpstreamRequest("i", "u", None, 0.1, 10)
        )["store"] is False
