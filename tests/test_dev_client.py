"""
Tests for the dev console client, against an httpx.MockTransport.
"""

import json

import httpx
import pytest

from lingua_relay.dev_client import RelayClient, RelayClientError, parse_args


def _handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/conversation/start":
        return httpx.Response(200, json={"sessionId": "session_1_abc"})

    body = json.loads(request.content)
    if body["sessionId"] != "session_1_abc":
        return httpx.Response(404, json={"error": "Conversation not found"})

    if request.url.path == "/api/conversation/message":
        return httpx.Response(200, json={"message": "Bonjour", "responseId": "r1"})
    if request.url.path == "/api/conversation/message/stream":
        return httpx.Response(200, text="Bonjour", headers={"Content-Type": "text/plain"})
    return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def relay_client():
    with httpx.Client(base_url="http://relay.test", transport=httpx.MockTransport(_handler)) as http:
        yield RelayClient(http)


class TestRelayClient:
    def test_start_send_and_stream(self, relay_client: RelayClient) -> None:
        session_id = relay_client.start()
        payload = relay_client.build_payload(session_id, "Hello", "fr")

        assert session_id == "session_1_abc"
        assert relay_client.send(payload) == {"message": "Bonjour", "responseId": "r1"}
        assert "".join(relay_client.stream(payload)) == "Bonjour"

    def test_error_envelope_is_raised(self, relay_client: RelayClient) -> None:
        payload = relay_client.build_payload("session_other", "Hello", "fr")

        with pytest.raises(RelayClientError) as exc_info:
            relay_client.send(payload)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Conversation not found"

        with pytest.raises(RelayClientError):
            list(relay_client.stream(payload))

    def test_optional_parameters_only_sent_when_given(self) -> None:
        assert RelayClient.build_payload("s", "m", "ja") == {
            "sessionId": "s",
            "message": "m",
            "targetLang": "ja",
        }
        assert RelayClient.build_payload("s", "m", "ja", 0.5, 64)["maxTokens"] == 64


def test_parse_args_defaults() -> None:
    args = parse_args([])

    assert args.server == "http://127.0.0.1:8000"
    assert args.lang == "en"
    assert args.stream is True
    assert parse_args(["--no-stream", "--lang", "ar"]).stream is False
