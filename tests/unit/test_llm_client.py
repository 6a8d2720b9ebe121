from __future__ import annotations

import httpx
import pytest

from nl2sql.config import LLMConfig
from nl2sql.llm_client import GroqClient, LLMResponseFormatError, LLMTransportError, extract_message_content

from conftest import RecordingTransport, chat_reply, reply_with


def test_build_params_omits_temperature_by_default(llm_cfg: LLMConfig) -> None:
    client = GroqClient(llm_cfg, "test-key")

    payload = client.build_payload("hello")

    assert payload == {"model": "groq/compound", "messages": [{"role": "user", "content": "hello"}]}


def test_build_params_includes_temperature_when_provided(llm_cfg: LLMConfig) -> None:
    client = GroqClient(llm_cfg, "test-key")

    payload = client.build_payload("hello", temperature=0.1)

    assert payload["temperature"] == 0.1


@pytest.mark.asyncio
async def test_complete_sends_bearer_and_returns_content(make_client) -> None:
    transport = reply_with("  {\"sql\": \"SELECT 1\"}  ")
    client = make_client(transport)

    content = await client.complete("prompt text")

    assert content == '{"sql": "SELECT 1"}'
    request = transport.requests[0]
    assert str(request.url) == "https://llm.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["Content-Type"] == "application/json"
    assert transport.last_payload()["messages"] == [{"role": "user", "content": "prompt text"}]


@pytest.mark.asyncio
async def test_connection_error_is_transport_error(make_client) -> None:
    def _raise(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(RecordingTransport(_raise))

    with pytest.raises(LLMTransportError, match="connection refused"):
        await client.complete("prompt")


@pytest.mark.asyncio
async def test_http_error_status_is_transport_error(make_client) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(401, json={"error": "invalid api key"}))
    client = make_client(transport)

    with pytest.raises(LLMTransportError, match="HTTP 401"):
        await client.complete("prompt")


@pytest.mark.asyncio
async def test_non_json_body_is_transport_error(make_client) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(200, text="<html>bad gateway</html>"))
    client = make_client(transport)

    with pytest.raises(LLMTransportError, match="Response body is not JSON"):
        await client.complete("prompt")


@pytest.mark.asyncio
async def test_deeply_nested_body_is_transport_error(make_client) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(200, text="[" * 200000))
    client = make_client(transport)

    with pytest.raises(LLMTransportError):
        await client.complete("prompt")


@pytest.mark.asyncio
async def test_unencodable_api_key_is_transport_error(llm_cfg: LLMConfig) -> None:
    transport = reply_with("{}")
    client = GroqClient(llm_cfg, "ключ", transport=transport)

    with pytest.raises(LLMTransportError, match="UnicodeEncodeError"):
        await client.complete("prompt")
    assert transport.requests == []


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {}}]},
        {"choices": "nope"},
        chat_reply(None),
    ],
)
def test_extract_message_content_rejects_malformed(body) -> None:
    with pytest.raises(LLMResponseFormatError):
        extract_message_content(body)


def test_extract_message_content_stringifies_non_text() -> None:
    assert extract_message_content(chat_reply(42)) == "42"
