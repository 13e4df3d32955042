"""Tests for the HTTP client against a mocked transport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from aiclient.client import Client
from aiclient.config import ClientConfig
from aiclient.errors import (
    BadRequestError,
    DeserializationError,
    HTTPStatusError,
    TransportError,
)
from aiclient.request import ChatCompletionParameter
from aiclient.types import Message
from tests.mock_http import MockAPI, models_response, text_response


def _param() -> ChatCompletionParameter:
    return ChatCompletionParameter("openai/gpt-4.1", [Message.user("Hello")])


class TestChatCompletion:
    async def test_returns_choices(self):
        api = MockAPI([httpx.Response(200, json=text_response("Hi there"))])
        async with api.client() as client:
            choices = await client.chat_completion(_param())
        assert len(choices) == 1
        assert choices[0].message.content == "Hi there"
        assert choices[0].finish_reason == "stop"

    async def test_request_shape(self):
        api = MockAPI([httpx.Response(200, json=text_response("ok"))])
        async with api.client(api_key="sk-secret") as client:
            await client.chat_completion(_param())

        request = api.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://openrouter.test/api/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-secret"
        assert api.bodies[0] == {
            "model": "openai/gpt-4.1",
            "messages": [{"role": "user", "content": "Hello"}],
        }

    async def test_full_envelope(self):
        api = MockAPI([httpx.Response(200, json=text_response("ok"))])
        async with api.client() as client:
            response = await client.create_chat_completion(_param())
        assert response.usage.prompt_tokens == 13
        assert response.model == "openai/gpt-4.1"

    async def test_400_surfaces_body(self):
        api = MockAPI([httpx.Response(400, text='{"error":"bad schema"}')])
        async with api.client() as client:
            with pytest.raises(BadRequestError) as exc_info:
                await client.chat_completion(_param())
        assert exc_info.value.body == '{"error":"bad schema"}'

    async def test_500_surfaces_status_only(self):
        api = MockAPI([httpx.Response(500, text='{"error":"internal details"}')])
        async with api.client() as client:
            with pytest.raises(HTTPStatusError) as exc_info:
                await client.chat_completion(_param())
        assert exc_info.value.status_code == 500
        assert "internal details" not in str(exc_info.value)
        assert not hasattr(exc_info.value, "body")

    async def test_no_retry_on_server_error(self):
        api = MockAPI([httpx.Response(503), httpx.Response(200, json=text_response("late"))])
        async with api.client() as client:
            with pytest.raises(HTTPStatusError):
                await client.chat_completion(_param())
        assert len(api.requests) == 1

    async def test_undecodable_body(self):
        api = MockAPI([httpx.Response(200, text="<html>oops</html>")])
        async with api.client() as client:
            with pytest.raises(DeserializationError):
                await client.chat_completion(_param())

    async def test_transport_failure(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = MockAPI(handler=boom)
        async with api.client() as client:
            with pytest.raises(TransportError) as exc_info:
                await client.chat_completion(_param())
        assert isinstance(exc_info.value.original_exc, httpx.ConnectError)

    async def test_timeout_is_transport_error(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        api = MockAPI(handler=slow)
        async with api.client() as client:
            with pytest.raises(TransportError):
                await client.chat_completion(_param())


class TestGetModels:
    async def test_fetches_once(self):
        api = MockAPI([httpx.Response(200, json=models_response())])
        async with api.client() as client:
            first = await client.get_models()
            second = await client.get_models()
        assert first is second
        assert len(api.requests) == 1
        assert api.requests[0].method == "GET"
        assert str(api.requests[0].url) == "https://openrouter.test/api/v1/models"

    async def test_concurrent_first_calls_share_one_fetch(self):
        calls = 0

        async def handler(request):
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=models_response())

        api = MockAPI(handler=handler)
        async with api.client() as client:
            results = await asyncio.gather(*(client.get_models() for _ in range(5)))
        assert calls == 1
        assert all(r is results[0] for r in results)

    async def test_failed_fetch_is_not_cached(self):
        api = MockAPI([httpx.Response(502), httpx.Response(200, json=models_response())])
        async with api.client() as client:
            with pytest.raises(HTTPStatusError):
                await client.get_models()
            catalog = await client.get_models()
        assert len(catalog) == 3

    async def test_bad_models_body(self):
        api = MockAPI([httpx.Response(200, text="not json")])
        async with api.client() as client:
            with pytest.raises(DeserializationError):
                await client.get_models()


class TestClientConstruction:
    async def test_from_config(self):
        cfg = ClientConfig(api_base="https://example.test/v1/", timeout_seconds=5)
        client = Client.from_config(cfg, "key")
        assert client.api_url == "https://example.test/v1"
        assert client.api_key == "key"
        await client.aclose()

    async def test_injected_http_client_stays_open(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        async with Client("k", http_client=http):
            pass
        assert not http.is_closed
        await http.aclose()
