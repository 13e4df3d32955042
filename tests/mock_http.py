"""
Canned HTTP responses for testing.

Builds ``Client`` instances on top of ``httpx.MockTransport`` so tests can
exercise request encoding and response decoding without hitting real APIs.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Union

import httpx

from aiclient.client import Client

Handler = Callable[[httpx.Request], Union[httpx.Response, Awaitable[httpx.Response]]]

API_URL = "https://openrouter.test/api/v1/"

TOOL_CALL_ID = "call_L8RNjCRpMAxGkCAy5ovJxkw9"


class MockAPI:
    """
    Serves queued responses and records every request.

    Usage::

        api = MockAPI([httpx.Response(200, json=text_response("hi"))])
        client = api.client()
        choices = await client.chat_completion(param)
        assert api.bodies[0]["model"] == "m"

    Parameters
    ----------
    responses:
        Responses returned in order, one per request.
    handler:
        Alternative to *responses*: a (sync or async) callable receiving the
        request.
    """

    def __init__(
        self,
        responses: list[httpx.Response] | None = None,
        handler: Handler | None = None,
    ) -> None:
        self._responses = list(responses or [])
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def _handle(self, request: httpx.Request):
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self._responses.pop(0)

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]

    def client(self, api_key: str = "test-key", **kwargs) -> Client:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self._handle))
        return Client(api_key, API_URL, http_client=http, **kwargs)


def completion_response(message: dict, finish_reason: str = "stop") -> dict[str, Any]:
    return {
        "id": "gen-1747167300-Qc7IgPZUPoopdSABk5KA",
        "provider": "OpenAI",
        "model": "openai/gpt-4.1",
        "object": "chat.completion",
        "created": 1747167300,
        "choices": [
            {
                "logprobs": None,
                "finish_reason": finish_reason,
                "native_finish_reason": finish_reason,
                "index": 0,
                "message": message,
            }
        ],
        "system_fingerprint": None,
        "usage": {
            "prompt_tokens": 13,
            "completion_tokens": 37,
            "total_tokens": 50,
            "prompt_tokens_details": {"cached_tokens": 0},
        },
    }


def text_response(content: str) -> dict[str, Any]:
    return completion_response(
        {"role": "assistant", "content": content, "refusal": None, "reasoning": None}
    )


def tool_call_response(
    name: str,
    arguments: dict,
    call_id: str = TOOL_CALL_ID,
) -> dict[str, Any]:
    return completion_response(
        {
            "role": "assistant",
            "content": "",
            "tool_calls": [
                {
                    "index": 0,
                    "id": call_id,
                    "type": "function",
                    "function": {"name": name, "arguments": json.dumps(arguments)},
                }
            ],
        },
        finish_reason="tool_calls",
    )


def model_entry(
    model_id: str,
    name: str,
    supported_parameters: list[str] | None = None,
    context_length: int = 128_000,
) -> dict[str, Any]:
    return {
        "id": model_id,
        "hugging_face_id": "",
        "name": name,
        "created": 1744588800,
        "description": f"{name} model",
        "context_length": context_length,
        "architecture": {
            "modality": "text+image->text",
            "input_modalities": ["image", "text"],
            "output_modalities": ["text"],
            "tokenizer": "GPT",
            "instruct_type": None,
        },
        "pricing": {
            "prompt": "0.000002",
            "completion": "0.000008",
            "request": "0",
            "image": "0",
            "web_search": "0",
            "internal_reasoning": "0",
            "input_cache_read": "0.0000005",
        },
        "top_provider": {
            "context_length": context_length,
            "max_completion_tokens": 32768,
            "is_moderated": True,
        },
        "per_request_limits": None,
        "supported_parameters": supported_parameters or [],
    }


def models_response() -> dict[str, Any]:
    return {
        "data": [
            model_entry(
                "openai/gpt-4.1",
                "OpenAI: GPT-4.1",
                ["tools", "tool_choice", "structured_outputs", "response_format"],
            ),
            model_entry("mistralai/mistral-7b", "Mistral: Mistral 7B", ["tools"], 32_768),
            model_entry("meta-llama/llama-3-8b", "Meta: Llama 3 8B", [], 8_192),
        ]
    }
