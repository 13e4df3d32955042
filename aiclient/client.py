"""
HTTP client for OpenAI-compatible chat-completion endpoints (OpenRouter).

Dependencies: ``httpx`` (async HTTP client).  No ``openai`` SDK needed.

Two operations are exposed: listing models and creating a chat
completion.  Every request carries a bearer token and a fixed timeout;
nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import httpx

from aiclient.errors import (
    BadRequestError,
    DeserializationError,
    HTTPStatusError,
    TransportError,
)
from aiclient.models import ModelCatalog
from aiclient.request import ChatCompletionParameter
from aiclient.types import ChatCompletionResponse, Choice

if TYPE_CHECKING:
    from aiclient.config import ClientConfig

logger = logging.getLogger(__name__)

__all__ = ["Client", "DEFAULT_API_URL", "DEFAULT_TIMEOUT"]

DEFAULT_API_URL = "https://openrouter.ai/api/v1/"
DEFAULT_TIMEOUT = 30.0


class Client:
    """
    Connection settings plus a reusable ``httpx.AsyncClient``.

    Parameters
    ----------
    api_key:
        Bearer token sent in the ``Authorization`` header.
    api_url:
        Base URL of the API, e.g. ``"https://openrouter.ai/api/v1/"``.
    timeout:
        Connect/response timeout in seconds, applied to every request.
    http_client:
        Optional pre-built ``httpx.AsyncClient``.  It is not closed by
        ``aclose``; the caller keeps ownership.

    The model list is fetched at most once per instance.  Concurrent first
    calls to ``get_models`` share one request.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._models: ModelCatalog | None = None
        self._models_lock = asyncio.Lock()

    @classmethod
    def from_config(cls, cfg: ClientConfig, api_key: str, **kwargs) -> Client:
        return cls(api_key, cfg.api_base, timeout=float(cfg.timeout_seconds), **kwargs)

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    async def get_models(self) -> ModelCatalog:
        if self._models is not None:
            return self._models
        async with self._models_lock:
            if self._models is None:
                response = await self._send("GET", "models")
                self._models = ModelCatalog.from_dict(_decode_json(response))
                logger.info("Fetched %d models", len(self._models))
        return self._models

    # ------------------------------------------------------------------
    # Chat completion
    # ------------------------------------------------------------------

    async def chat_completion(self, parameter: ChatCompletionParameter) -> list[Choice]:
        """Send *parameter* and return the choices of the response."""
        response = await self.create_chat_completion(parameter)
        return response.choices

    async def create_chat_completion(
        self, parameter: ChatCompletionParameter
    ) -> ChatCompletionResponse:
        """Like ``chat_completion`` but returns the whole envelope, usage included."""
        body = parameter.to_body()
        logger.info(
            "REQUEST: model=%s tools=%d messages=%d",
            parameter.model,
            len(parameter.tools),
            len(parameter.messages),
        )
        response = await self._send("POST", "chat/completions", json=body)
        logger.debug("Response body: %s", response.text)
        result = ChatCompletionResponse.from_json(response.text)
        logger.info(
            "RESPONSE: id=%s choices=%d total_tokens=%d",
            result.id,
            len(result.choices),
            result.usage.total_tokens,
        )
        return result

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _send(self, method: str, path: str, json: dict | None = None) -> httpx.Response:
        url = f"{self.api_url}/{path}"
        logger.debug("Request URL: %s %s", method, url)
        try:
            response = await self._http.request(
                method,
                url,
                json=json,
                headers=self._build_headers(),
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            logger.error("Request failed: %s", exc)
            raise TransportError(f"Request to {url} failed: {exc}", exc) from exc

        if response.is_success:
            return response

        # The 400 body carries the provider's explanation (bad schema, unknown
        # model...).  Other statuses only surface their code.
        if response.status_code == 400:
            logger.error("Request rejected (400): %s", response.text)
            raise BadRequestError(response.text)
        logger.error(
            "Request failed with status %d: %s", response.status_code, response.text
        )
        raise HTTPStatusError(response.status_code)


def _decode_json(response: httpx.Response) -> dict:
    try:
        return response.json()
    except ValueError as exc:
        logger.error("Failed to parse response: %s", exc)
        raise DeserializationError(str(exc)) from exc
