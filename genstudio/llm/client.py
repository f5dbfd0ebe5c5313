"""Gemini transport client.

Architectural role:
    Executes HTTP requests against the Gemini REST API and materializes either a
    single JSON response or a stream of SSE frames.

Model invocation flow:
    service function -> payload construction -> `GeminiClient.generate_content`
    or `GeminiClient.stream_generate_content` -> parsed response dicts.

Retry behavior:
    No retry loop is implemented. Each call is attempted once with the configured
    timeout (`GEMINI_TIMEOUT_SECONDS`).

Failure handling model:
    - Missing API key -> `CredentialNotFoundError` before any request.
    - HTTP status failures -> `httpx.HTTPStatusError`, propagated.
    - Network failures -> `httpx.RequestError`, propagated.
    Unlike the sanitized-string model used for chat UIs, errors are raised so the
    caller sees the original failure.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

import httpx

from genstudio.llm.errors import CredentialNotFoundError
from genstudio.llm.provider_config import (
    GEMINI_BASE_URL,
    GEMINI_TIMEOUT_SECONDS,
    load_key,
)


logger = logging.getLogger(__name__)


class GeminiClient:
    """Per-call handle for Gemini `generateContent` endpoints.

    Every adapter operation builds its own instance, so concurrent operations
    share no mutable state. `transport` lets tests substitute an
    `httpx.MockTransport` for the network.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = GEMINI_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict[str, str]:
        api_key = self.api_key or load_key()
        if not api_key:
            raise CredentialNotFoundError(
                "Gemini API key not configured (set GEMINI_API_KEY or API_KEY)"
            )
        return {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }

    def _url(self, model: str, method: str) -> str:
        return f"{self.base_url}/models/{model}:{method}"

    def _http_client(self, headers: dict[str, str]) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def generate_content(self, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Send one non-streaming request and return the decoded JSON body.

        Args:
            model: Model identifier (for example `gemini-3-pro-preview`).
            payload: `generateContent` request body.

        Raises:
            CredentialNotFoundError: No API key available.
            httpx.HTTPStatusError: Non-2xx response.
            httpx.RequestError: Transport failure.
        """
        headers = self._headers()
        logger.debug("generateContent model=%s keys=%s", model, sorted(payload))

        async with self._http_client(headers) as client:
            response = await client.post(self._url(model, "generateContent"), json=payload)
            response.raise_for_status()
            return response.json()

    async def stream_generate_content(
        self,
        model: str,
        payload: dict[str, Any],
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield decoded SSE frames from `streamGenerateContent`.

        The request is issued on first iteration. Frames arrive in emission
        order; blank keep-alive lines and non-JSON lines are skipped.
        """
        headers = self._headers()
        logger.debug("streamGenerateContent model=%s keys=%s", model, sorted(payload))

        async with self._http_client(headers) as client:
            async with client.stream(
                "POST",
                self._url(model, "streamGenerateContent"),
                params={"alt": "sse"},
                json=payload,
            ) as response:
                if response.is_error:
                    await response.aread()
                response.raise_for_status()

                async for line in response.aiter_lines():
                    if not line:
                        continue

                    if line.startswith("data:"):
                        line = line[5:].strip()

                    if not line or line == "[DONE]":
                        continue

                    try:
                        frame = json.loads(line)
                    except json.JSONDecodeError:
                        logger.debug("Skipping non-JSON stream line: %r", line[:80])
                        continue

                    yield frame
