"""Shared fixtures: API key environment and a recording mock transport."""

import json

import httpx
import pytest

import genstudio.llm.key_selection as key_selection
import genstudio.llm.provider_config as provider_config
from genstudio.llm.client import GeminiClient


class RecordingTransport:
    """Serve canned responses through `httpx.MockTransport` and keep the requests."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> GeminiClient:
        return GeminiClient(api_key="test-key", transport=self.transport)

    def body(self, index=0) -> dict:
        return json.loads(self.requests[index].content)


def json_response(payload, status_code=200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def sse_response(frames, status_code=200) -> httpx.Response:
    text = "".join(f"data: {json.dumps(frame)}\r\n\r\n" for frame in frames)
    return httpx.Response(
        status_code,
        content=text.encode("utf-8"),
        headers={"Content-Type": "text/event-stream"},
    )


def candidate(*parts, grounding_metadata=None) -> dict:
    item = {"content": {"role": "model", "parts": list(parts)}}
    if grounding_metadata is not None:
        item["groundingMetadata"] = grounding_metadata
    return {"candidates": [item]}


@pytest.fixture(autouse=True)
def _test_api_key(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Provide a deterministic key and isolate the key file lookup."""
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setattr(provider_config, "GEMINI_KEY_FILE", str(tmp_path / "gemini.key"))
    yield


@pytest.fixture(autouse=True)
def _reset_key_selector():
    key_selection.set_key_selector(None)
    yield
    key_selection.set_key_selector(None)


@pytest.fixture
def recorder():
    """Factory for `RecordingTransport` instances."""

    def _make(*responses):
        return RecordingTransport(responses)

    return _make
