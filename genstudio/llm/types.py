"""Request/response data contracts for the Gemini adapter.

Architectural role:
    Defines the content-part union sent to the service, caller-owned inputs
    (attachments, history turns, grounding options), and `GenerationResult`,
    the read-only wrapper around one raw `generateContent` response.

Wire shapes:
    - `TextPart` -> `{"text": ...}`
    - `InlineDataPart` -> `{"inlineData": {"mimeType": ..., "data": ...}}`
    - `ConversationTurn` -> `{"role": ..., "parts": [...]}`

Determinism:
    All types are immutable and serialization is deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence, Union


@dataclass(frozen=True)
class TextPart:
    """Plain text content fragment."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class InlineDataPart:
    """Base64 binary content fragment tagged with its MIME type."""

    mime_type: str
    data: str

    def to_dict(self) -> dict[str, Any]:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


Part = Union[TextPart, InlineDataPart]


@dataclass(frozen=True)
class Attachment:
    """Caller-supplied file for one request.

    `data` is base64 for PDFs and images. For every other type it holds text
    already extracted by the caller (see `api.multimodal.file_input_manager`).
    """

    name: str
    mime_type: str
    data: str


@dataclass(frozen=True)
class ConversationTurn:
    """One prior exchange in a chat history."""

    role: str
    parts: Sequence[Any] = field(default_factory=tuple)


@dataclass(frozen=True)
class GroundingOptions:
    """Optional tool activations for a chat request."""

    search: bool = False


GOOGLE_SEARCH_TOOL = {"googleSearch": {}}


def serialize_part(part: Part | Mapping[str, Any]) -> dict[str, Any]:
    """Return the wire dict for a typed part; mappings pass through unchanged."""
    if isinstance(part, (TextPart, InlineDataPart)):
        return part.to_dict()
    if isinstance(part, Mapping):
        return dict(part)
    raise TypeError(f"Unsupported content part type: {type(part).__name__}")


def project_history(
    history: Sequence[ConversationTurn | Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """Project history entries onto the `role`/`parts` fields the API accepts.

    Order is preserved and no entry is dropped. Any other fields a UI attaches
    to its messages (ids, timestamps, render state) are removed.
    """
    projected = []
    for turn in history:
        if isinstance(turn, ConversationTurn):
            role, parts = turn.role, turn.parts
        else:
            role, parts = turn.get("role"), turn.get("parts") or []
        projected.append({
            "role": role,
            "parts": [serialize_part(p) for p in parts],
        })
    return projected


class GenerationResult:
    """Read-only view over a raw `generateContent` response dict.

    The raw payload stays available as `raw` so callers can interpret fields
    this wrapper does not surface.
    """

    def __init__(self, raw: Mapping[str, Any]) -> None:
        self.raw = dict(raw or {})

    @property
    def candidates(self) -> list[dict[str, Any]]:
        return list(self.raw.get("candidates") or [])

    @property
    def parts(self) -> list[dict[str, Any]]:
        """Content parts of the first candidate, or an empty list."""
        candidates = self.candidates
        if not candidates:
            return []
        content = candidates[0].get("content") or {}
        return list(content.get("parts") or [])

    @property
    def text(self) -> str | None:
        """Concatenated text of the first candidate, `None` when it has none."""
        chunks = [
            part["text"]
            for part in self.parts
            if isinstance(part.get("text"), str) and not part.get("thought")
        ]
        if not chunks:
            return None
        return "".join(chunks)

    @property
    def grounding_metadata(self) -> dict[str, Any] | None:
        candidates = self.candidates
        if not candidates:
            return None
        return candidates[0].get("groundingMetadata")

    def grounding_sources(self) -> list[dict[str, str]]:
        """Return unique web sources cited by search grounding, in order."""
        metadata = self.grounding_metadata or {}
        sources = []
        seen = set()
        for chunk in metadata.get("groundingChunks") or []:
            web = chunk.get("web") or {}
            uri = web.get("uri")
            if not uri or uri in seen:
                continue
            seen.add(uri)
            sources.append({"title": web.get("title") or uri, "uri": uri})
        return sources

    def __repr__(self) -> str:
        return f"GenerationResult(candidates={len(self.candidates)})"
