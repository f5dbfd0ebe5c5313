"""Text and structured generation entrypoints.

Architectural role:
    Canonical request shaping for chat, slide outline, and research report calls.
    Each function builds one Gemini payload and hands it to a fresh
    `GeminiClient` (or the one supplied by the caller).

Model call flow:
    inputs -> parts/history/tools/config shaping -> `GeminiClient` -> text chunks,
    `PresentationStructure`, or `GenerationResult`.

Failure scenarios:
    - Transport/service errors propagate unmodified; nothing is retried.
    - Malformed structured output raises `StructuredResponseError` after logging.
    - Empty responses are returned as `None`, never raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Mapping, Sequence

from pydantic import ValidationError

from genstudio.api.multimodal.file_input_manager import build_message_parts
from genstudio.llm.client import GeminiClient
from genstudio.llm.errors import StructuredResponseError
from genstudio.llm.provider_config import RESEARCH_MODEL, SLIDE_MODEL
from genstudio.llm.schemas import SLIDE_RESPONSE_SCHEMA, PresentationStructure
from genstudio.llm.types import (
    GOOGLE_SEARCH_TOOL,
    Attachment,
    ConversationTurn,
    GenerationResult,
    GroundingOptions,
    project_history,
    serialize_part,
)
from genstudio.prompting.prompt_builder import (
    STOCK_ANALYST_SYSTEM_INSTRUCTION,
    build_slide_outline_prompt,
    build_stock_analysis_prompt,
)


logger = logging.getLogger(__name__)

SLIDE_PARSE_ERROR = "Failed to generate valid slide structure."


# =========================================================
# CHAT
# =========================================================

def build_chat_payload(
    history: Sequence[ConversationTurn | Mapping[str, Any]],
    message: str,
    attachments: Sequence[Attachment] = (),
    grounding: GroundingOptions | None = None,
) -> dict[str, Any]:
    """Build the `streamGenerateContent` body for one chat turn.

    Raises:
        ValueError: The turn has neither text nor attachments.
    """
    parts = build_message_parts(message, attachments)
    if not parts:
        raise ValueError("A chat turn needs a non-blank message or at least one attachment")

    contents = project_history(history)
    contents.append({
        "role": "user",
        "parts": [serialize_part(p) for p in parts],
    })

    payload: dict[str, Any] = {"contents": contents}
    if grounding is not None and grounding.search:
        payload["tools"] = [GOOGLE_SEARCH_TOOL]
    return payload


async def _iter_text(frames: AsyncIterator[dict[str, Any]]) -> AsyncIterator[str]:
    async for frame in frames:
        text = GenerationResult(frame).text
        if text:
            yield text


async def stream_chat(
    model: str,
    history: Sequence[ConversationTurn | Mapping[str, Any]],
    message: str,
    attachments: Sequence[Attachment] = (),
    grounding: GroundingOptions | None = None,
    *,
    client: GeminiClient | None = None,
) -> AsyncIterator[str]:
    """Start a streamed chat turn and return its text fragments.

    Args:
        model: Model identifier for this conversation.
        history: Prior turns; only `role` and `parts` are sent.
        message: User text for the current turn (omitted when blank).
        attachments: Files for the current turn, in display order.
        grounding: Enables Google Search grounding when `search` is set.
        client: Optional transport handle; a new one is built per call.

    Returns:
        Async iterator of text fragments in emission order. The request is sent
        when iteration starts and the iterator cannot be restarted.

    Raises:
        ValueError: Blank message and no attachments (raised before any request).
    """
    payload = build_chat_payload(history, message, attachments, grounding)
    client = client or GeminiClient()
    logger.debug(
        "Chat turn model=%s history=%d attachments=%d search=%s",
        model,
        len(payload["contents"]) - 1,
        len(attachments),
        "tools" in payload,
    )
    return _iter_text(client.stream_generate_content(model, payload))


# =========================================================
# SLIDE OUTLINE
# =========================================================

def build_slide_payload(topic: str, count: int) -> dict[str, Any]:
    return {
        "contents": [{
            "role": "user",
            "parts": [{"text": build_slide_outline_prompt(topic, count)}],
        }],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": SLIDE_RESPONSE_SCHEMA,
        },
    }


def parse_presentation(text: str) -> PresentationStructure:
    """Parse structured slide output.

    Raises:
        StructuredResponseError: Text is not JSON or does not match the
            expected structure. The raw text is kept on the exception.
    """
    try:
        data = json.loads(text)
        return PresentationStructure.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.exception("Failed to parse slide structure JSON")
        raise StructuredResponseError(SLIDE_PARSE_ERROR, raw_content=text) from exc


async def generate_slide_content(
    topic: str,
    count: int,
    *,
    client: GeminiClient | None = None,
) -> PresentationStructure | None:
    """Generate a slide outline constrained to the presentation schema.

    Returns:
        Parsed `PresentationStructure`, or `None` when the response carries no
        text at all.

    Raises:
        StructuredResponseError: Response text is not a valid structure.

    Slide count:
        The schema cannot enforce `count`. A different number of slides is
        logged and returned as-is.
    """
    client = client or GeminiClient()
    raw = await client.generate_content(SLIDE_MODEL, build_slide_payload(topic, count))

    text = GenerationResult(raw).text
    if not text:
        return None

    structure = parse_presentation(text)
    if len(structure.slides) != count:
        logger.warning(
            "Requested %d slides for %r but received %d",
            count,
            topic,
            len(structure.slides),
        )
    return structure


# =========================================================
# EQUITY RESEARCH
# =========================================================

def build_stock_payload(ticker: str) -> dict[str, Any]:
    return {
        "contents": [{
            "role": "user",
            "parts": [{"text": build_stock_analysis_prompt(ticker)}],
        }],
        "tools": [GOOGLE_SEARCH_TOOL],
        "systemInstruction": {
            "parts": [{"text": STOCK_ANALYST_SYSTEM_INSTRUCTION}],
        },
    }


async def analyze_stock(
    ticker: str,
    *,
    client: GeminiClient | None = None,
) -> GenerationResult:
    """Run a search-grounded research report for `ticker`.

    The response is returned unparsed; `result.text` holds the Markdown report
    and `result.grounding_metadata` the search citations.
    """
    client = client or GeminiClient()
    raw = await client.generate_content(RESEARCH_MODEL, build_stock_payload(ticker))
    return GenerationResult(raw)
