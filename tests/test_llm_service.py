"""Tests for chat streaming, slide outline, and research report shaping."""

import logging

import httpx
import pytest

from genstudio.llm import service
from genstudio.llm.errors import StructuredResponseError
from genstudio.llm.provider_config import RESEARCH_MODEL, SLIDE_MODEL
from genstudio.llm.schemas import SLIDE_RESPONSE_SCHEMA, PresentationStructure
from genstudio.llm.types import Attachment, ConversationTurn, GroundingOptions
from tests.conftest import candidate, json_response, sse_response


SLIDES_JSON = (
    '{"slides": ['
    '{"title": "Margins compress as input costs rise", "content": ["COGS up 8%", "Pricing lagged"], '
    '"speakerNotes": "Open with the margin bridge"},'
    '{"title": "Automation restores margin by FY27", "content": ["Capex of $40M", "Payback in 2 years"]}'
    '], "sentiment": "urgent", "themeColor": "#B22222"}'
)


# =========================================================
# CHAT
# =========================================================

@pytest.mark.asyncio
async def test_stream_chat_yields_text_in_emission_order(recorder):
    rec = recorder(sse_response([
        candidate({"text": "The "}),
        candidate({"text": "answer"}),
        {"usageMetadata": {"totalTokenCount": 12}},
        candidate({"text": " is 42."}),
    ]))

    stream = await service.stream_chat("gemini-3-flash-preview", [], "What is it?", client=rec.client())
    chunks = [chunk async for chunk in stream]

    assert chunks == ["The ", "answer", " is 42."]
    assert rec.requests[0].url.path.endswith("/models/gemini-3-flash-preview:streamGenerateContent")


@pytest.mark.asyncio
async def test_stream_chat_is_lazy(recorder):
    rec = recorder(sse_response([candidate({"text": "hi"})]))

    stream = await service.stream_chat("m", [], "hello", client=rec.client())

    assert rec.requests == []
    assert [chunk async for chunk in stream] == ["hi"]
    assert len(rec.requests) == 1


@pytest.mark.asyncio
async def test_stream_chat_request_shape(recorder):
    rec = recorder(sse_response([candidate({"text": "ok"})]))
    history = [
        {"role": "user", "parts": [{"text": "Earlier question"}], "id": "1", "timestamp": 10},
        ConversationTurn(role="model", parts=({"text": "Earlier answer"},)),
    ]
    attachments = [
        Attachment(name="deck.pdf", mime_type="application/pdf", data="UERG"),
        Attachment(name="model.xlsx", mime_type="application/vnd.ms-excel", data="rev 10"),
        Attachment(name="logo.png", mime_type="image/png", data="cG5n"),
    ]

    stream = await service.stream_chat(
        "m", history, "Compare", attachments, GroundingOptions(search=True), client=rec.client(),
    )
    [chunk async for chunk in stream]

    body = rec.body()
    assert body["contents"][:2] == [
        {"role": "user", "parts": [{"text": "Earlier question"}]},
        {"role": "model", "parts": [{"text": "Earlier answer"}]},
    ]
    assert body["contents"][2] == {
        "role": "user",
        "parts": [
            {"inlineData": {"mimeType": "application/pdf", "data": "UERG"}},
            {"text": '\n[Context from file "model.xlsx":]\nrev 10\n'},
            {"inlineData": {"mimeType": "image/png", "data": "cG5n"}},
            {"text": "Compare"},
        ],
    }
    assert body["tools"] == [{"googleSearch": {}}]


@pytest.mark.asyncio
async def test_stream_chat_without_search_omits_tools(recorder):
    rec = recorder(sse_response([candidate({"text": "ok"})]))

    stream = await service.stream_chat("m", [], "hi", grounding=GroundingOptions(search=False), client=rec.client())
    [chunk async for chunk in stream]

    assert "tools" not in rec.body()


@pytest.mark.asyncio
async def test_stream_chat_rejects_empty_turn(recorder):
    rec = recorder()

    with pytest.raises(ValueError):
        await service.stream_chat("m", [], "   ", [], client=rec.client())

    assert rec.requests == []


@pytest.mark.asyncio
async def test_stream_chat_propagates_service_errors(recorder):
    rec = recorder(json_response({"error": {"code": 401}}, status_code=401))

    stream = await service.stream_chat("m", [], "hi", client=rec.client())

    with pytest.raises(httpx.HTTPStatusError):
        [chunk async for chunk in stream]


# =========================================================
# SLIDE OUTLINE
# =========================================================

@pytest.mark.asyncio
async def test_generate_slide_content_parses_structure(recorder):
    rec = recorder(json_response(candidate({"text": SLIDES_JSON})))

    structure = await service.generate_slide_content("Retail margins", 2, client=rec.client())

    assert isinstance(structure, PresentationStructure)
    assert len(structure.slides) == 2
    assert structure.slides[0].speaker_notes == "Open with the margin bridge"
    assert structure.slides[1].speaker_notes is None
    assert structure.sentiment == "urgent"
    assert structure.theme_color == "#B22222"
    assert structure.to_wire()["themeColor"] == "#B22222"


@pytest.mark.asyncio
async def test_generate_slide_content_request_shape(recorder):
    rec = recorder(json_response(candidate({"text": SLIDES_JSON})))

    await service.generate_slide_content("Retail margins", 2, client=rec.client())

    request = rec.requests[0]
    assert request.url.path.endswith(f"/models/{SLIDE_MODEL}:generateContent")
    body = rec.body()
    prompt = body["contents"][0]["parts"][0]["text"]
    assert "Retail margins" in prompt
    assert "exactly 2 slides" in prompt
    assert body["generationConfig"] == {
        "responseMimeType": "application/json",
        "responseSchema": SLIDE_RESPONSE_SCHEMA,
    }


@pytest.mark.asyncio
async def test_generate_slide_content_malformed_json(recorder, caplog):
    rec = recorder(json_response(candidate({"text": '{"slides": [ '})))

    with caplog.at_level(logging.ERROR, logger="genstudio.llm.service"):
        with pytest.raises(StructuredResponseError, match="Failed to generate valid slide structure") as exc_info:
            await service.generate_slide_content("Topic", 3, client=rec.client())

    assert exc_info.value.raw_content == '{"slides": [ '
    assert "Failed to parse slide structure JSON" in caplog.text


@pytest.mark.asyncio
async def test_generate_slide_content_wrong_shape(recorder):
    rec = recorder(json_response(candidate({"text": '{"slides": [], "sentiment": "ecstatic", "themeColor": "#000"}'})))

    with pytest.raises(StructuredResponseError):
        await service.generate_slide_content("Topic", 3, client=rec.client())


@pytest.mark.asyncio
async def test_generate_slide_content_no_text_returns_none(recorder):
    rec = recorder(json_response({"candidates": [{"finishReason": "SAFETY"}]}))

    assert await service.generate_slide_content("Topic", 3, client=rec.client()) is None


@pytest.mark.asyncio
async def test_generate_slide_content_count_mismatch_is_passed_through(recorder, caplog):
    rec = recorder(json_response(candidate({"text": SLIDES_JSON})))

    with caplog.at_level(logging.WARNING, logger="genstudio.llm.service"):
        structure = await service.generate_slide_content("Retail margins", 5, client=rec.client())

    assert len(structure.slides) == 2
    assert "Requested 5 slides" in caplog.text


# =========================================================
# EQUITY RESEARCH
# =========================================================

@pytest.mark.asyncio
async def test_analyze_stock_returns_raw_result(recorder):
    metadata = {"groundingChunks": [{"web": {"uri": "https://news.example/acme", "title": "ACME news"}}]}
    rec = recorder(json_response(candidate({"text": "# ACME\nVerdict: HOLD"}, grounding_metadata=metadata)))

    result = await service.analyze_stock("ACME", client=rec.client())

    assert result.text == "# ACME\nVerdict: HOLD"
    assert result.grounding_metadata == metadata
    assert result.raw["candidates"][0]["groundingMetadata"] == metadata


@pytest.mark.asyncio
async def test_analyze_stock_request_shape(recorder):
    rec = recorder(json_response(candidate({"text": "report"})))

    await service.analyze_stock("ACME", client=rec.client())

    assert rec.requests[0].url.path.endswith(f"/models/{RESEARCH_MODEL}:generateContent")
    body = rec.body()
    assert body["tools"] == [{"googleSearch": {}}]
    assert "ACME" in body["contents"][0]["parts"][0]["text"]
    assert "financial analyst" in body["systemInstruction"]["parts"][0]["text"]
