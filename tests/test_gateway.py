"""Tests for the Gemini gateway using httpx.MockTransport."""

import json

import httpx
import pytest

from ideaflow.services.gateway import EnhancementGateway


def _reply(text: str, chunks: list | None = None) -> dict:
    candidate = {"content": {"parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


def _gateway(handler) -> EnhancementGateway:
    return EnhancementGateway(
        api_key="test-key",
        model="test-model",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_enhance_parses_summary_and_tags():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_reply('{"summary": "Grocery reminder", "tags": ["errand"]}'))

    result = await _gateway(handler).enhance("Buy milk")
    assert result.summary == "Grocery reminder"
    assert result.tags == ["errand"]
    assert seen["url"] == "https://gemini.test/v1beta/models/test-model:generateContent"
    assert seen["key"] == "test-key"
    assert "Buy milk" in seen["body"]["contents"][0]["parts"][0]["text"]
    assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"


@pytest.mark.asyncio
async def test_enhance_strips_code_fences():
    fenced = '```json\n{"summary": "s", "tags": ["t"]}\n```'
    result = await _gateway(lambda r: httpx.Response(200, json=_reply(fenced))).enhance("x")
    assert result.tags == ["t"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(401, json={"error": "bad key"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, json=_reply("no json here")),
        httpx.Response(200, json=_reply('{"tags": ["missing summary"]}')),
        httpx.Response(200, json={"candidates": [None]}),
        httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": 5}]}}]}),
        httpx.Response(200, json={"candidates": [{"content": []}]}),
        httpx.Response(200, json={"candidates": [{"content": {"parts": "text"}}]}),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json=_reply('["a list"]')),
    ],
)
async def test_enhance_failures_return_none(response: httpx.Response):
    assert await _gateway(lambda r: response).enhance("x") is None


@pytest.mark.asyncio
async def test_enhance_transport_error_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    assert await _gateway(handler).enhance("x") is None


@pytest.mark.asyncio
async def test_missing_api_key_skips_network():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_reply("{}"))

    gateway = EnhancementGateway(api_key="", transport=httpx.MockTransport(handler))
    assert await gateway.enhance("x") is None
    assert await gateway.search("x") is None
    assert calls == []


@pytest.mark.asyncio
async def test_search_dedupes_and_caps_sources():
    chunks = [{"web": {"uri": f"https://site{i % 8}.test", "title": f"Site {i}"}} for i in range(12)]
    chunks.insert(0, {"web": {"uri": "", "title": "no uri"}})
    chunks.insert(1, {"web": {"uri": "https://untitled.test"}})
    chunks.insert(2, {"retrievedContext": {}})

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["tools"] == [{"google_search": {}}]
        return httpx.Response(200, json=_reply("## Findings", chunks))

    result = await _gateway(handler).search("idea capture apps")
    assert result.text == "## Findings"
    assert len(result.sources) == 6
    uris = [s.uri for s in result.sources]
    assert len(set(uris)) == 6
    assert result.sources[0].uri == "https://untitled.test"
    assert result.sources[0].title == "External Source"
    assert result.sources[1].title == "Site 0"


@pytest.mark.asyncio
async def test_search_without_grounding():
    result = await _gateway(lambda r: httpx.Response(200, json=_reply("plain"))).search("q")
    assert result.text == "plain"
    assert result.sources == []


@pytest.mark.asyncio
async def test_search_failure_returns_none():
    assert await _gateway(lambda r: httpx.Response(503)).search("q") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"candidates": [None]},
        {"candidates": [{"content": {"parts": [{"text": 5}]}}]},
        {"candidates": [{"content": []}]},
        {"candidates": [{"content": {"parts": [{"text": "ok"}]}, "groundingMetadata": ["chunk"]}]},
        {"candidates": [{"content": {"parts": [{"text": "ok"}]}, "groundingMetadata": {"groundingChunks": {"web": {}}}}]},
    ],
)
async def test_search_malformed_payload_returns_none(payload: dict):
    assert await _gateway(lambda r: httpx.Response(200, json=payload)).search("q") is None


@pytest.mark.asyncio
async def test_search_skips_odd_chunks():
    chunks = [
        {"web": "https://string.test"},
        {"web": {"uri": 42, "title": "numeric"}},
        {"web": {"uri": "https://ok.test", "title": 7}},
    ]
    result = await _gateway(lambda r: httpx.Response(200, json=_reply("text", chunks))).search("q")
    assert [(s.title, s.uri) for s in result.sources] == [("External Source", "https://ok.test")]
