"""
Enhancement gateway: Gemini ``generateContent`` over httpx.

Both calls are best-effort: any transport, auth, status, or payload
problem is logged and reported to the caller as ``None`` so that idea
capture and search degrade instead of failing.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ideaflow.core.config import settings
from ideaflow.core.exceptions import GatewayFailure
from ideaflow.schemas.enhancement import EnhancementResult, SearchResult, WebSource

logger = logging.getLogger(__name__)

_ENHANCE_PROMPT = (
    "Analyze the following idea and provide a concise one-sentence summary "
    "and 3 relevant tags. Return strictly in JSON format.\n"
    'Idea: "{content}"'
)

_SEARCH_PROMPT = (
    'Perform a deep web search and analysis for: "{query}".\n'
    "Provide:\n"
    "1. A detailed executive summary.\n"
    "2. 3-4 key insights.\n"
    "3. A list of relevant categories.\n\n"
    "Respond in Markdown format."
)

_ENHANCE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING", "description": "A concise one-sentence summary"},
        "tags": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Up to 3 relevant tags",
        },
    },
    "required": ["summary", "tags"],
}


def _strip_fences(text: str) -> str:
    """Drop a surrounding ```json ... ``` block if the model added one."""
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def _candidate(data: Any) -> dict[str, Any]:
    try:
        candidate = data["candidates"][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise GatewayFailure("Response has no candidates") from exc
    if not isinstance(candidate, dict):
        raise GatewayFailure("Response candidate is not an object")
    return candidate


def _candidate_text(candidate: dict[str, Any]) -> str:
    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise GatewayFailure("Response candidate content is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise GatewayFailure("Response candidate parts is not a list")

    pieces = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text", "")
        if not isinstance(text, str):
            raise GatewayFailure("Response part text is not a string")
        pieces.append(text)

    text = "".join(pieces)
    if not text:
        raise GatewayFailure("Response candidate has no text")
    return text


def extract_sources(candidate: dict[str, Any], limit: int) -> list[WebSource]:
    """Grounding chunks -> unique web sources (by uri), capped at ``limit``."""
    metadata = candidate.get("groundingMetadata") or {}
    if not isinstance(metadata, dict):
        raise GatewayFailure("Grounding metadata is not an object")
    chunks = metadata.get("groundingChunks") or []
    if not isinstance(chunks, list):
        raise GatewayFailure("Grounding chunks is not a list")

    sources: dict[str, WebSource] = {}
    for chunk in chunks:
        web = chunk.get("web") if isinstance(chunk, dict) else None
        if not isinstance(web, dict):
            continue
        uri = web.get("uri")
        if not uri or not isinstance(uri, str):
            continue
        if uri not in sources:
            title = web.get("title")
            sources[uri] = WebSource(
                title=title if isinstance(title, str) and title else "External Source",
                uri=uri,
            )
        if len(sources) >= limit:
            break
    return list(sources.values())


class EnhancementGateway:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_sources: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.GEMINI_MODEL
        self.base_url = base_url or settings.GEMINI_BASE_URL
        self.timeout = timeout or settings.GEMINI_TIMEOUT_SECONDS
        self.max_sources = max_sources or settings.SEARCH_MAX_SOURCES
        self._transport = transport

    async def _generate(self, body: dict[str, Any]) -> dict[str, Any]:
        if not self.api_key:
            raise GatewayFailure("GEMINI_API_KEY not configured")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    f"/models/{self.model}:generateContent",
                    json=body,
                    headers={"x-goog-api-key": self.api_key},
                )
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            raise GatewayFailure(f"Gemini returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise GatewayFailure(f"Gemini request failed: {type(exc).__name__}") from exc
        except ValueError as exc:
            raise GatewayFailure("Gemini returned a non-JSON body") from exc

    async def enhance(self, content: str) -> EnhancementResult | None:
        body = {
            "contents": [{"role": "user", "parts": [{"text": _ENHANCE_PROMPT.format(content=content)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": _ENHANCE_SCHEMA,
            },
        }
        try:
            data = await self._generate(body)
            text = _candidate_text(_candidate(data))
            return EnhancementResult.model_validate(json.loads(_strip_fences(text)))
        except GatewayFailure as exc:
            logger.warning("AI enhancement failed: %s", exc)
        except (AttributeError, TypeError, ValueError, ValidationError) as exc:
            logger.warning("AI enhancement returned an unusable payload: %s", exc)
        return None

    async def search(self, query: str) -> SearchResult | None:
        body = {
            "contents": [{"role": "user", "parts": [{"text": _SEARCH_PROMPT.format(query=query)}]}],
            "tools": [{"google_search": {}}],
        }
        try:
            data = await self._generate(body)
            candidate = _candidate(data)
            return SearchResult(
                text=_candidate_text(candidate),
                sources=extract_sources(candidate, self.max_sources),
            )
        except GatewayFailure as exc:
            logger.warning("Web search failed: %s", exc)
        except (AttributeError, TypeError, ValueError, ValidationError) as exc:
            logger.warning("Web search returned an unusable payload: %s", exc)
        return None
