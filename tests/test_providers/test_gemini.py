"""Tests for the Gemini generateContent adapter."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from myvocab.core.errors import ProviderError
from myvocab.providers.gemini import GeminiProvider


def _generation(text: str | None) -> dict[str, Any]:
    """Build a generateContent envelope around ``text``."""
    part: dict[str, Any] = {} if text is None else {"text": text}
    return {"candidates": [{"content": {"parts": [part]}}]}


def _make_provider(
    response: httpx.Response, seen: list[httpx.Request] | None = None
) -> GeminiProvider:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return response

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiProvider("g-key", base_url="https://gemini.test/models", client=client)


class TestRequest:
    """Endpoint, key parameter and payload."""

    async def test_key_query_parameter(self, sample_enrichment: dict[str, Any]) -> None:
        seen: list[httpx.Request] = []
        provider = _make_provider(
            httpx.Response(200, json=_generation(json.dumps(sample_enrichment))), seen
        )
        await provider.enrich("run", "en")

        request = seen[0]
        assert request.url.path == "/models/gemini-2.0-flash:generateContent"
        assert request.url.params["key"] == "g-key"
        assert "Authorization" not in request.headers

    async def test_single_combined_part(self, sample_enrichment: dict[str, Any]) -> None:
        seen: list[httpx.Request] = []
        provider = _make_provider(
            httpx.Response(200, json=_generation(json.dumps(sample_enrichment))), seen
        )
        await provider.enrich("run", "en")

        body = json.loads(seen[0].content)
        parts = body["contents"][0]["parts"]
        assert len(parts) == 1
        assert "linguistic expert" in parts[0]["text"]
        assert '"run"' in parts[0]["text"]
        assert body["generationConfig"] == {"temperature": 0.3, "topP": 0.8, "topK": 40}

    async def test_translate_temperature(self) -> None:
        seen: list[httpx.Request] = []
        provider = _make_provider(httpx.Response(200, json=_generation("Hola")), seen)
        assert await provider.translate("Hello", "en", "es") == "Hola"
        assert json.loads(seen[0].content)["generationConfig"]["temperature"] == 0.3


class TestResponses:
    """Envelope parsing."""

    async def test_fenced_enrichment(self, sample_enrichment: dict[str, Any]) -> None:
        content = f"```\n{json.dumps(sample_enrichment)}\n```"
        provider = _make_provider(httpx.Response(200, json=_generation(content)))
        result = await provider.enrich("run", "en")
        assert result.type == "verb"

    async def test_missing_text(self) -> None:
        provider = _make_provider(httpx.Response(200, json=_generation(None)))
        with pytest.raises(ProviderError, match="Gemini API returned empty content"):
            await provider.explain("break a leg", "en")

    async def test_no_candidates(self) -> None:
        provider = _make_provider(httpx.Response(200, json={"candidates": []}))
        with pytest.raises(ProviderError, match="Gemini API returned no response"):
            await provider.detect_language("Hallo")

    async def test_error_message_from_envelope(self) -> None:
        body = {"error": {"code": 400, "message": "API key not valid"}}
        provider = _make_provider(httpx.Response(400, json=body))
        with pytest.raises(ProviderError, match="Gemini API error: API key not valid"):
            await provider.enrich("run", "en")

    async def test_conversation_ops_not_implemented(self) -> None:
        provider = _make_provider(httpx.Response(200, json=_generation("x")))
        assert not hasattr(provider, "suggest_reply")
        assert not hasattr(provider, "get_conversation_reply")
