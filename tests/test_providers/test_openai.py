"""Tests for the OpenAI chat completions adapter."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from myvocab.core.errors import ProviderError
from myvocab.models.enrichment import EnrichmentResponse
from myvocab.providers.openai import OpenAIProvider

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response]


def _completion(content: str | None) -> dict[str, Any]:
    """Build a chat completions envelope around ``content``."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _make_provider(handler: Handler) -> OpenAIProvider:
    """Create an OpenAIProvider whose client uses a mock transport."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIProvider("sk-test", base_url="https://api.test/v1", client=client)


def _recording(response: httpx.Response, seen: list[httpx.Request]) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return handler


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequest:
    """Endpoint, auth and payload."""

    async def test_bearer_auth_and_endpoint(self, sample_enrichment: dict[str, Any]) -> None:
        seen: list[httpx.Request] = []
        resp = httpx.Response(200, json=_completion(json.dumps(sample_enrichment)))
        provider = _make_provider(_recording(resp, seen))

        await provider.enrich("run", "en")

        assert len(seen) == 1
        request = seen[0]
        assert str(request.url) == "https://api.test/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"

    async def test_payload_uses_system_and_user_roles(
        self, sample_enrichment: dict[str, Any]
    ) -> None:
        seen: list[httpx.Request] = []
        resp = httpx.Response(200, json=_completion(json.dumps(sample_enrichment)))
        provider = _make_provider(_recording(resp, seen))

        await provider.enrich("run", "en", "synonyms")

        body = json.loads(seen[0].content)
        assert body["model"] == "gpt-4o-mini"
        assert body["temperature"] == 0.3
        assert [m["role"] for m in body["messages"]] == ["system", "user"]
        assert "synonyms" in body["messages"][0]["content"]
        assert '"run"' in body["messages"][1]["content"]


# ---------------------------------------------------------------------------
# Enrichment parsing
# ---------------------------------------------------------------------------


class TestEnrich:
    """Response decoding and validation."""

    async def test_valid_response(self, sample_enrichment: dict[str, Any]) -> None:
        provider = _make_provider(
            lambda _: httpx.Response(200, json=_completion(json.dumps(sample_enrichment)))
        )
        result = await provider.enrich("run", "en")
        assert isinstance(result, EnrichmentResponse)
        assert result.ipa == "/rʌn/"
        assert result.senses is not None
        assert result.senses[0].type == "noun"

    async def test_markdown_fenced_json(self, sample_enrichment: dict[str, Any]) -> None:
        content = f"```json\n{json.dumps(sample_enrichment)}\n```"
        provider = _make_provider(lambda _: httpx.Response(200, json=_completion(content)))
        result = await provider.enrich("run", "en")
        assert result.definition == sample_enrichment["definition"]

    async def test_unparseable_json(self) -> None:
        provider = _make_provider(lambda _: httpx.Response(200, json=_completion("not json")))
        with pytest.raises(ProviderError, match="Failed to parse OpenAI response as JSON"):
            await provider.enrich("run", "en")

    async def test_schema_violation(self, sample_enrichment: dict[str, Any]) -> None:
        del sample_enrichment["ipa"]
        provider = _make_provider(
            lambda _: httpx.Response(200, json=_completion(json.dumps(sample_enrichment)))
        )
        with pytest.raises(ProviderError, match="Invalid response structure from OpenAI"):
            await provider.enrich("run", "en")

    async def test_empty_content(self) -> None:
        provider = _make_provider(lambda _: httpx.Response(200, json=_completion(None)))
        with pytest.raises(ProviderError, match="empty content"):
            await provider.enrich("run", "en")

    async def test_no_choices(self) -> None:
        provider = _make_provider(lambda _: httpx.Response(200, json={"choices": []}))
        with pytest.raises(ProviderError, match="no response"):
            await provider.enrich("run", "en")


# ---------------------------------------------------------------------------
# HTTP failures
# ---------------------------------------------------------------------------


class TestHttpErrors:
    """Non-2xx statuses and transport faults."""

    async def test_upstream_error_message(self) -> None:
        body = {"error": {"message": "Incorrect API key provided"}}
        provider = _make_provider(lambda _: httpx.Response(401, json=body))
        with pytest.raises(ProviderError, match="OpenAI API error: Incorrect API key provided") as exc:
            await provider.enrich("run", "en")
        assert exc.value.status_code == 401

    async def test_status_text_fallback(self) -> None:
        provider = _make_provider(lambda _: httpx.Response(503, text="upstream down"))
        with pytest.raises(ProviderError, match="503 Service Unavailable"):
            await provider.translate("hi", "en", "fr")

    async def test_transport_error_propagates(self) -> None:
        def raise_connect(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        provider = _make_provider(raise_connect)
        with pytest.raises(httpx.ConnectError):
            await provider.enrich("run", "en")


# ---------------------------------------------------------------------------
# Free-text operations
# ---------------------------------------------------------------------------


class TestTextOperations:
    """translate, rephrase, explain, detect_language and conversation ops."""

    async def test_translate_strips_whitespace(self) -> None:
        seen: list[httpx.Request] = []
        provider = _make_provider(
            _recording(httpx.Response(200, json=_completion("  Bonjour \n")), seen)
        )
        assert await provider.translate("Hello", "en", "fr", "Be formal") == "Bonjour"
        body = json.loads(seen[0].content)
        assert body["temperature"] == 0.3
        assert "Be formal" in body["messages"][0]["content"]

    async def test_detect_language_normalizes(self) -> None:
        provider = _make_provider(lambda _: httpx.Response(200, json=_completion(' "FR" ')))
        assert await provider.detect_language("Bonjour") == "fr"

    async def test_rephrase_sends_context(self) -> None:
        seen: list[httpx.Request] = []
        provider = _make_provider(_recording(httpx.Response(200, json=_completion("Hi there")), seen))
        await provider.rephrase("hi", "en", context="chat with a friend")
        body = json.loads(seen[0].content)
        assert body["messages"][1]["content"].startswith("Context: chat with a friend")

    async def test_suggest_next_ideas(self) -> None:
        provider = _make_provider(
            lambda _: httpx.Response(200, json=_completion("Ask about the weather\n"))
        )
        assert await provider.suggest_next_ideas(["Hi"], "en") == "Ask about the weather"

    async def test_conversation_reply(self) -> None:
        provider = _make_provider(lambda _: httpx.Response(200, json=_completion("Sounds fun!")))
        assert await provider.get_conversation_reply("I went hiking", "en") == "Sounds fun!"


class TestClientLifecycle:
    """Context-manager ownership of the HTTP client."""

    async def test_injected_client_not_closed(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda _: httpx.Response(200)))
        async with OpenAIProvider("k", client=client):
            pass
        assert client.is_closed is False
        await client.aclose()

    async def test_owned_client_closed_on_exit(self) -> None:
        provider = OpenAIProvider("k")
        async with provider:
            owned = provider._client
            assert owned is not None
        assert owned.is_closed is True
        assert provider._client is None
