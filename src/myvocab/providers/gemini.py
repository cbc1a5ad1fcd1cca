"""Gemini-style generateContent adapter.

The key travels as a ``key`` query parameter on a model-specific URL, and
the request has no system role, so instructions and task are sent as one
combined user part. Implements enrichment and the translation operations
only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from myvocab.enrichment import prompts
from myvocab.providers.base import ENRICH_TEMPERATURE, BaseProvider

if TYPE_CHECKING:
    import httpx

    from myvocab.enrichment.prompts import TextPrompt

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_MODEL = "gemini-2.0-flash"

_TOP_P = 0.8
_TOP_K = 40


class GeminiProvider(BaseProvider):
    """Adapter for ``POST {base_url}/{model}:generateContent?key=...``."""

    provider_id = "gemini"
    display_name = "Gemini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(api_key, model, base_url, timeout=timeout, client=client)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/{self._model}:generateContent"

    async def _generate(self, text: str, temperature: float) -> str:
        payload: dict[str, Any] = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "temperature": temperature,
                "topP": _TOP_P,
                "topK": _TOP_K,
            },
        }
        data = await self._post(self.endpoint, payload, params={"key": self._api_key})

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise self._no_response()
        first = candidates[0] if isinstance(candidates[0], dict) else {}
        content = first.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts:
            raise self._empty()
        text_out = parts[0].get("text") if isinstance(parts[0], dict) else None
        if not text_out or not isinstance(text_out, str):
            raise self._empty()
        return text_out

    async def _complete_enrichment(
        self, text: str, language: str, extra_fields: str | None
    ) -> str:
        return await self._generate(
            prompts.build_combined_prompt(text, language, extra_fields), ENRICH_TEMPERATURE
        )

    async def _complete(self, prompt: TextPrompt) -> str:
        return await self._generate(prompt.combined(), prompt.temperature)
