"""OpenAI-style chat completions adapter.

Authenticates with a bearer token and sends the enrichment schema through
the system role. Implements every operation, including the
conversation-practice set.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from myvocab.enrichment import prompts
from myvocab.providers.base import ENRICH_TEMPERATURE, BaseProvider

if TYPE_CHECKING:
    import httpx

    from myvocab.enrichment.prompts import TextPrompt

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIProvider(BaseProvider):
    """Adapter for ``POST {base_url}/chat/completions``."""

    provider_id = "openai"
    display_name = "OpenAI"

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
        return f"{self._base_url}/chat/completions"

    async def _chat(self, system: str, user: str, temperature: float) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": temperature,
        }
        data = await self._post(
            self.endpoint,
            payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise self._no_response()
        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not content or not isinstance(content, str):
            raise self._empty()
        return content

    async def _complete_enrichment(
        self, text: str, language: str, extra_fields: str | None
    ) -> str:
        return await self._chat(
            prompts.build_enrichment_instructions(extra_fields),
            prompts.build_enrichment_query(text, language, extra_fields),
            ENRICH_TEMPERATURE,
        )

    async def _complete(self, prompt: TextPrompt) -> str:
        return await self._chat(prompt.system, prompt.user, prompt.temperature)

    # -- Conversation practice -------------------------------------------------

    async def improve_style_prompt(self, description: str) -> str:
        return (await self._complete(prompts.improve_style_prompt_prompt(description))).strip()

    async def suggest_reply(
        self, message: str, language: str, style_prompt: str | None = None
    ) -> str:
        return (
            await self._complete(prompts.suggest_reply_prompt(message, language, style_prompt))
        ).strip()

    async def correct_text(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        style_prompt: str | None = None,
    ) -> str:
        prompt = prompts.correct_text_prompt(text, source_lang, target_lang, style_prompt)
        return (await self._complete(prompt)).strip()

    async def suggest_next_ideas(self, history: Sequence[str], language: str) -> str:
        return (
            await self._complete(prompts.suggest_next_ideas_prompt(history, language))
        ).strip()

    async def get_conversation_reply(
        self, message: str, language: str, style_prompt: str | None = None
    ) -> str:
        prompt = prompts.conversation_reply_prompt(message, language, style_prompt)
        return (await self._complete(prompt)).strip()

    async def get_suggested_reply_to_bot(
        self, bot_message: str, language: str, style_prompt: str | None = None
    ) -> str:
        prompt = prompts.suggested_reply_to_bot_prompt(bot_message, language, style_prompt)
        return (await self._complete(prompt)).strip()
