"""Shared HTTP plumbing and JSON recovery for provider adapters.

Adapters are stateless apart from their credentials: each operation is a
single POST, and every fault is raised immediately. Retrying is the
enrichment service's job.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Self

import httpx

from myvocab.core.errors import ProviderError
from myvocab.enrichment import prompts
from myvocab.enrichment.validation import extract_json_text, is_valid_enrichment_response
from myvocab.models.enrichment import EnrichmentResponse

if TYPE_CHECKING:
    from myvocab.enrichment.prompts import TextPrompt

logger = logging.getLogger(__name__)

# Enrichment favours determinism over creativity.
ENRICH_TEMPERATURE = 0.3


class BaseProvider(ABC):
    """Common behaviour of every upstream adapter.

    Usage::

        async with OpenAIProvider(api_key) as provider:
            result = await provider.enrich("serendipity", "en")

    Outside a context manager each call opens and closes its own client,
    unless a shared ``client`` was injected.

    Args:
        api_key: Credential for the upstream API.
        model: Model name sent upstream.
        base_url: API root.
        timeout: Request timeout in seconds.
        client: Optional shared ``httpx.AsyncClient`` (owned by the caller).
    """

    provider_id: str = ""
    display_name: str = ""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> Self:
        if self._client is None:
            self._client = self._new_client()
            self._owns_client = True
        return self

    async def __aexit__(self, *_: Any) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    @property
    def model(self) -> str:
        return self._model

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=10.0))

    # -- HTTP ------------------------------------------------------------------

    async def _post(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST ``payload`` and return the decoded JSON envelope.

        Transport errors (``httpx.TransportError``) propagate unwrapped.

        Raises:
            ProviderError: Non-2xx status or a body that is not a JSON object.
        """
        logger.debug("%s request: POST %s", self.display_name, url)
        if self._client is not None:
            resp = await self._client.post(url, json=payload, headers=headers, params=params)
        else:
            async with self._new_client() as client:
                resp = await client.post(url, json=payload, headers=headers, params=params)

        if not resp.is_success:
            raise ProviderError(
                f"{self.display_name} API error: {self._error_message(resp)}",
                provider=self.display_name,
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except json.JSONDecodeError as exc:
            raise ProviderError(
                f"{self.display_name} API returned a malformed envelope",
                provider=self.display_name,
                status_code=resp.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise ProviderError(
                f"{self.display_name} API returned no response",
                provider=self.display_name,
            )
        return data

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        """Upstream ``error.message`` if present, else ``"<status> <reason>"``."""
        try:
            body = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return f"{resp.status_code} {resp.reason_phrase}".strip()

    def _empty(self) -> ProviderError:
        return ProviderError(
            f"{self.display_name} API returned empty content", provider=self.display_name
        )

    def _no_response(self) -> ProviderError:
        return ProviderError(
            f"{self.display_name} API returned no response", provider=self.display_name
        )

    # -- Provider-specific envelope --------------------------------------------

    @abstractmethod
    async def _complete_enrichment(
        self, text: str, language: str, extra_fields: str | None
    ) -> str:
        """Send an enrichment request and return the raw text payload."""

    @abstractmethod
    async def _complete(self, prompt: TextPrompt) -> str:
        """Send a free-text request and return the raw text payload."""

    # -- Operations ------------------------------------------------------------

    async def enrich(
        self, text: str, language: str, extra_fields: str | None = None
    ) -> EnrichmentResponse:
        """Enrich a word or phrase.

        Raises:
            ProviderError: HTTP failure, empty payload, unparseable JSON, or a
                payload that fails schema validation.
        """
        content = await self._complete_enrichment(text, language, extra_fields)
        try:
            parsed = json.loads(extract_json_text(content))
        except json.JSONDecodeError as exc:
            raise ProviderError(
                f"Failed to parse {self.display_name} response as JSON",
                provider=self.display_name,
            ) from exc

        if not is_valid_enrichment_response(parsed):
            raise ProviderError(
                f"Invalid response structure from {self.display_name}",
                provider=self.display_name,
            )
        return EnrichmentResponse.from_dict(parsed)

    async def translate(
        self, text: str, from_lang: str, to_lang: str, style_prompt: str | None = None
    ) -> str:
        return (
            await self._complete(prompts.translate_prompt(text, from_lang, to_lang, style_prompt))
        ).strip()

    async def rephrase(
        self,
        text: str,
        language: str,
        style_prompt: str | None = None,
        context: str | None = None,
    ) -> str:
        return (
            await self._complete(prompts.rephrase_prompt(text, language, style_prompt, context))
        ).strip()

    async def explain(self, text: str, language: str) -> str:
        return (await self._complete(prompts.explain_prompt(text, language))).strip()

    async def detect_language(self, text: str) -> str:
        """Return a lowercase ISO 639-1 code with any quoting removed."""
        content = await self._complete(prompts.detect_language_prompt(text))
        return content.strip().lower().replace('"', "").replace("'", "")
