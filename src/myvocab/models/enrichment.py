"""Enrichment request/response models and translation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from myvocab.core.errors import ValidationError


@dataclass(frozen=True, slots=True)
class EnrichmentRequest:
    """A validated enrichment request.

    Args:
        text: Word or phrase, trimmed and non-empty.
        language: ISO language code, trimmed and non-empty.
        extra_fields: Free-text field list (``"synonyms, etymology"``), or None.
    """

    text: str
    language: str
    extra_fields: str | None = None

    @classmethod
    def create(
        cls, text: str, language: str, extra_fields: str | None = None
    ) -> EnrichmentRequest:
        """Trim inputs and reject empty values before anything else runs."""
        trimmed_text = text.strip()
        if not trimmed_text:
            raise ValidationError("Text is required for enrichment", field="text")
        trimmed_language = language.strip()
        if not trimmed_language:
            raise ValidationError("Language is required for enrichment", field="language")
        trimmed_extra = extra_fields.strip() if extra_fields else ""
        return cls(
            text=trimmed_text,
            language=trimmed_language,
            extra_fields=trimmed_extra or None,
        )

    @property
    def cacheable(self) -> bool:
        """Requests with extra fields are personal and never cached."""
        return self.extra_fields is None


@dataclass(frozen=True, slots=True)
class WordSense:
    """An additional part-of-speech/meaning of the same headword."""

    type: str
    definition: str
    examples: list[str] | None = None
    forms: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting absent optional fields."""
        data: dict[str, Any] = {"type": self.type, "definition": self.definition}
        if self.examples is not None:
            data["examples"] = list(self.examples)
        if self.forms is not None:
            data["forms"] = dict(self.forms)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WordSense:
        """Deserialize from dictionary."""
        examples = data.get("examples")
        forms = data.get("forms")
        return cls(
            type=data["type"],
            definition=data["definition"],
            examples=list(examples) if examples is not None else None,
            forms=dict(forms) if forms is not None else None,
        )


@dataclass(frozen=True, slots=True)
class EnrichmentResponse:
    """Linguistic data for a word or phrase.

    Args:
        definition: Definition of the primary usage.
        ipa: International Phonetic Alphabet pronunciation.
        type: Part of speech or content-type label (``"idiom"``, ...).
        examples: Example sentences for the primary usage; may be empty.
        forms: Grammatical forms (``past``, ``plural``, ``comparative``, ...).
        extra: User-requested fields keyed by field name.
        senses: Further parts of speech/meanings of the headword.
    """

    definition: str
    ipa: str
    type: str
    examples: list[str] = field(default_factory=list)
    forms: dict[str, str] | None = None
    extra: dict[str, str] | None = None
    senses: list[WordSense] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, omitting absent optional fields."""
        data: dict[str, Any] = {
            "definition": self.definition,
            "ipa": self.ipa,
            "type": self.type,
            "examples": list(self.examples),
        }
        if self.forms is not None:
            data["forms"] = dict(self.forms)
        if self.extra is not None:
            data["extra"] = dict(self.extra)
        if self.senses is not None:
            data["senses"] = [s.to_dict() for s in self.senses]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnrichmentResponse:
        """Deserialize from a dictionary that already passed validation."""
        forms = data.get("forms")
        extra = data.get("extra")
        senses = data.get("senses")
        return cls(
            definition=data["definition"],
            ipa=data["ipa"],
            type=data["type"],
            examples=list(data["examples"]),
            forms=dict(forms) if forms is not None else None,
            extra=dict(extra) if extra is not None else None,
            senses=[WordSense.from_dict(s) for s in senses] if senses is not None else None,
        )


@dataclass(frozen=True, slots=True)
class TranslateResult:
    """Result of a translate or rephrase call.

    Args:
        text: The translated or rephrased text.
        from_cache: Whether the text was served from the translation cache.
        cache_key: Key under which the result is cached, for targeted clearing.
    """

    text: str
    from_cache: bool
    cache_key: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"text": self.text, "from_cache": self.from_cache, "cache_key": self.cache_key}


@dataclass(frozen=True, slots=True)
class ApiKeyStatus:
    """Whether the active provider has a usable API key."""

    is_configured: bool
    provider_id: str | None
    provider_name: str | None
