"""Prompt construction shared by every provider adapter.

All adapters build their requests from these functions so that switching
providers never changes the response shape the validator expects.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Enrichment schema
# ---------------------------------------------------------------------------

_ENRICHMENT_SYSTEM = (
    "You are a linguistic expert assistant that provides vocabulary enrichment data.\n"
    "You MUST respond with a valid JSON object containing exactly these fields:\n"
    "- definition: A clear, concise dictionary definition for the PRIMARY/most common usage\n"
    "- ipa: The International Phonetic Alphabet pronunciation\n"
    "- type: The part of speech (noun, verb, adjective, etc.) or content type "
    "(idiom, phrasal verb, quote) for the PRIMARY usage\n"
    "- examples: REQUIRED - An array of 2-3 example sentences demonstrating PRIMARY usage. "
    "This is MANDATORY for ALL content types including idioms, phrasal verbs, and quotes. "
    "For idioms and phrasal verbs, show them used naturally in context. For quotes, provide "
    "the original quote and context of when/how it was said.\n"
    "- forms: An object containing grammatical forms of the word for PRIMARY usage "
    "(only include applicable forms):\n"
    "  - For verbs: past, pastParticiple, presentParticiple, thirdPerson\n"
    "  - For nouns: plural\n"
    "  - For adjectives/adverbs: comparative, superlative\n"
    "  - For idioms, phrasal verbs, or quotes: omit or use empty object\n"
    "- senses: IMPORTANT - Check if the word can function as MULTIPLE parts of speech "
    '(e.g., "run" as verb AND noun, "book" as noun AND verb, "light" as noun, verb, '
    "AND adjective). If yes, include ALL additional senses here. Each sense object must have:\n"
    "  - type: The part of speech for this sense (REQUIRED)\n"
    "  - definition: Definition for this specific sense (REQUIRED)\n"
    "  - examples: 1-2 example sentences (optional but recommended)\n"
    "  - forms: Grammatical forms for this sense (e.g., plural for nouns)\n"
    '  For example, if primary is "run" as verb, senses should include "run" as noun '
    "(a morning run, a run in stockings).\n"
    "  Use an empty array [] if the word truly has only ONE part of speech and meaning; "
    "never omit the field"
)

_JSON_ONLY = "Respond ONLY with the JSON object, no additional text or markdown formatting."

_PLAIN_TEXT_ONLY = "Return only the {what}, nothing else."


def _extra(extra_fields: str | None) -> str:
    return extra_fields.strip() if extra_fields else ""


def build_enrichment_instructions(extra_fields: str | None = None) -> str:
    """System instructions fixing the enrichment response schema.

    Args:
        extra_fields: Comma-separated extra field names (``"synonyms, etymology"``).
            When non-empty, an ``extra`` object covering exactly those fields is
            demanded.

    Returns:
        The system prompt text.
    """
    parts = [_ENRICHMENT_SYSTEM]
    extra = _extra(extra_fields)
    if extra:
        parts.append(
            "\n- extra: An object containing these additional fields requested by the "
            f"user: {extra}\n"
            "  Each field should have a clear, informative value as a string."
        )
    parts.append(f"\n\n{_JSON_ONLY}")
    return "".join(parts)


def build_enrichment_query(text: str, language: str, extra_fields: str | None = None) -> str:
    """User query asking for enrichment of one word or phrase."""
    extra = _extra(extra_fields)
    parts = [
        f'Provide linguistic enrichment data for the following word/phrase in language "{language}":',
        "",
        f'"{text}"',
    ]
    if extra:
        parts += ["", f'Also include these extra fields in the "extra" object: {extra}']
    fields = "definition, ipa, type, examples, forms, senses"
    fields += ", and extra" if extra else ""
    parts += ["", f"Return a JSON object with {fields}."]
    return "\n".join(parts)


def build_combined_prompt(text: str, language: str, extra_fields: str | None = None) -> str:
    """System and user text in one block, for APIs without a system-role channel."""
    return (
        f"{build_enrichment_instructions(extra_fields)}\n\n"
        f"{build_enrichment_query(text, language, extra_fields)}"
    )


# ---------------------------------------------------------------------------
# Free-text operations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextPrompt:
    """System instruction + task text for a free-text operation."""

    system: str
    user: str
    temperature: float

    def combined(self) -> str:
        """Both parts joined, for single-channel APIs."""
        return f"{self.system}\n\n{self.user}"


def translate_prompt(
    text: str, from_lang: str, to_lang: str, style_prompt: str | None = None
) -> TextPrompt:
    system = "You are a translator."
    if style_prompt:
        system += f" {style_prompt}."
    system += " " + _PLAIN_TEXT_ONLY.format(what="translated text")
    return TextPrompt(
        system=system,
        user=f"Translate the following text from {from_lang} to {to_lang}:\n\n{text}",
        temperature=0.3,
    )


def rephrase_prompt(
    text: str,
    language: str,
    style_prompt: str | None = None,
    context: str | None = None,
) -> TextPrompt:
    system = (
        "You are a writing assistant that rephrases text while preserving its meaning. "
        f"Rephrase the given text in {language}."
    )
    if style_prompt:
        system += f" {style_prompt}"
    system += " " + _PLAIN_TEXT_ONLY.format(what="rephrased text")
    user = f"Rephrase the following text:\n\n{text}"
    if context:
        user = f"Context: {context}\n\n{user}"
    return TextPrompt(system=system, user=user, temperature=0.5)


def explain_prompt(text: str, language: str) -> TextPrompt:
    system = (
        "You are a language expert. Explain the hidden meaning, cultural context, nuances, "
        "or deeper significance of the given text. Your explanation should be in the same "
        f"language as the input text ({language}).\n\n"
        "Consider:\n"
        "- Idioms, metaphors, or figurative language\n"
        "- Cultural references or context\n"
        "- Implied meanings or subtext\n"
        "- Tone and emotional undertones\n"
        "- Any wordplay or double meanings\n\n"
        "Provide a clear, helpful explanation that reveals what the text really means "
        "beyond its literal interpretation."
    )
    return TextPrompt(
        system=system,
        user=f'Explain the deeper meaning of this text:\n\n"{text}"',
        temperature=0.5,
    )


def detect_language_prompt(text: str) -> TextPrompt:
    system = (
        "You are a language detection expert. Analyze the given text and return ONLY the "
        "ISO 639-1 language code (e.g., 'en' for English, 'fr' for French, 'es' for Spanish, "
        "'de' for German, 'ja' for Japanese, 'ko' for Korean, 'zh' for Chinese, "
        "'vi' for Vietnamese, etc.).\n\n"
        "Return ONLY the 2-letter language code, nothing else."
    )
    return TextPrompt(
        system=system,
        user=f"Detect the language of this text:\n\n{text}",
        temperature=0.1,
    )


def improve_style_prompt_prompt(description: str) -> TextPrompt:
    system = (
        "You are helping a user create a translation style prompt. The user will provide a "
        "simple description, and you should expand it into a detailed, clear instruction "
        "for an AI translator.\n\n"
        "The instruction should:\n"
        "- Describe the tone and formality level\n"
        "- Mention any specific language patterns to use or avoid\n"
        "- Be concise (2-3 sentences max)\n\n"
        + _PLAIN_TEXT_ONLY.format(what="improved prompt text")
    )
    return TextPrompt(
        system=system,
        user=(
            "Improve this translation style description into a detailed AI instruction:"
            f'\n\n"{description}"'
        ),
        temperature=0.7,
    )


def suggest_reply_prompt(
    message: str, language: str, style_prompt: str | None = None
) -> TextPrompt:
    system = (
        "You are a helpful writing assistant. Suggest a natural reply to the message the "
        f"user received. Write the reply in {language}."
    )
    if style_prompt:
        system += f" {style_prompt}"
    system += " " + _PLAIN_TEXT_ONLY.format(what="reply text")
    return TextPrompt(
        system=system,
        user=f"Suggest a reply to this message:\n\n{message}",
        temperature=0.7,
    )


def correct_text_prompt(
    text: str,
    source_lang: str,
    target_lang: str,
    style_prompt: str | None = None,
) -> TextPrompt:
    system = (
        "You are a language tutor helping a learner practise speaking. The learner's "
        f"native language is {source_lang} and they are practising {target_lang}. "
        f"Rewrite what they said as correct, natural {target_lang}, keeping their meaning. "
        f"If they mixed in {source_lang} words, express those in {target_lang}."
    )
    if style_prompt:
        system += f" {style_prompt}"
    system += " " + _PLAIN_TEXT_ONLY.format(what="corrected text")
    return TextPrompt(
        system=system,
        user=f"Correct this:\n\n{text}",
        temperature=0.3,
    )


def suggest_next_ideas_prompt(history: Sequence[str], language: str) -> TextPrompt:
    system = (
        "You are a conversation coach. Based on what the learner has said so far, suggest "
        f"2-3 short things they could say next, in {language}. Put each suggestion on its "
        "own line with no numbering or bullets. Return only the suggestions."
    )
    transcript = "\n".join(f"- {line}" for line in history)
    return TextPrompt(
        system=system,
        user=f"Conversation so far:\n{transcript}",
        temperature=0.7,
    )


def conversation_reply_prompt(
    message: str, language: str, style_prompt: str | None = None
) -> TextPrompt:
    system = (
        "You are a friendly conversation partner helping someone practise a language. "
        f"Reply in {language} with one or two short, natural sentences and keep the "
        "conversation going."
    )
    if style_prompt:
        system += f" {style_prompt}"
    system += " " + _PLAIN_TEXT_ONLY.format(what="reply")
    return TextPrompt(system=system, user=message, temperature=0.7)


def suggested_reply_to_bot_prompt(
    bot_message: str, language: str, style_prompt: str | None = None
) -> TextPrompt:
    system = (
        "You are helping a language learner answer their conversation partner. Write a "
        f"short, natural reply in {language} that a learner could say in response."
    )
    if style_prompt:
        system += f" {style_prompt}"
    system += " " + _PLAIN_TEXT_ONLY.format(what="reply")
    return TextPrompt(
        system=system,
        user=f"Your partner said:\n\n{bot_message}",
        temperature=0.7,
    )
