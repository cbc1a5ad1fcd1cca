"""Structural validation of decoded provider output.

A response that fails :func:`is_valid_enrichment_response` is never
returned to a caller or written to the cache.
"""

from __future__ import annotations

import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def extract_json_text(content: str) -> str:
    """Strip a markdown code fence around a JSON answer, if present."""
    match = _FENCE_RE.search(content)
    if match and match.group(1):
        return match.group(1).strip()
    return content.strip()


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_optional_string_map(value: Any) -> bool:
    """Absent (None) or a dict whose every value is a string."""
    if value is None:
        return True
    if not isinstance(value, dict):
        return False
    return all(isinstance(v, str) for v in value.values())


def _is_valid_sense(sense: Any) -> bool:
    if not isinstance(sense, dict):
        return False
    if not isinstance(sense.get("type"), str) or not isinstance(sense.get("definition"), str):
        return False
    if "examples" in sense and sense["examples"] is not None:
        if not _is_string_list(sense["examples"]):
            return False
    return _is_optional_string_map(sense.get("forms"))


def is_valid_enrichment_response(candidate: Any) -> bool:
    """Check a decoded JSON value against the enrichment schema.

    Required: string ``definition``, ``ipa`` and ``type``; ``examples`` as a
    list of strings (may be empty). Optional: ``forms`` and ``extra`` as
    string maps, ``senses`` as a list of senses each carrying string
    ``type`` and ``definition``.
    """
    if not isinstance(candidate, dict):
        return False
    for key in ("definition", "ipa", "type"):
        if not isinstance(candidate.get(key), str):
            return False
    if not _is_string_list(candidate.get("examples")):
        return False
    if not _is_optional_string_map(candidate.get("forms")):
        return False
    if not _is_optional_string_map(candidate.get("extra")):
        return False
    senses = candidate.get("senses")
    if senses is None:
        return True
    return isinstance(senses, list) and all(_is_valid_sense(s) for s in senses)
