"""Prompt building and response validation shared by all providers."""

from myvocab.enrichment.prompts import (
    build_combined_prompt,
    build_enrichment_instructions,
    build_enrichment_query,
)
from myvocab.enrichment.validation import extract_json_text, is_valid_enrichment_response

__all__ = [
    "build_combined_prompt",
    "build_enrichment_instructions",
    "build_enrichment_query",
    "extract_json_text",
    "is_valid_enrichment_response",
]
