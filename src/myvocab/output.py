"""Output formatting for enrichment and translation results."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from myvocab import __version__

if TYPE_CHECKING:
    from rich.console import Console, RenderableType

    from myvocab.models.enrichment import ApiKeyStatus, EnrichmentResponse, TranslateResult


def _join_forms(forms: dict[str, str]) -> str:
    return ", ".join(f"{k}: {v}" for k, v in forms.items())


class OutputFormatter:
    """Render results as JSON reports or rich console output."""

    def format_json(self, payload: dict[str, Any]) -> str:
        """Serialize a result dict with a version stamp."""
        return json.dumps({"myvocab_version": __version__, **payload}, ensure_ascii=False, indent=2)

    def enrichment_json(self, text: str, language: str, result: EnrichmentResponse) -> str:
        return self.format_json({"text": text, "language": language, "result": result.to_dict()})

    def render_enrichment(self, text: str, result: EnrichmentResponse) -> RenderableType:
        """Build a panel showing the primary sense, forms, extras and senses.

        Provider and user text is escaped, so brackets (``[rʌn]``) print as-is.
        """
        body = Table.grid(padding=(0, 1))
        body.add_column(style="bold cyan", no_wrap=True)
        body.add_column()

        body.add_row("Type", escape(result.type))
        body.add_row("IPA", escape(result.ipa))
        body.add_row("Definition", escape(result.definition))
        if result.examples:
            body.add_row("Examples", "\n".join(f"• {escape(ex)}" for ex in result.examples))
        if result.forms:
            body.add_row("Forms", escape(_join_forms(result.forms)))
        for name, value in (result.extra or {}).items():
            body.add_row(escape(name.capitalize()), escape(value))

        for i, sense in enumerate(result.senses or [], 1):
            body.add_row("", "")
            body.add_row(f"Sense {i}", Text(sense.type, style="italic"))
            body.add_row("", escape(sense.definition))
            for ex in sense.examples or []:
                body.add_row("", f"• {escape(ex)}")
            if sense.forms:
                body.add_row("", escape(_join_forms(sense.forms)))

        title = Text(text, style="bold")
        return Panel(body, title=title, expand=False)

    def print_translation(self, console: Console, result: TranslateResult) -> None:
        console.print(result.text, markup=False, highlight=False)
        if result.from_cache:
            console.print("[dim](cached)[/dim]")

    def render_status(self, status: ApiKeyStatus) -> RenderableType:
        table = Table(title="Provider status", show_header=False)
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Active provider", escape(status.provider_name or status.provider_id or "none"))
        state = "[green]configured[/green]" if status.is_configured else "[red]missing[/red]"
        table.add_row("API key", state)
        return table
