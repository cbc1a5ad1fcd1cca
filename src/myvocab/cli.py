"""Click-based CLI for myvocab."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click
from rich.console import Console

from myvocab import __version__
from myvocab.config import MyVocabConfig, load_config
from myvocab.core.errors import (
    ConfigurationError,
    MyVocabError,
    RetryExhaustedError,
    ValidationError,
)
from myvocab.models.settings import PROVIDER_IDS

if TYPE_CHECKING:
    from myvocab.service import EnrichmentService

T = TypeVar("T")

logger = logging.getLogger("myvocab")

_LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def _run(ctx: click.Context, work: Callable[[EnrichmentService], Awaitable[T]]) -> T:
    """Run ``work`` against a freshly wired service, mapping errors to exit codes."""
    from myvocab.service import create_service

    config: MyVocabConfig = ctx.obj["config"]
    err = Console(stderr=True, quiet=ctx.obj["quiet"])
    service = create_service(config)
    try:
        return asyncio.run(work(service))
    except ConfigurationError as exc:
        err.print(f"[red]Configuration error:[/red] {exc}")
        err.print("Set a key with: [bold]myvocab provider set-key <provider> <key>[/bold]")
        ctx.exit(2)
    except ValidationError as exc:
        err.print(f"[red]Invalid input:[/red] {exc}")
        ctx.exit(2)
    except RetryExhaustedError as exc:
        err.print(f"[red]Request failed:[/red] {exc}")
        ctx.exit(1)
    finally:
        service.close()


def _settings_storage(ctx: click.Context) -> Any:
    from myvocab.settings import SettingsStorage

    config: MyVocabConfig = ctx.obj["config"]
    return SettingsStorage(config.resolve_path(config.settings.file))


@click.group()
@click.version_option(version=__version__, prog_name="myvocab")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to user config TOML file.",
)
@click.option("--set", "set_kv", nargs=2, multiple=True, help="Override config KEY VALUE.")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output.")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Suppress all output.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    set_kv: tuple[tuple[str, str], ...],
    verbose: bool,
    quiet: bool,
) -> None:
    """myvocab -- vocabulary enrichment through AI providers."""
    ctx.ensure_object(dict)
    try:
        cfg = load_config(user_config_path=config_path, cli_overrides=dict(set_kv) or None)
    except MyVocabError as exc:
        raise click.UsageError(str(exc)) from exc
    ctx.obj = {"config": cfg, "verbose": verbose, "quiet": quiet}

    level = _LOG_LEVELS.get(cfg.general.log_level.lower(), logging.WARNING)
    if verbose:
        level = logging.DEBUG
    if quiet:
        level = logging.CRITICAL
    logging.basicConfig(level=level, format="%(name)s: %(message)s", stream=sys.stderr)


# ---------------------------------------------------------------------------
# Enrichment
# ---------------------------------------------------------------------------


@main.command()
@click.argument("text")
@click.option("-l", "--language", default="en", show_default=True, help="ISO language code.")
@click.option("--extra", "extra_fields", default=None, help='Extra fields, e.g. "synonyms, etymology".')
@click.option(
    "--output-format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def enrich(
    ctx: click.Context,
    text: str,
    language: str,
    extra_fields: str | None,
    output_format: str,
) -> None:
    """Look up definition, IPA, part of speech and examples for TEXT."""
    from myvocab.output import OutputFormatter

    result = _run(ctx, lambda svc: svc.enrich(text, language, extra_fields))
    formatter = OutputFormatter()
    if output_format == "json":
        click.echo(formatter.enrichment_json(text, language, result))
    else:
        Console(quiet=ctx.obj["quiet"]).print(formatter.render_enrichment(text, result))


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


@main.command()
@click.argument("text")
@click.option("--from", "from_lang", required=True, help="Source language code.")
@click.option("--to", "to_lang", required=True, help="Target language code.")
@click.option("--style-id", default=None, help="Style identifier (part of the cache key).")
@click.option("--style", "style_prompt", default=None, help="Style instruction.")
@click.option("--context", default=None, help="Context that disambiguates the text.")
@click.option("--fresh", is_flag=True, default=False, help="Drop the cached result first.")
@click.pass_context
def translate(
    ctx: click.Context,
    text: str,
    from_lang: str,
    to_lang: str,
    style_id: str | None,
    style_prompt: str | None,
    context: str | None,
    fresh: bool,
) -> None:
    """Translate TEXT between languages."""
    from myvocab.output import OutputFormatter

    async def work(svc: EnrichmentService) -> Any:
        result = await svc.translate(text, from_lang, to_lang, style_id, style_prompt, context)
        if fresh and result.from_cache:
            await svc.clear_translation_cache(result.cache_key)
            result = await svc.translate(text, from_lang, to_lang, style_id, style_prompt, context)
        return result

    result = _run(ctx, work)
    OutputFormatter().print_translation(Console(quiet=ctx.obj["quiet"]), result)


@main.command()
@click.argument("text")
@click.option("-l", "--language", default="en", show_default=True, help="ISO language code.")
@click.option("--style-id", default=None, help="Style identifier (part of the cache key).")
@click.option("--style", "style_prompt", default=None, help="Style instruction.")
@click.option("--context", default=None, help="Context for the rephrasing.")
@click.pass_context
def rephrase(
    ctx: click.Context,
    text: str,
    language: str,
    style_id: str | None,
    style_prompt: str | None,
    context: str | None,
) -> None:
    """Rephrase TEXT in the same language."""
    from myvocab.output import OutputFormatter

    result = _run(ctx, lambda svc: svc.rephrase(text, language, style_id, style_prompt, context))
    OutputFormatter().print_translation(Console(quiet=ctx.obj["quiet"]), result)


@main.command()
@click.argument("text")
@click.option("-l", "--language", default="en", show_default=True, help="ISO language code.")
@click.pass_context
def explain(ctx: click.Context, text: str, language: str) -> None:
    """Explain the deeper meaning of TEXT."""
    click.echo(_run(ctx, lambda svc: svc.explain(text, language)))


@main.command(name="detect-language")
@click.argument("text")
@click.pass_context
def detect_language(ctx: click.Context, text: str) -> None:
    """Print the ISO 639-1 code of TEXT's language."""
    click.echo(_run(ctx, lambda svc: svc.detect_language(text)))


@main.command(name="improve-style")
@click.argument("description")
@click.pass_context
def improve_style(ctx: click.Context, description: str) -> None:
    """Expand a short style DESCRIPTION into a translator instruction."""
    click.echo(_run(ctx, lambda svc: svc.improve_style_prompt(description)))


# ---------------------------------------------------------------------------
# Conversation practice
# ---------------------------------------------------------------------------


@main.command()
@click.argument("text")
@click.option("--from", "source_lang", required=True, help="Learner's native language.")
@click.option("--to", "target_lang", required=True, help="Language being practised.")
@click.option("--style", "style_prompt", default=None, help="Style instruction.")
@click.pass_context
def correct(
    ctx: click.Context,
    text: str,
    source_lang: str,
    target_lang: str,
    style_prompt: str | None,
) -> None:
    """Correct TEXT into natural target-language phrasing."""
    click.echo(
        _run(ctx, lambda svc: svc.correct_text(text, source_lang, target_lang, style_prompt))
    )


@main.command()
@click.argument("message")
@click.option("-l", "--language", default="en", show_default=True, help="ISO language code.")
@click.option("--style", "style_prompt", default=None, help="Style instruction.")
@click.option(
    "--suggest", is_flag=True, default=False, help="Also suggest what to answer the reply."
)
@click.pass_context
def reply(
    ctx: click.Context,
    message: str,
    language: str,
    style_prompt: str | None,
    suggest: bool,
) -> None:
    """Get a conversation partner's reply to MESSAGE."""

    async def work(svc: EnrichmentService) -> tuple[str, str | None]:
        bot = await svc.get_conversation_reply(message, language, style_prompt)
        answer = None
        if suggest:
            answer = await svc.get_suggested_reply_to_bot(bot, language, style_prompt)
        return bot, answer

    bot, answer = _run(ctx, work)
    click.echo(bot)
    if answer is not None:
        click.echo(f"\nYou could say: {answer}")


@main.command(name="suggest-reply")
@click.argument("message")
@click.option("-l", "--language", default="en", show_default=True, help="ISO language code.")
@click.option("--style", "style_prompt", default=None, help="Style instruction.")
@click.pass_context
def suggest_reply(
    ctx: click.Context, message: str, language: str, style_prompt: str | None
) -> None:
    """Suggest a reply to a received MESSAGE."""
    click.echo(_run(ctx, lambda svc: svc.suggest_reply(message, language, style_prompt)))


@main.command(name="suggest-ideas")
@click.argument("history", nargs=-1, required=True)
@click.option("-l", "--language", default="en", show_default=True, help="ISO language code.")
@click.pass_context
def suggest_ideas(ctx: click.Context, history: tuple[str, ...], language: str) -> None:
    """Suggest what to say next after the given HISTORY lines."""
    click.echo(_run(ctx, lambda svc: svc.suggest_next_ideas(list(history), language)))


# ---------------------------------------------------------------------------
# Status, cache and provider settings
# ---------------------------------------------------------------------------


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show whether the active provider has an API key."""
    from myvocab.output import OutputFormatter

    result = _run(ctx, lambda svc: svc.check_api_key_status())
    Console(quiet=ctx.obj["quiet"]).print(OutputFormatter().render_status(result))
    if not result.is_configured:
        ctx.exit(2)


@main.group()
def cache() -> None:
    """Manage cached responses."""


@cache.command(name="clear")
@click.option(
    "--translations", is_flag=True, default=False, help="Clear translations instead."
)
@click.pass_context
def cache_clear(ctx: click.Context, translations: bool) -> None:
    """Clear the enrichment (or translation) cache."""
    if translations:
        _run(ctx, lambda svc: svc.clear_all_translations())
        click.echo("Translation cache cleared.")
    else:
        _run(ctx, lambda svc: svc.clear_cache())
        click.echo("Enrichment cache cleared.")


@main.group()
def provider() -> None:
    """Configure AI providers."""


@provider.command(name="set-key")
@click.argument("provider_id", type=click.Choice(PROVIDER_IDS))
@click.argument("api_key")
@click.pass_context
def provider_set_key(ctx: click.Context, provider_id: str, api_key: str) -> None:
    """Store API_KEY for PROVIDER_ID."""
    asyncio.run(_settings_storage(ctx).set_api_key(provider_id, api_key))
    click.echo(f"API key saved for {provider_id}.")


@provider.command(name="clear-key")
@click.argument("provider_id", type=click.Choice(PROVIDER_IDS))
@click.pass_context
def provider_clear_key(ctx: click.Context, provider_id: str) -> None:
    """Remove the stored key for PROVIDER_ID."""
    asyncio.run(_settings_storage(ctx).set_api_key(provider_id, ""))
    click.echo(f"API key cleared for {provider_id}.")


@provider.command(name="use")
@click.argument("provider_id", type=click.Choice(PROVIDER_IDS))
@click.pass_context
def provider_use(ctx: click.Context, provider_id: str) -> None:
    """Make PROVIDER_ID the active provider."""
    asyncio.run(_settings_storage(ctx).set_active_provider(provider_id))
    click.echo(f"Active provider: {provider_id}")


@main.command(name="config")
@click.pass_context
def config_cmd(ctx: click.Context) -> None:
    """Show the resolved configuration."""
    import json as json_mod
    from dataclasses import asdict

    from rich.syntax import Syntax

    config: MyVocabConfig = ctx.obj["config"]
    text = json_mod.dumps(asdict(config), indent=2)
    Console(quiet=ctx.obj["quiet"]).print(Syntax(text, "json"))
