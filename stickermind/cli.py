"""CLI entry point for stickermind."""

from __future__ import annotations

import asyncio
import functools
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, NoReturn, Sequence

import click

from stickermind.config import Config
from stickermind.errors import StickerMindError
from stickermind.models import (
    ROLE_TYPES,
    STATUS_FILTERS,
    STATUSES,
    STYLES,
    TARGET_AUDIENCES,
    GenerationParams,
    StickerIdea,
    ThemeIdea,
)
from stickermind.store import IdeaStore

_SHORT_ID = 8


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _open_store(config: Config) -> IdeaStore:
    from stickermind.storage import FileStorage

    store = IdeaStore(FileStorage(config.data_dir))
    store.load()
    return store


def _apply_llm_overrides(
    config: Config,
    provider: str | None,
    model: str | None,
    api_base: str | None,
    api_key: str | None,
) -> Config:
    """Layer CLI flags over the environment-derived LLM settings."""
    from stickermind.llm import get_provider, list_providers

    llm_overrides: dict[str, object] = {}
    if provider:
        pinfo = get_provider(provider)
        if not pinfo:
            click.echo(f"Unknown provider: {provider}")
            click.echo(f"Available: {', '.join(list_providers())}")
            sys.exit(1)
        if pinfo.api_base:
            llm_overrides["api_base"] = pinfo.api_base
        if not model:
            llm_overrides["model"] = pinfo.default_model
        llm_overrides["provider"] = provider
    if model:
        llm_overrides["model"] = model
    if api_base:
        llm_overrides["api_base"] = api_base
    if api_key:
        llm_overrides["api_key"] = api_key
    if llm_overrides:
        config = replace(config, llm=replace(config.llm, **llm_overrides))
    return config


def _llm_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Shared --provider/--model/--api-base/--api-key/--relay flags."""
    options = [
        click.option("--provider", default=None, help="LLM provider (google/openai/anthropic/deepseek/openrouter)"),
        click.option("--model", "-m", default=None, help="LLM model (e.g. gemini/gemini-2.0-flash)"),
        click.option("--api-base", default=None, help="LLM API base URL"),
        click.option("--api-key", default=None, help="LLM API key"),
        click.option("--relay", default=None, help="Generate through a stickermind relay at this URL"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _resolve_id(ids: Sequence[str], prefix: str, what: str) -> str:
    """Expand a (possibly shortened) id to the full id of one record."""
    if prefix in ids:
        return prefix
    matches = [i for i in ids if i.startswith(prefix)]
    if not matches:
        _fail(f"No {what} with id {prefix}")
    if len(matches) > 1:
        _fail(f"Ambiguous id {prefix}: matches {len(matches)} {what}s")
    return matches[0]


def _echo_idea(idea: StickerIdea) -> None:
    fav = "♥" if idea.is_favorite else " "
    click.echo(f"  {idea.id[:_SHORT_ID]} {fav} [{idea.status}] {idea.catchphrase}")
    click.echo(f"      {idea.name}")
    click.echo(f"      角色: {idea.role} | 情境: {idea.scenario} | 標籤: #{idea.culture_tag}")


def _echo_theme(theme: ThemeIdea, index: int | None = None) -> None:
    label = f"{index}." if index is not None else theme.id[:_SHORT_ID]
    click.echo(f"  {label} {theme.title}")
    click.echo(f"      {theme.description}")
    click.echo(f"      賣點: {theme.selling_point}")
    if theme.example_phrases:
        click.echo(f"      台詞: {' / '.join(theme.example_phrases)}")


async def _generate(config: Config, params: GenerationParams, kind: str) -> list[Any]:
    if config.relay_url:
        from stickermind.client import RelayClient

        client = RelayClient(config.relay_url)
        if kind == "ideas":
            return await client.generate_sticker_ideas(params)
        return await client.generate_sticker_themes(params)

    from stickermind.generator import generate_sticker_ideas, generate_sticker_themes

    if kind == "ideas":
        return await generate_sticker_ideas(params, llm=config.llm)
    return await generate_sticker_themes(params, llm=config.llm)


def _handle_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except StickerMindError as e:
            _fail(str(e))

    return wrapper


# ---------------------------------------------------------------------------
# Group
# ---------------------------------------------------------------------------


@click.group()
@click.option("--data-dir", default=None, help="Directory holding saved ideas and settings")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="stickermind")
@click.pass_context
def main(ctx: click.Context, data_dir: str | None, verbose: bool) -> None:
    """stickermind: LINE sticker idea generator and catalog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = Config.from_env()
    if data_dir:
        from stickermind.llm import LLMConfig
        from stickermind.storage import expand_path

        path = expand_path(data_dir)
        config = replace(config, data_dir=path, llm=LLMConfig.from_env(path))
    ctx.obj = config


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@main.command()
@click.option("--role", "-r", default=ROLE_TYPES[0], show_default=True, help=f"Character role, e.g. {ROLE_TYPES[2]}")
@click.option("--audience", "-a", default=TARGET_AUDIENCES[0], show_default=True, help="Target audience")
@click.option("--style", "-s", default=STYLES[0], show_default=True, help="Art style")
@click.option("--theme", "-t", default="", help="Specific theme (optional)")
@click.option("--count", "-c", type=click.IntRange(8, 40), default=16, show_default=True, help="Number of stickers")
@click.option("--yes", "-y", is_flag=True, help="Save without asking")
@_llm_options
@click.pass_obj
@_handle_errors
def generate(
    config: Config,
    role: str,
    audience: str,
    style: str,
    theme: str,
    count: int,
    yes: bool,
    provider: str | None,
    model: str | None,
    api_base: str | None,
    api_key: str | None,
    relay: str | None,
) -> None:
    """Generate a sticker pack plan and save it to the library."""
    from stickermind.generator import validate_params

    config = _apply_llm_overrides(config, provider, model, api_base, api_key)
    if relay:
        config = replace(config, relay_url=relay)

    params = GenerationParams(
        target_audience=audience, role_type=role, style=style, theme=theme, count=count
    )
    validate_params(params)

    source = config.relay_url or config.llm.model
    click.echo(f"Generating {count} sticker ideas with {source}...\n")
    ideas: list[StickerIdea] = asyncio.run(_generate(config, params, "ideas"))

    if not ideas:
        click.echo("The generation service returned no ideas.")
        return
    for idea in ideas:
        _echo_idea(idea)
    click.echo("")

    if not yes and not click.confirm(f"Save all {len(ideas)} ideas to the library?", default=True):
        click.echo("Discarded.")
        return
    store = _open_store(config)
    added = store.add_ideas(ideas)
    click.echo(f"✓ Saved {len(added)} idea(s).")


@main.command()
@click.option("--role", "-r", default=ROLE_TYPES[0], show_default=True, help="Character role")
@click.option("--audience", "-a", default=TARGET_AUDIENCES[0], show_default=True, help="Target audience")
@click.option("--style", "-s", default=STYLES[0], show_default=True, help="Art style")
@click.option("--count", "-c", "theme_count", type=click.IntRange(2, 8), default=4, show_default=True, help="Number of themes")
@click.option("--save-all", is_flag=True, help="Save every theme without asking")
@_llm_options
@click.pass_obj
@_handle_errors
def brainstorm(
    config: Config,
    role: str,
    audience: str,
    style: str,
    theme_count: int,
    save_all: bool,
    provider: str | None,
    model: str | None,
    api_base: str | None,
    api_key: str | None,
    relay: str | None,
) -> None:
    """Brainstorm sticker pack themes and pick which to keep."""
    from stickermind.generator import validate_params

    config = _apply_llm_overrides(config, provider, model, api_base, api_key)
    if relay:
        config = replace(config, relay_url=relay)

    params = GenerationParams(
        target_audience=audience, role_type=role, style=style, theme_count=theme_count
    )
    validate_params(params)

    click.echo(f"Brainstorming {theme_count} themes...\n")
    themes: list[ThemeIdea] = asyncio.run(_generate(config, params, "themes"))
    if not themes:
        click.echo("The generation service returned no themes.")
        return

    store = _open_store(config)
    saved = 0
    for n, theme in enumerate(themes, 1):
        _echo_theme(theme, n)
        if save_all or click.confirm("    Save this theme?", default=False):
            if store.add_theme(theme):
                saved += 1
            else:
                click.echo(f"    A theme titled {theme.title!r} is already saved.")
    click.echo(f"\n✓ Saved {saved} theme(s).")


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------


@main.command(name="list")
@click.option("--query", "-q", default="", help="Search name, role, catchphrase, scenario or emotion")
@click.option("--status", type=click.Choice(STATUS_FILTERS), default="all", show_default=True)
@click.pass_obj
def list_ideas(config: Config, query: str, status: str) -> None:
    """List saved sticker ideas (newest first)."""
    from stickermind.views import filter_ideas

    ideas = filter_ideas(_open_store(config).ideas, query, status)
    if not ideas:
        click.echo("沒有找到符合條件的題材。")
        return
    for idea in ideas:
        _echo_idea(idea)
    click.echo(f"\n{len(ideas)} idea(s)")


@main.command(name="themes")
@click.option("--query", "-q", default="", help="Search title or description")
@click.pass_obj
def list_themes(config: Config, query: str) -> None:
    """List saved pack themes."""
    from stickermind.views import filter_themes

    themes = filter_themes(_open_store(config).themes, query)
    if not themes:
        click.echo("沒有找到符合條件的主題。")
        return
    for theme in themes:
        _echo_theme(theme)
    click.echo(f"\n{len(themes)} theme(s)")


@main.command()
@click.argument("idea_id")
@click.pass_obj
def favorite(config: Config, idea_id: str) -> None:
    """Toggle the favorite flag on a sticker idea."""
    store = _open_store(config)
    full_id = _resolve_id([i.id for i in store.ideas], idea_id, "sticker idea")
    store.toggle_favorite(full_id)
    idea = store.get_idea(full_id)
    state = "favorited" if idea and idea.is_favorite else "unfavorited"
    click.echo(f"✓ {state} {full_id[:_SHORT_ID]}")


@main.command(name="status")
@click.argument("idea_id")
@click.argument("status", type=click.Choice(STATUSES))
@click.pass_obj
def set_status(config: Config, idea_id: str, status: str) -> None:
    """Set the progress status of a sticker idea."""
    store = _open_store(config)
    full_id = _resolve_id([i.id for i in store.ideas], idea_id, "sticker idea")
    store.update_status(full_id, status)  # type: ignore[arg-type]
    click.echo(f"✓ {full_id[:_SHORT_ID]} is now {status}")


@main.command()
@click.argument("idea_id")
@click.pass_obj
def remove(config: Config, idea_id: str) -> None:
    """Delete a sticker idea."""
    store = _open_store(config)
    full_id = _resolve_id([i.id for i in store.ideas], idea_id, "sticker idea")
    store.remove_idea(full_id)
    click.echo(f"✓ Removed {full_id[:_SHORT_ID]}")


@main.command(name="remove-theme")
@click.argument("theme_id")
@click.pass_obj
def remove_theme(config: Config, theme_id: str) -> None:
    """Delete a saved theme."""
    store = _open_store(config)
    full_id = _resolve_id([t.id for t in store.themes], theme_id, "theme")
    theme = store.get_theme(full_id)
    store.remove_theme(full_id)
    title = theme.title if theme else ""
    click.echo(f"✓ Removed {full_id[:_SHORT_ID]} {title}")


@main.command()
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt")
@click.pass_obj
def clear(config: Config, yes: bool) -> None:
    """Delete every saved idea and theme."""
    store = _open_store(config)
    confirmed = yes or click.confirm("確定要清空所有題材嗎？這將無法復原。", default=False)
    if store.clear_all(confirmed=confirmed):
        click.echo("✓ Library cleared.")
    else:
        click.echo("Nothing was deleted.")


@main.command()
@click.option("--themes", is_flag=True, help="Export themes instead of sticker ideas")
@click.option("--query", "-q", default="", help="Only export matching records")
@click.option("--status", type=click.Choice(STATUS_FILTERS), default="all", show_default=True)
@click.option("--format", "fmt", type=click.Choice(["csv", "line"]), default="csv", show_default=True,
              help="csv, or LINE phrase-set JSON (sticker ideas only)")
@click.option("--output", "-o", default=".", help="Output directory")
@click.pass_obj
def export(config: Config, themes: bool, query: str, status: str, fmt: str, output: str) -> None:
    """Export the filtered library to a file."""
    from stickermind.export import write_csv, write_line_phrase_set
    from stickermind.views import filter_ideas, filter_themes

    store = _open_store(config)
    kind = "themes" if themes else "ideas"
    if themes:
        if fmt == "line":
            _fail("The LINE phrase-set format only applies to sticker ideas")
        records: Sequence[Any] = filter_themes(store.themes, query)
    else:
        records = filter_ideas(store.ideas, query, status)

    if not records:
        _fail("Nothing to export.")

    if fmt == "line":
        path: Path = write_line_phrase_set(records, output)
    else:
        path = write_csv(records, kind, output)  # type: ignore[arg-type]
    click.echo(f"✓ Exported {len(records)} record(s) to {path}")


@main.command()
@click.pass_obj
def stats(config: Config) -> None:
    """Show totals and distributions for saved sticker ideas."""
    from stickermind.views import audience_distribution, emotion_distribution, recent_ideas, summarize

    ideas = _open_store(config).ideas
    if not ideas:
        click.echo("您的靈感庫目前是空的。Run `stickermind generate` to get started.")
        return

    summary = summarize(ideas)
    click.echo(f"總靈感數: {summary.total}  已完成繪製: {summary.completed}  收藏題材: {summary.favorite}\n")

    click.echo("情緒分佈 (Top 6)")
    for emotion, count in emotion_distribution(ideas):
        click.echo(f"  {emotion:<12} {'█' * count} {count}")

    click.echo("\n目標客群佔比")
    for audience, count in audience_distribution(ideas):
        click.echo(f"  {audience:<12} {count / summary.total:.0%}")

    click.echo("\n最新生成的靈感")
    for idea in recent_ideas(ideas):
        click.echo(f"  [{idea.role}] {idea.catchphrase} - {idea.scenario}")


# ---------------------------------------------------------------------------
# Relay & settings
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Listen address")
@click.option("--port", "-p", type=int, default=None, help="Listen port")
@click.pass_obj
def serve(config: Config, host: str | None, port: int | None) -> None:
    """Run the generation relay."""
    import uvicorn

    from stickermind.server import create_app

    app = create_app(config)
    uvicorn.run(app, host=host or config.host, port=port or config.port)


@main.group(name="config")
def config_group() -> None:
    """Manage the stored API key."""


@config_group.command(name="show")
@click.pass_obj
def config_show(config: Config) -> None:
    """Print the effective settings."""
    from stickermind.credentials import mask_key

    click.echo(f"data dir : {config.data_dir}")
    click.echo(f"model    : {config.llm.model}")
    click.echo(f"api base : {config.llm.api_base or '(default)'}")
    key = config.llm.api_key
    click.echo(f"api key  : {mask_key(key) if key else f'(not set; set {config.llm.env_key})'}")
    click.echo(f"relay    : {config.relay_url or '(none)'}")


@config_group.command(name="set-key")
@click.argument("key", required=False)
@click.pass_obj
def config_set_key(config: Config, key: str | None) -> None:
    """Store the generation API key locally."""
    from stickermind.credentials import set_stored_api_key

    if key is None:
        key = click.prompt("API key", hide_input=True)
    if not key.strip():
        _fail("Empty key; use `stickermind config clear-key` to remove the stored key.")
    path = set_stored_api_key(key, config.data_dir)
    click.echo(f"✓ API key saved to {path}")


@config_group.command(name="clear-key")
@click.pass_obj
def config_clear_key(config: Config) -> None:
    """Remove the stored API key."""
    from stickermind.credentials import clear_stored_api_key

    clear_stored_api_key(config.data_dir)
    click.echo("✓ Stored API key removed.")


if __name__ == "__main__":
    main()
