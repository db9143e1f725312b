"""CLI for the Stack Advisor.

Provides the questionnaire recommender, the response parser and an
interactive chat with a model provider.
"""

import json
import os
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tech_catalog.catalog import (
    DEFAULT_CATALOG,
    CatalogLoadError,
    CatalogValidator,
    load_catalog,
    save_catalog,
)
from tech_catalog.questions import QUESTIONS, validate_answers
from tech_catalog.schema import Category, TechnologyCatalog

from . import __version__
from .chat import ChatSession, MissingApiKeyError
from .config import find_config_file, load_config, save_default_config
from .logging_setup import setup_logging
from .markdown import parse_markdown, render_rich
from .preferences import DEFAULT_PREFERENCES_PATH, JsonFilePreferenceStore, Preferences
from .providers import AIProvider, ProviderError, create_client
from .response_parser import parse_response
from .schema import AIRecommendation, Message
from .scorer import ScoredTechnology, ScoringEngine

console = Console()

CLI_ERRORS = (
    CatalogLoadError,
    ProviderError,
    MissingApiKeyError,
    ValidationError,
    yaml.YAMLError,
    OSError,
    ValueError,
)

PROVIDER_CHOICE = click.Choice([p.value for p in AIProvider])


def _preferences() -> Preferences:
    path = os.environ.get("STACK_ADVISOR_PREFERENCES")
    return Preferences(JsonFilePreferenceStore(Path(path) if path else DEFAULT_PREFERENCES_PATH))


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(1)


def _catalog(ctx: click.Context) -> TechnologyCatalog:
    path = ctx.obj.get("catalog_path")
    return load_catalog(path) if path else DEFAULT_CATALOG


@click.group()
@click.version_option(version=__version__, prog_name="stack-advisor")
@click.option(
    "--catalog", "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Technology catalog (JSON or YAML) to use instead of the built-in one"
)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration YAML file"
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, catalog: Optional[Path], config: Optional[Path], verbose: bool):
    """Tech Stack Advisor.

    Recommends a frontend, backend, database and hosting combination from a
    short questionnaire, or through a conversation with an AI model.
    """
    setup_logging("DEBUG" if verbose else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["catalog_path"] = catalog

    config_path = config or find_config_file()
    if config_path:
        try:
            load_config(config_path)
        except CLI_ERRORS as e:
            _fail(e)


@main.command("questions")
def questions_cmd():
    """List the questionnaire and its answer values."""
    for i, q in enumerate(QUESTIONS, 1):
        console.print(f"[bold cyan]{i}. {q.title}[/bold cyan]")
        console.print(f"   ID: {q.id.value}")
        console.print(f"   {q.description}")
        for opt in q.options:
            console.print(f"     - {opt.value}: {opt.icon} {opt.label}")
        console.print()


@main.command("recommend")
@click.option(
    "--answer", "-a",
    multiple=True,
    help="Questionnaire answer (format: question_id=value), e.g. -a projectType=webapp"
)
@click.option("--json-output", "-j", is_flag=True, help="Output raw JSON instead of formatted text")
@click.option("--show-scores", "-s", is_flag=True, help="Show the per-axis score breakdown")
@click.pass_context
def recommend_cmd(ctx: click.Context, answer: tuple, json_output: bool, show_scores: bool):
    """Recommend technologies from questionnaire answers.

    Examples:
        stack-advisor recommend -a projectType=webapp -a priority=speed
        stack-advisor recommend -a projectType=api -a scale=large -j
    """
    answers = {}
    for ans in answer:
        if "=" in ans:
            key, value = ans.split("=", 1)
            answers[key.strip()] = value.strip()
        else:
            console.print(f"[yellow]Ignoring malformed answer '{escape(ans)}' (expected question_id=value)[/yellow]")

    try:
        engine = ScoringEngine(catalog=_catalog(ctx))
    except CLI_ERRORS as e:
        _fail(e)

    ranked = engine.rank(answers)
    if json_output:
        click.echo(json.dumps(_ranked_to_json(ranked), indent=2))
        return

    for problem in validate_answers(answers):
        console.print(f"[yellow]Warning: {problem}[/yellow]")
    display_ranking(ranked, show_scores)


@main.command("quiz")
@click.option("--show-scores", "-s", is_flag=True, help="Show the per-axis score breakdown")
@click.pass_context
def quiz_cmd(ctx: click.Context, show_scores: bool):
    """Answer the questionnaire interactively."""
    try:
        engine = ScoringEngine(catalog=_catalog(ctx))
    except CLI_ERRORS as e:
        _fail(e)

    answers = {}
    for i, q in enumerate(QUESTIONS, 1):
        console.print(f"\n[bold cyan]{i}/{len(QUESTIONS)} {q.title}[/bold cyan]")
        console.print(f"[dim]{q.description}[/dim]")
        for opt in q.options:
            console.print(f"  [cyan]{opt.value}[/cyan]  {opt.icon} {opt.label}")
        while True:
            value = click.prompt("Your choice (Enter to skip)", default="", show_default=False).strip()
            if not value or value in q.option_values():
                break
            console.print(f"[yellow]Choose one of: {', '.join(q.option_values())}[/yellow]")
        if value:
            answers[q.id.value] = value

    display_ranking(engine.rank(answers), show_scores)


@main.command("parse")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--json-output", "-j", is_flag=True, help="Output the parsed structure as JSON")
def parse_cmd(source, json_output: bool):
    """Parse a raw model reply from a file or stdin."""
    parsed = parse_response(source.read())
    if json_output:
        click.echo(parsed.model_dump_json(indent=2, by_alias=True))
        return
    display_message(Message.assistant(parsed))


@main.command("chat")
@click.option("--provider", "-p", type=PROVIDER_CHOICE, default=AIProvider.GEMINI.value, help="Model provider")
@click.option("--model", "-m", help="Model id (default: last selected for the provider)")
def chat_cmd(provider: str, model: Optional[str]):
    """Chat with an AI architect about your stack.

    Type a message, or the number of a suggested reply. Type /reset to start
    over and /quit to leave.
    """
    preferences = _preferences()
    try:
        session = ChatSession.from_preferences(preferences, AIProvider(provider), model)
    except CLI_ERRORS as e:
        _fail(e)

    console.print(f"[bold blue]Stack Advisor chat[/bold blue] ({provider}, {session.client.model})")
    console.print("[dim]/reset to start over, /quit to leave[/dim]\n")

    suggestions: tuple[str, ...] = ()
    while True:
        text = click.prompt("You", default="", show_default=False).strip()
        if not text:
            continue
        if text in ("/quit", "/exit"):
            break
        if text == "/reset":
            session.reset()
            suggestions = ()
            console.print("[dim]Conversation cleared.[/dim]")
            continue
        if text.isdigit() and 1 <= int(text) <= len(suggestions):
            text = suggestions[int(text) - 1]

        try:
            with console.status("Thinking..."):
                reply = session.send(text)
        except ProviderError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            continue

        display_message(reply)
        suggestions = reply.suggestions


@main.group("key")
def key_group():
    """Manage stored provider API keys."""


@key_group.command("set")
@click.option("--provider", "-p", type=PROVIDER_CHOICE, required=True, help="Model provider")
@click.option("--api-key", prompt=True, hide_input=True, help="API key to store")
def key_set_cmd(provider: str, api_key: str):
    """Store an API key for a provider."""
    try:
        _preferences().save_api_key(AIProvider(provider), api_key)
    except CLI_ERRORS as e:
        _fail(e)
    console.print(f"[green]API key saved for {provider}[/green]")


@key_group.command("clear")
@click.option("--provider", "-p", type=PROVIDER_CHOICE, required=True, help="Model provider")
def key_clear_cmd(provider: str):
    """Remove the stored API key for a provider."""
    try:
        _preferences().clear_api_key(AIProvider(provider))
    except CLI_ERRORS as e:
        _fail(e)
    console.print(f"[green]API key cleared for {provider}[/green]")


@main.command("models")
@click.option("--provider", "-p", type=PROVIDER_CHOICE, required=True, help="Model provider")
@click.option("--select", "select_model", help="Remember this model id for the provider")
def models_cmd(provider: str, select_model: Optional[str]):
    """List models for a provider, or select one."""
    preferences = _preferences()
    ai_provider = AIProvider(provider)

    if select_model:
        try:
            preferences.save_selected_model(ai_provider, select_model)
        except CLI_ERRORS as e:
            _fail(e)
        console.print(f"[green]Selected {select_model} for {provider}[/green]")
        return

    api_key = preferences.get_api_key(ai_provider)
    if not api_key:
        _fail(MissingApiKeyError(f"No API key stored for {provider}"))

    selected = preferences.get_selected_model(ai_provider)
    with console.status("Fetching models..."):
        models = create_client(ai_provider, api_key).list_models()

    table = Table(title=f"{provider} models")
    table.add_column("", width=1)
    table.add_column("Model ID", style="cyan")
    table.add_column("Name")
    for m in models:
        table.add_row("*" if m.id == selected else "", m.id, m.name)
    console.print(table)


@main.group("config")
def config_group():
    """Manage advisor configuration."""


@config_group.command("init")
@click.argument("path", type=click.Path(path_type=Path), default="advisor-config.yaml")
def config_init_cmd(path: Path):
    """Write the default configuration to PATH."""
    try:
        save_default_config(path)
    except CLI_ERRORS as e:
        _fail(e)
    console.print(f"[green]Default configuration written to {path}[/green]")


@main.group("catalog")
def catalog_group():
    """Inspect and export technology catalogs."""


@catalog_group.command("export")
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
def catalog_export_cmd(ctx: click.Context, path: Path):
    """Export the active catalog to a JSON file."""
    try:
        catalog = _catalog(ctx)
        save_catalog(catalog, path)
    except CLI_ERRORS as e:
        _fail(e)
    console.print(f"[green]Exported {len(catalog.technologies)} technologies to {path}[/green]")


@catalog_group.command("validate")
@click.argument("path", type=click.Path(exists=True, path_type=Path), required=False)
@click.pass_context
def catalog_validate_cmd(ctx: click.Context, path: Optional[Path]):
    """Check a catalog (default: the active one) for gaps."""
    try:
        catalog = load_catalog(path) if path else _catalog(ctx)
    except CLI_ERRORS as e:
        _fail(e)

    warnings = CatalogValidator().validate(catalog)
    if not warnings:
        console.print(f"[green]Catalog OK ({len(catalog.technologies)} technologies)[/green]")
        return
    console.print(f"[yellow]{len(warnings)} warning(s):[/yellow]")
    for warning in warnings:
        console.print(f"  - {warning}")


def _ranked_to_json(ranked: dict[Category, list[ScoredTechnology]]) -> dict:
    return {
        category.value: [
            {
                "id": s.technology.id,
                "name": s.technology.name,
                "score": s.score,
                "breakdown": {axis.value: value for axis, value in s.breakdown.items()},
            }
            for s in entries
        ]
        for category, entries in ranked.items()
    }


def display_ranking(ranked: dict[Category, list[ScoredTechnology]], show_scores: bool = False) -> None:
    """Display the top technologies per category."""
    table = Table(title="Recommended Stack")
    table.add_column("Category", style="bold")
    table.add_column("Rank", justify="right")
    table.add_column("Technology", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Why", style="dim")
    if show_scores:
        table.add_column("Breakdown", style="dim")

    for category, entries in ranked.items():
        if not entries:
            table.add_row(category.value.title(), "-", "[dim]no technologies[/dim]", "", "")
            continue
        for rank, s in enumerate(entries, 1):
            tech = s.technology
            why = ", ".join([escape(p) for p in tech.pros[:2]] + [f"[red]{escape(c)}[/red]" for c in tech.cons[:1]])
            row = [
                category.value.title() if rank == 1 else "",
                str(rank),
                f"{tech.logo} {tech.name}".strip(),
                f"{s.score:g}",
                why,
            ]
            if show_scores:
                row.append(" ".join(f"{axis.value}={value:g}" for axis, value in s.breakdown.items() if value))
            table.add_row(*row)

    console.print(table)


def display_recommendation(recommendation: AIRecommendation) -> None:
    """Display a structured recommendation from the model."""
    table = Table(show_header=True)
    table.add_column("Category", style="bold")
    table.add_column("Choice", style="cyan")
    table.add_column("Reason")
    table.add_column("Alternatives", style="dim")
    for category, choice in recommendation.choices():
        table.add_row(
            category.value.title(),
            escape(choice.name),
            escape(choice.reason),
            escape(", ".join(choice.alternatives)),
        )
    console.print(table)
    if recommendation.summary:
        console.print(f"[italic]{escape(recommendation.summary)}[/italic]")
    if recommendation.follow_up:
        console.print(escape(recommendation.follow_up))


def display_message(message: Message) -> None:
    """Display an assistant message with its recommendation and quick replies."""
    console.print(Panel(render_rich(parse_markdown(message.content)), title="Advisor", border_style="blue"))
    if message.recommendations:
        display_recommendation(message.recommendations)
    for i, suggestion in enumerate(message.suggestions, 1):
        console.print(f"  [cyan]{i}[/cyan] {escape(suggestion)}")


if __name__ == "__main__":
    main()
