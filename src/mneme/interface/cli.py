"""mneme CLI: review, stats, parse and config commands."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from mneme.application.config import AppConfig, resolve_config
from mneme.domain.errors import MnemeError, PersistenceError
from mneme.domain.models import ReviewMode, ReviewResponse
from mneme.domain.topic_path import EMPTY_TOPIC_PATH, TopicPath

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mneme: spaced-repetition flashcards from your Markdown notes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage mneme configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

RESPONSE_KEYS = {
    "h": ReviewResponse.HARD,
    "g": ReviewResponse.GOOD,
    "e": ReviewResponse.EASY,
    "r": ReviewResponse.RESET,
}


def _resolve_with_overrides(ctx: typer.Context, **overrides: Any) -> AppConfig:
    verbose = ctx.obj.get("verbose", 1) if ctx.obj else 1
    config = resolve_config({**overrides, "verbose": verbose})
    if config.verbose >= 3:
        level = logging.DEBUG
    elif config.verbose == 2:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.getLogger("mneme").setLevel(level)
    return config


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for mneme."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = 1 + verbose


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    path: Annotated[
        Path | None,
        typer.Argument(help="Vault directory or single note. Defaults to 'vault_root' or CWD."),
    ] = None,
    deck: Annotated[
        str | None, typer.Option(help="Only review this deck, e.g. 'science/physics'.")
    ] = None,
    cram: Annotated[
        bool, typer.Option("--cram", help="Drill every card without changing schedules.")
    ] = False,
):
    """[bold green]Review[/bold green] the cards that are due today."""
    from mneme.application.factory import (
        create_review_sequencer,
        get_note_store,
        get_postponement_store,
    )
    from mneme.infrastructure.clock import SystemClock

    config = _resolve_with_overrides(ctx, vault_root=path)
    mode = ReviewMode.CRAM if cram else ReviewMode.REVIEW
    topic_path = TopicPath.parse(deck) if deck else EMPTY_TOPIC_PATH

    async def run():
        sequencer = await create_review_sequencer(
            config,
            get_note_store(config),
            get_postponement_store(config),
            SystemClock(),
            review_mode=mode,
        )
        if not topic_path.is_empty:
            sequencer.set_current_deck(topic_path)

        reviewed = 0
        while sequencer.has_current_card:
            card = sequencer.current_card
            stats = sequencer.get_deck_stats(topic_path)
            typer.secho(
                f"\n[{str(card.question.topic_path) or 'root'}] "
                f"due {stats.due_count} · new {stats.new_count} · total {stats.total_count}",
                fg="cyan",
            )
            typer.echo(card.front)

            action = typer.prompt("[s]how answer, [k] skip, [q]uit", default="s").strip().lower()
            if action == "q":
                break
            if action == "k":
                sequencer.skip_current_card()
                continue

            sequencer.show_answer()
            typer.echo("-" * 40)
            typer.echo(card.back)
            key = typer.prompt("[h]ard, [g]ood, [e]asy, [r]eset", default="g").strip().lower()
            response = RESPONSE_KEYS.get(key)
            if response is None:
                typer.secho(f"Unknown response '{key}', card kept in queue.", fg="yellow")
                continue

            try:
                await sequencer.process_review(response)
            except PersistenceError as e:
                typer.secho(f"Could not save schedule: {e}", fg="red")
            reviewed += 1

        if sequencer.dirty_questions:
            remaining = await sequencer.flush_dirty()
            if remaining:
                typer.secho(f"{remaining} question(s) could not be saved.", fg="red")

        typer.secho(f"Reviewed {reviewed} card(s).", fg="green")

    try:
        asyncio.run(run())
    except MnemeError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)


@app.command()
def stats(
    ctx: typer.Context,
    path: Annotated[
        Path | None, typer.Argument(help="Vault directory or single note.")
    ] = None,
):
    """Show due, new and total card counts per deck."""
    from mneme.application.factory import (
        create_review_sequencer,
        get_note_store,
        get_postponement_store,
    )
    from mneme.infrastructure.clock import SystemClock

    config = _resolve_with_overrides(ctx, vault_root=path)

    async def run():
        sequencer = await create_review_sequencer(
            config, get_note_store(config), get_postponement_store(config), SystemClock()
        )
        tree = sequencer.original_deck_tree
        rows = [(EMPTY_TOPIC_PATH, "All decks")]
        rows += [(d.topic_path, str(d.topic_path)) for d in tree.walk() if d.parent is not None]
        for topic_path, label in rows:
            s = sequencer.get_deck_stats(topic_path)
            indent = "  " * max(0, len(topic_path.segments) - 1)
            typer.echo(
                f"{indent}{label}: due {s.due_count}, new {s.new_count}, total {s.total_count}"
            )

    try:
        asyncio.run(run())
    except MnemeError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)


@app.command()
def parse(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Markdown note to parse.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON.")] = False,
):
    """List the questions found in a note with their line ranges."""
    from mneme.application.parser import parse as parse_text
    from mneme.application.utils.text import blank_out_frontmatter

    config = _resolve_with_overrides(ctx)
    if not file.is_file():
        typer.secho(f"No such file: {file}", fg="red")
        raise typer.Exit(2)

    text = blank_out_frontmatter(file.read_text(encoding="utf-8"))
    questions = parse_text(text, config.parser_options())

    if as_json:
        payload = [
            {
                "type": q.card_type.value,
                "first_line": q.first_line,
                "last_line": q.last_line,
                "text": q.text,
            }
            for q in questions
        ]
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    for q in questions:
        typer.secho(f"{q.card_type.value} [{q.first_line}-{q.last_line}]", fg="cyan")
        typer.echo(q.text)
    typer.echo(f"{len(questions)} question(s)")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = config.model_dump(mode="json")
    typer.echo(json.dumps(d, indent=2))
