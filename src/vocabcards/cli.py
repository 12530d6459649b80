# src/vocabcards/cli.py
"""
VocabCards Command Line Interface (CLI).

A thin terminal shell over the core services, built with `typer` and `rich`.
Every command opens the app against the configured data directory, performs
one operation and renders the outcome.

Usage
-----
    $ vocabcards add gato cat --example "El gato duerme."
    $ vocabcards list
    $ vocabcards remove 1729000000000000
    $ vocabcards remind on --interval 60
    $ vocabcards remind interval 15
    $ vocabcards remind status
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vocabcards.app import VocabApp, open_app
from vocabcards.core.config import load_config
from vocabcards.core.contracts.card import VocabCard
from vocabcards.core.contracts.reminder import INTERVAL_CHOICES, ReminderState
from vocabcards.core.errors import NotFoundError, SchedulingError, VocabCardsError
from vocabcards.reminders.registry import InMemoryTaskRegistry

# Ensure env vars (like VOCABCARDS_DATA_DIR) are loaded before any logic runs
load_dotenv()

T = TypeVar("T")

app = typer.Typer(
    help="VocabCards: keep a vocabulary deck and get periodic review reminders.",
    rich_markup_mode="markdown",
)
remind_app = typer.Typer(help="Turn review reminders on or off and set their interval.")
app.add_typer(remind_app, name="remind")

console = Console()


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _data_dir(ctx: typer.Context) -> Path | None:
    obj = ctx.find_root().obj
    return obj.get("data_dir") if isinstance(obj, dict) else None


def _run(ctx: typer.Context, action: Callable[[VocabApp], Awaitable[T]]) -> T:
    """Open the app, run `action` on it and map core errors to exit code 1."""

    async def _main() -> T:
        config = load_config()
        override = _data_dir(ctx)
        if override is not None:
            config = config.model_copy(update={"data_dir": override})
        handle = await open_app(config, notifier=_notify)
        return await action(handle)

    try:
        return asyncio.run(_main())
    except NotFoundError as e:
        console.print(f"[bold yellow]Not found:[/bold yellow] {e}")
        raise typer.Exit(code=1) from e
    except SchedulingError as e:
        console.print(f"[bold red]Reminder error:[/bold red] {e}")
        console.print(f"[dim]Reminders are now {e.state.describe()}.[/dim]")
        raise typer.Exit(code=1) from e
    except VocabCardsError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e


async def _notify(card: VocabCard) -> None:
    body = f"[bold]{card.word}[/bold]: {card.meaning}"
    if card.example:
        body += f"\n[italic]{card.example}[/italic]"
    console.print(Panel.fit(body, title="Time to review", border_style="cyan"))


def _render_state(state: ReminderState) -> None:
    colour = "green" if state.enabled else "dim"
    console.print(f"Reminders: [{colour}]{state.describe()}[/{colour}]")


# --------------------------------------------------------------------------- #
# Commands: cards
# --------------------------------------------------------------------------- #


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None,
        typer.Option(
            "--data-dir",
            "-d",
            file_okay=False,
            help="Directory holding the card and settings records.",
        ),
    ] = None,
) -> None:
    """VocabCards: keep a vocabulary deck and get periodic review reminders."""
    ctx.obj = {"data_dir": data_dir}


@app.command()
def add(
    ctx: typer.Context,
    word: Annotated[str, typer.Argument(help="The word or phrase to learn.")],
    meaning: Annotated[str, typer.Argument(help="What it means.")],
    example: Annotated[
        str, typer.Option("--example", "-e", help="Optional example sentence.")
    ] = "",
) -> None:
    """Add a vocabulary card."""
    card = _run(ctx, lambda a: a.cards.add(word, meaning, example))
    console.print(f"[bold green]✅ Added[/bold green] {card.word} [dim]({card.id})[/dim]")


@app.command("list")
def list_cards(ctx: typer.Context) -> None:
    """Show every card in the order it was added."""
    cards = _run(ctx, lambda a: a.cards.list_cards())
    if not cards:
        console.print("[dim]No cards yet. Add one with `vocabcards add WORD MEANING`.[/dim]")
        return

    table = Table(title=f"Vocabulary ({len(cards)})")
    table.add_column("ID", style="dim")
    table.add_column("Word", style="bold")
    table.add_column("Meaning")
    table.add_column("Example", style="italic")
    for card in cards:
        table.add_row(card.id, card.word, card.meaning, card.example)
    console.print(table)


@app.command()
def remove(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="ID shown by `vocabcards list`.")],
) -> None:
    """Delete one card."""
    _run(ctx, lambda a: a.cards.remove(card_id))
    console.print(f"[bold green]🗑 Removed[/bold green] {card_id}")


@app.command("show-settings")
def show_settings(ctx: typer.Context) -> None:
    """Print the stored settings record."""
    settings = _run(ctx, lambda a: a.settings.get())
    _render_state(ReminderState.from_settings(settings))
    console.print(f"Theme: {'dark' if settings.dark_mode else 'light'}")


@app.command()
def theme(
    ctx: typer.Context,
    dark: Annotated[bool, typer.Option("--dark/--light", help="Colour theme preference.")],
) -> None:
    """Store the colour theme preference."""
    _run(ctx, lambda a: a.settings.set_dark_mode(dark))
    console.print(f"Theme set to {'dark' if dark else 'light'}.")


# --------------------------------------------------------------------------- #
# Commands: reminders
# --------------------------------------------------------------------------- #


@remind_app.command("on")
def remind_on(
    ctx: typer.Context,
    interval: Annotated[
        int | None,
        typer.Option(
            "--interval",
            "-i",
            min=1,
            help=f"Minutes between reminders (usually one of {INTERVAL_CHOICES}).",
        ),
    ] = None,
) -> None:
    """Enable reminders, keeping the stored interval unless one is given."""

    async def action(a: VocabApp) -> ReminderState:
        minutes = interval or (await a.settings.get()).interval_minutes
        return await a.scheduler.enable(minutes)

    _render_state(_run(ctx, action))


@remind_app.command("off")
def remind_off(ctx: typer.Context) -> None:
    """Disable reminders."""
    _render_state(_run(ctx, lambda a: a.scheduler.disable()))


@remind_app.command("interval")
def remind_interval(
    ctx: typer.Context,
    minutes: Annotated[int, typer.Argument(min=1, help="Minutes between reminders.")],
) -> None:
    """Change the reminder interval (re-registers if reminders are on)."""
    _render_state(_run(ctx, lambda a: a.scheduler.change_interval(minutes)))


@remind_app.command("status")
def remind_status(ctx: typer.Context) -> None:
    """Show whether reminders are on and how often."""
    _render_state(_run(ctx, lambda a: a.scheduler.state()))


@remind_app.command("wake")
def remind_wake(ctx: typer.Context) -> None:
    """Trigger one reminder wake now, as the background service would."""

    async def action(a: VocabApp) -> str:
        if not isinstance(a.registry, InMemoryTaskRegistry) or not await a.registry.is_registered():
            return "not registered"
        result = await a.registry.fire()
        return result.value

    outcome = _run(ctx, action)
    console.print(f"[dim]Wake result: {outcome}[/dim]")


if __name__ == "__main__":
    app()
