"""CLI application for lp-recap."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from lp_recap.app import AppContext
from lp_recap.config import get_settings
from lp_recap.exceptions import LpRecapError
from lp_recap.logging_config import configure_logging, get_logger
from lp_recap.schemas.records import GameKind, RiotId, TrackingEntry
from lp_recap.services.formatting import render_recap, render_winrate

app = typer.Typer(
    name="lp-recap",
    help="Discord bot for daily League of Legends and TFT LP recaps",
)
console = Console()
logger = get_logger(__name__)
T = TypeVar("T")

GAME_OPTION = typer.Option(GameKind.LEAGUE, "--game", "-g", help="league or tft")


def run_with_context(func: Callable[[AppContext], Awaitable[T]]) -> T:
    """Build the application, run ``func`` against it and clean up."""
    settings = get_settings()
    configure_logging(settings)

    async def _run() -> T:
        context = AppContext.from_settings(settings)
        try:
            await context.init_db()
            return await func(context)
        finally:
            await context.close()

    try:
        return asyncio.run(_run())
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e
    except LpRecapError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        logger.error("Command failed", error=str(e))
        raise typer.Exit(1) from e


def parse_riot_id(value: str) -> RiotId:
    try:
        return RiotId.parse(value)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1) from e


@app.command()
def run() -> None:
    """Start the Discord bot and the snapshot scheduler."""
    from lp_recap.main import main

    console.print("[bold green]Starting lp-recap...[/bold green]")

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        console.print("\n[bold yellow]Shutting down...[/bold yellow]")


@app.command()
def init_db() -> None:
    """Create the database tables."""

    async def _init(context: AppContext) -> None:
        return None

    run_with_context(_init)
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def snapshot(
    game: GameKind | None = typer.Option(
        None, "--game", "-g", help="Only snapshot one game (league or tft)"
    ),
) -> None:
    """Record a rank snapshot for every tracked player now."""
    games = [game] if game is not None else list(GameKind)

    async def _snapshot(context: AppContext) -> dict[GameKind, int]:
        return {g: await context.snapshots.record_snapshots(g) for g in games}

    written = run_with_context(_snapshot)
    for game_kind, count in written.items():
        console.print(
            f"[bold green]✓[/bold green] {game_kind.display_name}: {count} snapshot(s) recorded"
        )


@app.command()
def track(
    riot_id: str = typer.Argument(..., help="Player Riot ID (GameName#TagLine)"),
    game: GameKind = GAME_OPTION,
) -> None:
    """Start tracking a player's rank."""
    parsed = parse_riot_id(riot_id)

    async def _track(context: AppContext) -> str:
        account = await context.recap.resolve_account(parsed)
        entry = await context.tracking.track(account.puuid, game, account.riot_id)
        return entry.riot_id

    name = run_with_context(_track)
    console.print(f"[bold green]✓[/bold green] Tracking {name} ({game.display_name})")


@app.command()
def untrack(
    riot_id: str = typer.Argument(..., help="Player Riot ID (GameName#TagLine)"),
    game: GameKind = GAME_OPTION,
) -> None:
    """Stop tracking a player's rank."""
    parsed = parse_riot_id(riot_id)

    async def _untrack(context: AppContext) -> bool:
        account = await context.recap.resolve_account(parsed)
        return await context.tracking.untrack(account.puuid, game)

    if run_with_context(_untrack):
        console.print(f"[bold green]✓[/bold green] Stopped tracking {parsed}")
    else:
        console.print(f"[yellow]{parsed} was not tracked for {game.display_name}[/yellow]")


@app.command()
def tracked(game: GameKind = GAME_OPTION) -> None:
    """List tracked players."""

    async def _list(context: AppContext) -> list[TrackingEntry]:
        return await context.tracking.list_tracked(game)

    entries = run_with_context(_list)
    if not entries:
        console.print(f"[yellow]No players tracked for {game.display_name}[/yellow]")
        return

    table = Table(title=f"Tracked Players ({game.display_name})")
    table.add_column("Riot ID", style="cyan")
    table.add_column("PUUID", style="dim")
    table.add_column("Since", style="green")

    for entry in entries:
        table.add_row(entry.riot_id, entry.player_id, entry.created_at.strftime("%Y-%m-%d"))

    console.print(table)


@app.command()
def recap(
    riot_id: str = typer.Argument(..., help="Player Riot ID (GameName#TagLine)"),
    game: GameKind = GAME_OPTION,
    yesterday: bool = typer.Option(False, "--yesterday", "-y", help="Recap yesterday"),
) -> None:
    """Print the daily recap for a player."""
    parsed = parse_riot_id(riot_id)

    async def _recap(context: AppContext) -> str:
        return render_recap(await context.recap.recap(parsed, game, yesterday))

    console.print(run_with_context(_recap), markup=False)


@app.command()
def winrate(
    riot_id: str = typer.Argument(..., help="Player Riot ID (GameName#TagLine)"),
    game: GameKind = GAME_OPTION,
) -> None:
    """Print the recent win rate for a player."""
    parsed = parse_riot_id(riot_id)

    async def _winrate(context: AppContext) -> str:
        return render_winrate(await context.recap.winrate(parsed, game))

    console.print(run_with_context(_winrate), markup=False)


if __name__ == "__main__":
    app()
