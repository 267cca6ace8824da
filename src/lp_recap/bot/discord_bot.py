"""Discord bot exposing the recap, win-rate and tracking slash commands."""

import asyncio
from collections.abc import Awaitable

import discord
from discord import app_commands

from lp_recap.app import AppContext
from lp_recap.exceptions import (
    LpRecapError,
    NotFound,
    RateLimited,
    StoreUnavailable,
    Unauthorized,
    UpstreamError,
)
from lp_recap.logging_config import get_logger
from lp_recap.schemas.records import GameKind, RiotId
from lp_recap.services.formatting import render_recap, render_tracked, render_winrate

logger = get_logger(__name__)

DISCORD_MESSAGE_LIMIT = 2000

GAME_CHOICES = [
    app_commands.Choice(name="League of Legends", value=GameKind.LEAGUE.value),
    app_commands.Choice(name="Teamfight Tactics", value=GameKind.TFT.value),
]


def error_message(error: Exception) -> str:
    """User-facing text for an error raised while handling a command."""
    if isinstance(error, NotFound):
        return "❌ Player not found. Check the Riot ID (GameName#TAG)."
    if isinstance(error, RateLimited):
        return "⏳ The Riot API is busy right now, try again in a minute."
    if isinstance(error, Unauthorized):
        return "❌ The bot's Riot API key was rejected. Ask an admin to renew it."
    if isinstance(error, (StoreUnavailable, UpstreamError)):
        return "⚠️ Service temporarily unavailable, try again later."
    if isinstance(error, ValueError):
        return f"❌ Error: {error}"
    return "❌ An unexpected error occurred."


def truncate(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class DiscordBot:
    """Discord bot with slash commands for recaps and rank tracking."""

    def __init__(self, context: AppContext, token: str | None = None) -> None:
        """Initialize the Discord bot.

        Args:
            context: Application services
            token: Discord bot token (defaults to settings)
        """
        self._context = context
        self._token = token or context.settings.discord_bot_token
        self._client: discord.Client | None = None
        self._tree: app_commands.CommandTree | None = None
        self._task: asyncio.Task[None] | None = None
        self._is_running = False

    async def start(self) -> None:
        """Start the Discord bot in the background."""
        if not self._token:
            logger.warning("Discord bot token not configured, bot will not start")
            return

        intents = discord.Intents.default()
        intents.message_content = False

        self._client = discord.Client(intents=intents)
        self._tree = app_commands.CommandTree(self._client)
        self._register_commands()

        @self._client.event
        async def on_ready() -> None:
            if self._client and self._client.user:
                logger.info("Discord bot connected", user=self._client.user.name)
                if self._tree:
                    try:
                        synced = await self._tree.sync()
                        logger.info("Synced slash commands", count=len(synced))
                    except discord.DiscordException as e:
                        logger.error("Failed to sync commands", error=str(e))

        self._is_running = True
        self._task = asyncio.create_task(self._run_bot())
        logger.info("Discord bot starting...")

    async def _run_bot(self) -> None:
        if self._client and self._token:
            try:
                await self._client.start(self._token)
            except discord.DiscordException as e:
                logger.error("Discord bot error", error=str(e))
                self._is_running = False

    async def stop(self) -> None:
        """Stop the Discord bot."""
        if self._client and self._is_running:
            logger.info("Stopping Discord bot...")
            await self._client.close()
            self._is_running = False
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

    @property
    def is_running(self) -> bool:
        return self._is_running

    # Command handlers. These return the reply text so they can be driven
    # without a Discord connection.

    def handle_ping(self) -> str:
        return "pong"

    async def handle_recap(self, riot_id: str, game: str, yesterday: bool = False) -> str:
        report = await self._context.recap.recap(RiotId.parse(riot_id), GameKind(game), yesterday)
        return render_recap(report)

    async def handle_winrate(self, riot_id: str, game: str) -> str:
        report = await self._context.recap.winrate(RiotId.parse(riot_id), GameKind(game))
        return render_winrate(report)

    async def handle_track(self, riot_id: str, game: str) -> str:
        game_kind = GameKind(game)
        account = await self._context.recap.resolve_account(RiotId.parse(riot_id))
        if await self._context.tracking.is_tracked(account.puuid, game_kind):
            return f"⚠️ **{account.riot_id}** is already tracked for {game_kind.display_name}."
        await self._context.tracking.track(account.puuid, game_kind, account.riot_id)
        return f"✅ Now tracking **{account.riot_id}** for {game_kind.display_name}."

    async def handle_untrack(self, riot_id: str, game: str) -> str:
        game_kind = GameKind(game)
        account = await self._context.recap.resolve_account(RiotId.parse(riot_id))
        if await self._context.tracking.untrack(account.puuid, game_kind):
            return f"✅ Stopped tracking **{account.riot_id}** for {game_kind.display_name}."
        return f"ℹ️ **{account.riot_id}** was not tracked for {game_kind.display_name}."

    async def handle_tracked(self, game: str) -> str:
        game_kind = GameKind(game)
        entries = await self._context.tracking.list_tracked(game_kind)
        return render_tracked(entries, game_kind)

    async def _reply(
        self,
        interaction: discord.Interaction,
        command: str,
        handler_coro: Awaitable[str],
    ) -> None:
        """Await a handler and send its text, or a friendly error."""
        try:
            text = await handler_coro
        except (LpRecapError, ValueError) as e:
            logger.warning("Command failed", command=command, error=str(e))
            await interaction.followup.send(error_message(e), ephemeral=True)
            return
        except Exception as e:
            logger.exception("Unexpected error handling command", command=command)
            await interaction.followup.send(error_message(e), ephemeral=True)
            return

        await interaction.followup.send(truncate(text))
        logger.info("Command handled", command=command, user=str(interaction.user))

    def _register_commands(self) -> None:
        if not self._tree:
            return

        @self._tree.command(name="recap", description="Daily recap of ranked games and LP")
        @app_commands.describe(
            riot_id="Player's Riot ID in format: GameName#TAG",
            game="Which game to recap",
            yesterday="Recap yesterday instead of today",
        )
        @app_commands.choices(game=GAME_CHOICES)
        async def recap_command(
            interaction: discord.Interaction,
            riot_id: str,
            game: app_commands.Choice[str],
            yesterday: bool = False,
        ) -> None:
            await interaction.response.defer(thinking=True)
            await self._reply(
                interaction, "recap", self.handle_recap(riot_id, game.value, yesterday)
            )

        @self._tree.command(name="winrate", description="Win rate over the last ranked games")
        @app_commands.describe(
            riot_id="Player's Riot ID in format: GameName#TAG",
            game="Which game to look at",
        )
        @app_commands.choices(game=GAME_CHOICES)
        async def winrate_command(
            interaction: discord.Interaction,
            riot_id: str,
            game: app_commands.Choice[str],
        ) -> None:
            await interaction.response.defer(thinking=True)
            await self._reply(interaction, "winrate", self.handle_winrate(riot_id, game.value))

        @self._tree.command(name="track", description="Start recording a player's LP daily")
        @app_commands.describe(
            riot_id="Player's Riot ID in format: GameName#TAG",
            game="Which ladder to track",
        )
        @app_commands.choices(game=GAME_CHOICES)
        async def track_command(
            interaction: discord.Interaction,
            riot_id: str,
            game: app_commands.Choice[str],
        ) -> None:
            await interaction.response.defer(thinking=True)
            await self._reply(interaction, "track", self.handle_track(riot_id, game.value))

        @self._tree.command(name="untrack", description="Stop recording a player's LP")
        @app_commands.describe(
            riot_id="Player's Riot ID in format: GameName#TAG",
            game="Which ladder to stop tracking",
        )
        @app_commands.choices(game=GAME_CHOICES)
        async def untrack_command(
            interaction: discord.Interaction,
            riot_id: str,
            game: app_commands.Choice[str],
        ) -> None:
            await interaction.response.defer(thinking=True)
            await self._reply(interaction, "untrack", self.handle_untrack(riot_id, game.value))

        @self._tree.command(name="tracked", description="List tracked players")
        @app_commands.describe(game="Which ladder to list")
        @app_commands.choices(game=GAME_CHOICES)
        async def tracked_command(
            interaction: discord.Interaction,
            game: app_commands.Choice[str],
        ) -> None:
            await interaction.response.defer(thinking=True)
            await self._reply(interaction, "tracked", self.handle_tracked(game.value))

        @self._tree.command(name="ping", description="Check that the bot is responding")
        async def ping_command(interaction: discord.Interaction) -> None:
            await interaction.response.send_message(self.handle_ping())
            logger.info("Command handled", command="ping", user=str(interaction.user))
