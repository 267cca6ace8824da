"""Discord bot package."""

from lp_recap.bot.discord_bot import DiscordBot

__all__ = ["DiscordBot"]
