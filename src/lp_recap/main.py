"""Main application entry point."""

import asyncio
import signal

from lp_recap.app import AppContext
from lp_recap.bot.discord_bot import DiscordBot
from lp_recap.config import Settings, get_settings
from lp_recap.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


async def main(settings: Settings | None = None) -> None:
    """Run the Discord bot and the snapshot scheduler until interrupted."""
    settings = settings or get_settings()
    configure_logging(settings)
    logger.info("Starting lp-recap")

    context = AppContext.from_settings(settings)
    await context.init_db()
    discord_bot = DiscordBot(context)

    shutdown_event = asyncio.Event()

    def handle_shutdown(sig: signal.Signals | int) -> None:
        logger.info("Received shutdown signal", signal=sig)
        shutdown_event.set()

    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, handle_shutdown, sig)
    except NotImplementedError:
        # Windows doesn't support add_signal_handler
        pass

    try:
        await discord_bot.start()
        await context.snapshots.start()

        logger.info("lp-recap is running. Press Ctrl+C to stop.")
        await shutdown_event.wait()
    finally:
        logger.info("Shutting down...")
        await discord_bot.stop()
        await context.close()
        logger.info("lp-recap stopped")


if __name__ == "__main__":
    asyncio.run(main())
