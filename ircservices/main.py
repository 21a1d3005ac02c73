"""
IRC Services Bot Main Application

This is the main entry point for the services bot.
It initializes the database, connects to the IRC server and runs the
single-threaded dispatch loop.
"""

import asyncio
import sys
from typing import Optional

from .database.database import init_database, close_database
from .handlers.command_handlers import process
from .handlers.context import BotContext
from .irc.connection import IrcConnection
from .utils.config import get_settings
from .utils.logging_config import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)


class ServicesBot:
    """
    Main services bot application class.

    This handles the complete lifecycle of the bot including:
    - Database initialization
    - Connecting and registering with the IRC server
    - Reading one line at a time and sending back the resulting directives
    - Shutdown
    """

    def __init__(self):
        """Initialize the bot application."""
        self.settings = get_settings()
        self.context = BotContext(self.settings)
        self.connection: Optional[IrcConnection] = None

    async def initialize_database(self) -> None:
        try:
            logger.info("Initializing database...")
            await init_database()
            logger.info("Database initialization completed successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    async def run(self) -> None:
        """
        Connect and process lines until the server goes away.

        Commands are handled strictly one after another; a line's
        directives are all sent before the next line is read.
        """
        self.connection = IrcConnection(self.settings)
        await self.connection.connect()
        logger.info(f"Connected as {self.settings.nickname}")

        while True:
            message = await self.connection.read_message()
            directives = await process(
                self.context, message.source_nickname, message.command, message.args
            )
            await self.connection.send_all(directives)

    async def cleanup(self) -> None:
        """
        Cleanup resources when shutting down.
        """
        try:
            logger.info("Shutting down services bot...")
            if self.connection:
                await self.connection.close()
            await close_database()
            logger.info("Bot shutdown complete")
        except Exception as e:
            logger.error(f"Error during cleanup: {e}")


async def main() -> None:
    """
    Main entry point for the services bot.
    """
    bot = ServicesBot()

    try:
        logger.info("Starting IRC services bot")
        await bot.initialize_database()
        await bot.run()
    except ConnectionError as e:
        logger.info(f"Connection ended: {e}")
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Received interrupt signal, shutting down...")
    except Exception as e:
        logger.error(f"Unexpected error in main: {e}")
        await bot.cleanup()
        sys.exit(1)
    await bot.cleanup()


def run() -> None:
    """Console-script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped by user")


if __name__ == "__main__":
    run()
