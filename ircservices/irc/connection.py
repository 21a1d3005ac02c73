"""
IRC Connection

asyncio stream connection to the IRC server. It registers the bot,
answers PINGs itself and otherwise hands each parsed line to the caller.
"""

import asyncio
import ssl
from typing import Iterable, Optional

from .protocol import IrcMessage
from ..game.directives import Directive
from ..utils.logging_config import get_logger

# Logger setup
logger = get_logger(__name__)

ENCODING = "utf-8"


class IrcConnection:
    """
    A single client connection.

    Usage:
        conn = IrcConnection(settings)
        await conn.connect()
        while True:
            message = await conn.read_message()
    """

    def __init__(self, settings):
        self.settings = settings
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None

    async def connect(self) -> None:
        """Open the socket and send the registration burst."""
        ssl_context = ssl.create_default_context() if self.settings.irc_use_ssl else None
        logger.info(f"Connecting to {self.settings.irc_server}:{self.settings.irc_port}")
        self.reader, self.writer = await asyncio.open_connection(
            self.settings.irc_server, self.settings.irc_port, ssl=ssl_context
        )
        if self.settings.irc_password:
            await self.send_raw(f"PASS {self.settings.irc_password}")
        await self.send_raw(f"NICK {self.settings.nickname}")
        await self.send_raw(f"USER {self.settings.username} 0 * :{self.settings.realname}")

    async def send_raw(self, line: str) -> None:
        if self.writer is None:
            raise ConnectionError("Not connected")
        logger.debug(f">> {line}")
        self.writer.write((line + "\r\n").encode(ENCODING))
        await self.writer.drain()

    async def send(self, directive: Directive) -> None:
        await self.send_raw(directive.to_line())

    async def send_all(self, directives: Iterable[Directive]) -> None:
        for directive in directives:
            await self.send(directive)

    async def read_message(self) -> IrcMessage:
        """
        Read lines until one needs handling by the services.

        Raises:
            ConnectionError: When the server closes the connection
        """
        if self.reader is None:
            raise ConnectionError("Not connected")
        while True:
            raw = await self.reader.readline()
            if not raw:
                raise ConnectionError("Connection closed by server")
            line = raw.decode(ENCODING, errors="replace").rstrip("\r\n")
            if not line:
                continue
            logger.debug(f"<< {line}")
            try:
                message = IrcMessage.parse(line)
            except ValueError as e:
                logger.warning(f"Ignoring unparsable line - error: {str(e)}")
                continue
            if message.command == "PING":
                await self.send_raw("PONG :" + (message.args[-1] if message.args else ""))
                continue
            return message

    async def close(self) -> None:
        if self.writer is not None:
            try:
                await self.send_raw("QUIT :Shutting down")
            except (ConnectionError, OSError) as e:
                logger.debug(f"QUIT not delivered - error: {str(e)}")
            self.writer.close()
            await self.writer.wait_closed()
            self.writer = None
            self.reader = None
            logger.info("IRC connection closed")
