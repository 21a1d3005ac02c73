"""
Record Stores

Async lookup/save helpers over the channel, account and derp counter
tables. Every SQLAlchemy failure is re-raised as StoreError so handlers
can answer with an I/O notice instead of crashing the read loop.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .database import DatabaseSession
from .models import Account, Channel, DerpCounter
from ..utils.logging_config import get_logger

# Logger setup
logger = get_logger(__name__)


class StoreError(Exception):
    """A record could not be read or written."""


class ChannelNotFound(StoreError):
    """The requested channel is not registered."""


class AccountNotFound(StoreError):
    """The requested nickname is not registered."""


class ChannelStore:
    """
    Persistence for registered channels.

    Records returned by load() are detached; mutate them and hand them
    back to save().
    """

    async def exists(self, name: str) -> bool:
        try:
            async with DatabaseSession() as session:
                return await session.get(Channel, name) is not None
        except SQLAlchemyError as e:
            logger.error(f"Failed to check channel - channel: {name}, error: {str(e)}")
            raise StoreError(str(e)) from e

    async def load(self, name: str) -> Channel:
        try:
            async with DatabaseSession() as session:
                channel = await session.get(Channel, name)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load channel - channel: {name}, error: {str(e)}")
            raise StoreError(str(e)) from e
        if channel is None:
            raise ChannelNotFound(name)
        return channel

    async def save(self, channel: Channel) -> None:
        try:
            async with DatabaseSession() as session:
                await session.merge(channel)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save channel - channel: {channel.name}, error: {str(e)}")
            raise StoreError(str(e)) from e

    async def create(self, name: str, password: str, owner: str) -> Channel:
        channel = Channel.new(name, password, owner)
        await self.save(channel)
        logger.info(f"Channel registered - channel: {name}, owner: {owner}")
        return channel

    async def list_names(self) -> List[str]:
        try:
            async with DatabaseSession() as session:
                result = await session.execute(select(Channel.name).order_by(Channel.name))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to list channels - error: {str(e)}")
            raise StoreError(str(e)) from e

    async def is_voiced(self, name: str, nickname: str) -> bool:
        """True when the nickname is on the channel's persisted voice roster."""
        try:
            channel = await self.load(name)
        except ChannelNotFound:
            return False
        return nickname in (channel.voice or [])

    async def voting_population(self, name: str) -> int:
        """Size of the whole registered voice roster; 0 for unknown channels."""
        try:
            channel = await self.load(name)
        except ChannelNotFound:
            return 0
        return len(channel.voice or [])

    async def online_voting_population(self, name: str, identity) -> int:
        """Voice-roster members that are currently identified; 0 for unknown channels."""
        try:
            channel = await self.load(name)
        except ChannelNotFound:
            return 0
        return sum(1 for nickname in (channel.voice or []) if identity.is_identified(nickname))


class AccountStore:
    """
    Persistence for registered nicknames.
    """

    async def exists(self, nickname: str) -> bool:
        try:
            async with DatabaseSession() as session:
                return await session.get(Account, nickname) is not None
        except SQLAlchemyError as e:
            logger.error(f"Failed to check account - nickname: {nickname}, error: {str(e)}")
            raise StoreError(str(e)) from e

    async def load(self, nickname: str) -> Account:
        try:
            async with DatabaseSession() as session:
                account = await session.get(Account, nickname)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load account - nickname: {nickname}, error: {str(e)}")
            raise StoreError(str(e)) from e
        if account is None:
            raise AccountNotFound(nickname)
        return account

    async def save(self, account: Account) -> None:
        try:
            async with DatabaseSession() as session:
                await session.merge(account)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save account - nickname: {account.nickname}, error: {str(e)}")
            raise StoreError(str(e)) from e

    async def create(self, nickname: str, password: str, email: Optional[str] = None) -> Account:
        account = Account.new(nickname, password, email)
        await self.save(account)
        logger.info(f"Account registered - nickname: {nickname}")
        return account


class DerpStore:
    """
    Persistence for the derp counter.
    """

    ROW_ID = 1

    async def count(self, increment: bool = False) -> int:
        """
        Read the counter, bumping it first when asked to.

        Returns:
            int: The number of derps after any increment
        """
        try:
            async with DatabaseSession() as session:
                counter = await session.get(DerpCounter, self.ROW_ID)
                if counter is None:
                    counter = DerpCounter(id=self.ROW_ID, derps=0)
                    session.add(counter)
                if increment:
                    counter.derps += 1
                return counter.derps
        except SQLAlchemyError as e:
            logger.error(f"Failed to update derp counter - error: {str(e)}")
            raise StoreError(str(e)) from e
