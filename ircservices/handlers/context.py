"""
Bot Context

Everything a handler needs to process one inbound line: settings, the
shared identity and session state, and the record stores.
"""

import random
from typing import Callable, Optional

from ..database.channel_store import AccountStore, ChannelStore, DerpStore
from ..game.enactor import ProposalEnactor
from ..game.identity import IdentityTracker
from ..game.registry import SessionRegistry
from ..utils.config import Settings, get_settings


class BotContext:
    """
    Shared state handed to every handler.

    `rng_factory` builds the random source for each new Resistance game;
    tests pass a seeded factory to make role assignment repeatable.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        identity: Optional[IdentityTracker] = None,
        registry: Optional[SessionRegistry] = None,
        channels: Optional[ChannelStore] = None,
        accounts: Optional[AccountStore] = None,
        derps: Optional[DerpStore] = None,
        rng_factory: Optional[Callable[[], random.Random]] = None,
    ):
        self.settings = settings or get_settings()
        self.identity = identity or IdentityTracker()
        self.registry = registry or SessionRegistry()
        self.channels = channels or ChannelStore()
        self.accounts = accounts or AccountStore()
        self.derps = derps or DerpStore()
        self.rng_factory = rng_factory or random.Random
        self.enactor = ProposalEnactor(self.channels, self.settings.nickname)

    @property
    def nickname(self) -> str:
        return self.settings.nickname

    def is_owner(self, nickname: str) -> bool:
        return nickname in self.settings.owners
