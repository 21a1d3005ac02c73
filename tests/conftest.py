"""
Shared fixtures: settings pinned for tests, a throwaway SQLite database
and a BotContext wired to both.
"""

import random

import pytest
import pytest_asyncio

from ircservices.database import database
from ircservices.handlers.context import BotContext
from ircservices.utils.config import get_settings


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("IRC_NICKNAME", "Pidgey")
    monkeypatch.setenv("BOT_OWNERS", "owner")
    monkeypatch.setenv("IRC_OPER_NAME", "Pidgey")
    monkeypatch.setenv("IRC_OPER_PASSWORD", "operpass")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("ENABLE_RESISTANCE", "true")
    monkeypatch.setenv("ENABLE_DEMOCRACY", "true")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def db(tmp_path):
    await database.init_database(f"sqlite:///{tmp_path / 'services.db'}")
    yield
    await database.close_database()


@pytest_asyncio.fixture
async def ctx(db, settings):
    return BotContext(settings, rng_factory=lambda: random.Random(1234))
