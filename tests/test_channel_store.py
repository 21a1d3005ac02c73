"""
Channel and account persistence tests against a throwaway SQLite file.
"""

import pytest

from ircservices.database.channel_store import (
    AccountNotFound, AccountStore, ChannelNotFound, ChannelStore, DerpStore, StoreError,
)
from ircservices.database.database import _async_url
from ircservices.database.models import Account, Channel, password_hash
from ircservices.game.identity import IdentityTracker


def test_password_hash_is_sha3_512_hex():
    digest = password_hash("secret")
    assert len(digest) == 128
    assert digest == password_hash("secret")
    assert digest != password_hash("Secret")


def test_privilege_mode_precedence():
    channel = Channel.new("#chan", "pw", "owner")
    channel.add_to("admins", "adm")
    channel.add_to("opers", "op")
    channel.add_to("voice", "op")
    channel.add_to("voice", "v")
    assert channel.privilege_mode_for("owner") == "+qa"
    assert channel.privilege_mode_for("adm") == "+a"
    assert channel.privilege_mode_for("op") == "+o"
    assert channel.privilege_mode_for("v") == "+v"
    assert channel.privilege_mode_for("nobody") == ""


def test_roster_helpers_do_not_duplicate():
    channel = Channel.new("#chan", "pw", "owner")
    channel.add_to("voice", "alice")
    channel.add_to("voice", "alice")
    assert channel.voice == ["alice"]
    channel.remove_from("voice", "alice")
    channel.remove_from("voice", "alice")
    assert channel.voice == []


def test_account_password_check():
    account = Account.new("alice", "hunter2")
    assert account.is_password("hunter2")
    assert not account.is_password("hunter3")
    assert account.password != "hunter2"


@pytest.mark.asyncio
async def test_channel_round_trip(db):
    store = ChannelStore()
    assert not await store.exists("#chan")
    await store.create("#chan", "pw", "owner")
    assert await store.exists("#chan")

    channel = await store.load("#chan")
    assert channel.owner == "owner"
    assert channel.is_password("pw")
    channel.add_to("voice", "alice")
    channel.add_to("opers", "bob")
    channel.topic = "Welcome"
    channel.mode = "+m"
    await store.save(channel)

    reloaded = await store.load("#chan")
    assert reloaded.voice == ["alice"]
    assert reloaded.opers == ["bob"]
    assert reloaded.topic == "Welcome"
    assert reloaded.mode == "+m"


@pytest.mark.asyncio
async def test_removing_from_a_roster_is_persisted(db):
    store = ChannelStore()
    channel = await store.create("#chan", "pw", "owner")
    channel.add_to("voice", "alice")
    channel.add_to("voice", "bob")
    await store.save(channel)

    channel = await store.load("#chan")
    channel.remove_from("voice", "alice")
    await store.save(channel)
    assert (await store.load("#chan")).voice == ["bob"]


@pytest.mark.asyncio
async def test_missing_channel(db):
    store = ChannelStore()
    with pytest.raises(ChannelNotFound):
        await store.load("#missing")
    assert not await store.is_voiced("#missing", "alice")
    assert await store.voting_population("#missing") == 0


@pytest.mark.asyncio
async def test_list_names_is_sorted(db):
    store = ChannelStore()
    for name in ("#zeta", "#alpha", "#mid"):
        await store.create(name, "pw", "owner")
    assert await store.list_names() == ["#alpha", "#mid", "#zeta"]


@pytest.mark.asyncio
async def test_voting_populations(db):
    store = ChannelStore()
    channel = await store.create("#chan", "pw", "owner")
    for nickname in ("a", "b", "c", "d"):
        channel.add_to("voice", nickname)
    await store.save(channel)

    identity = IdentityTracker()
    identity.identify("a")
    identity.identify("c")
    identity.identify("outsider")

    assert await store.is_voiced("#chan", "a")
    assert not await store.is_voiced("#chan", "outsider")
    assert await store.voting_population("#chan") == 4
    assert await store.online_voting_population("#chan", identity) == 2


@pytest.mark.asyncio
async def test_account_round_trip(db):
    store = AccountStore()
    assert not await store.exists("alice")
    await store.create("alice", "hunter2", "alice@example.org")
    assert await store.exists("alice")

    account = await store.load("alice")
    assert account.email == "alice@example.org"
    assert account.is_password("hunter2")

    account.password = password_hash("changed")
    await store.save(account)
    assert (await store.load("alice")).is_password("changed")

    with pytest.raises(AccountNotFound):
        await store.load("bob")


@pytest.mark.asyncio
async def test_population_errors_other_than_a_missing_channel_propagate(db, monkeypatch):
    store = ChannelStore()
    await store.create("#chan", "pw", "owner")

    async def failing_load(name):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(store, "load", failing_load)
    with pytest.raises(StoreError):
        await store.voting_population("#chan")
    with pytest.raises(StoreError):
        await store.online_voting_population("#chan", IdentityTracker())


@pytest.mark.asyncio
async def test_derp_counter(db):
    store = DerpStore()
    assert await store.count() == 0
    assert await store.count(increment=True) == 1
    assert await store.count(increment=True) == 2
    assert await DerpStore().count() == 2


def test_database_urls_use_the_aiosqlite_driver():
    assert _async_url("sqlite:///services.db") == "sqlite+aiosqlite:///services.db"
    assert _async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"
