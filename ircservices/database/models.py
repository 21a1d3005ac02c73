"""
Database Models for IRC Services

This module defines the SQLAlchemy models backing the account (NS)
and channel (CS) registries:
- Registered nicknames with hashed passwords
- Registered channels with their owner, privilege rosters, topic and mode
- The derp counter
"""

import hashlib
from typing import List, Optional

from sqlalchemy import Column, Integer, String, Text, JSON

from .database import Base


def password_hash(password: str) -> str:
    """Hash a password into the hex SHA3-512 digest stored on records."""
    return hashlib.sha3_512(password.encode("utf-8")).hexdigest()


class Account(Base):
    """
    A registered nickname.
    """
    __tablename__ = "accounts"

    nickname = Column(String(64), primary_key=True, doc="IRC nickname")
    password = Column(String(128), nullable=False, doc="SHA3-512 hex digest")
    email = Column(String(255), nullable=True, doc="Optional contact address")

    @classmethod
    def new(cls, nickname: str, password: str, email: Optional[str] = None) -> "Account":
        return cls(nickname=nickname, password=password_hash(password), email=email)

    def is_password(self, password: str) -> bool:
        return self.password == password_hash(password)

    def __repr__(self):
        return f"<Account(nickname={self.nickname})>"


class Channel(Base):
    """
    A registered channel and the privileges attached to it.

    Rosters are stored as JSON lists of nicknames. Mutations should assign
    a new list so the change is picked up when the record is saved.
    """
    __tablename__ = "channels"

    name = Column(String(64), primary_key=True, doc="Channel name including the #")
    password = Column(String(128), nullable=False, doc="SHA3-512 hex digest")
    owner = Column(String(64), nullable=False, doc="Nickname of the channel owner")
    admins = Column(JSON, default=list, nullable=False, doc="Nicknames with +a")
    opers = Column(JSON, default=list, nullable=False, doc="Nicknames with +o")
    voice = Column(JSON, default=list, nullable=False, doc="Nicknames with +v (the electorate)")
    topic = Column(Text, default="", nullable=False, doc="Persisted channel topic")
    mode = Column(String(64), default="", nullable=False, doc="Persisted channel mode string")

    @classmethod
    def new(cls, name: str, password: str, owner: str) -> "Channel":
        return cls(
            name=name,
            password=password_hash(password),
            owner=owner,
            admins=[], opers=[], voice=[],
            topic="", mode="",
        )

    def is_password(self, password: str) -> bool:
        return self.password == password_hash(password)

    def add_to(self, roster: str, nickname: str) -> None:
        """Append a nickname to one of the admins/opers/voice rosters."""
        members: List[str] = list(getattr(self, roster) or [])
        if nickname not in members:
            members.append(nickname)
        setattr(self, roster, members)

    def remove_from(self, roster: str, nickname: str) -> None:
        """Drop a nickname from one of the admins/opers/voice rosters."""
        setattr(self, roster, [u for u in (getattr(self, roster) or []) if u != nickname])

    def privilege_mode_for(self, nickname: str) -> str:
        """Mode granted to a nickname when it joins the channel."""
        if self.owner == nickname:
            return "+qa"
        if nickname in (self.admins or []):
            return "+a"
        if nickname in (self.opers or []):
            return "+o"
        if nickname in (self.voice or []):
            return "+v"
        return ""

    def __repr__(self):
        return f"<Channel(name={self.name}, owner={self.owner})>"


class DerpCounter(Base):
    """
    Network-wide derp tally, kept in a single row.
    """
    __tablename__ = "derp_counter"

    id = Column(Integer, primary_key=True, doc="Always 1")
    derps = Column(Integer, default=0, nullable=False, doc="Number of recorded derps")

    def __repr__(self):
        return f"<DerpCounter(derps={self.derps})>"
