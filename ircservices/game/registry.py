"""
Session Registry

Concurrency-safe map from channel name to the single session running
there: either a Resistance GameSession or a Democracy VotingBooth.
"""

import threading
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List, Optional, Union

from .democracy import VotingBooth
from .resistance import GameSession
from ..utils.logging_config import get_logger, log_game_event

# Logger setup
logger = get_logger(__name__)

Session = Union[GameSession, VotingBooth]


class SessionKind(Enum):
    RESISTANCE = "resistance"
    DEMOCRACY = "democracy"


def kind_of(session: Session) -> SessionKind:
    if isinstance(session, GameSession):
        return SessionKind.RESISTANCE
    if isinstance(session, VotingBooth):
        return SessionKind.DEMOCRACY
    raise TypeError(f"Unsupported session type: {type(session).__name__}")


class SessionRegistry:
    """
    At most one session per channel.

    Individual calls lock on their own. A handler that needs to read and
    then mutate a session as one step wraps the work in critical_section();
    the lock is re-entrant so the ordinary accessors work inside it. Never
    await network or database I/O while holding it.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        # Booths set aside while a game runs on their channel
        self._parked: Dict[str, VotingBooth] = {}
        self._lock = threading.RLock()

    @contextmanager
    def critical_section(self) -> Iterator["SessionRegistry"]:
        with self._lock:
            yield self

    def get(self, channel: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(channel)

    def get_game(self, channel: str) -> Optional[GameSession]:
        session = self.get(channel)
        return session if isinstance(session, GameSession) else None

    def get_booth(self, channel: str) -> Optional[VotingBooth]:
        session = self.get(channel)
        return session if isinstance(session, VotingBooth) else None

    def insert(self, channel: str, session: Session) -> bool:
        """
        Register a session for a channel.

        Returns:
            bool: False if the channel already has a session
        """
        with self._lock:
            if channel in self._sessions:
                return False
            self._sessions[channel] = session
        log_game_event(channel, "session_registered", kind=kind_of(session).value)
        return True

    def remove(self, channel: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.pop(channel, None)
        if session is not None:
            log_game_event(channel, "session_removed", kind=kind_of(session).value)
        return session

    def start_game(self, channel: str, game: GameSession) -> bool:
        """
        Install a game on a channel.

        A voting booth already on the channel is parked, open proposals
        and all, and comes back when end_game() is called.

        Returns:
            bool: False if a game is already running there
        """
        with self._lock:
            current = self._sessions.get(channel)
            if isinstance(current, GameSession):
                return False
            if current is not None:
                self._parked[channel] = current
            self._sessions[channel] = game
        log_game_event(channel, "session_registered", kind=SessionKind.RESISTANCE.value,
                       parked_booth=current is not None)
        return True

    def end_game(self, channel: str) -> Optional[GameSession]:
        """Remove the channel's game and reinstate its parked booth, if any."""
        with self._lock:
            game = self._sessions.get(channel)
            if not isinstance(game, GameSession):
                return None
            booth = self._parked.pop(channel, None)
            if booth is None:
                del self._sessions[channel]
            else:
                self._sessions[channel] = booth
        log_game_event(channel, "session_removed", kind=SessionKind.RESISTANCE.value,
                       booth_restored=booth is not None)
        return game

    def parked_booth(self, channel: str) -> Optional[VotingBooth]:
        with self._lock:
            return self._parked.get(channel)

    def channels(self, kind: Optional[SessionKind] = None) -> List[str]:
        with self._lock:
            return sorted(
                channel for channel, session in self._sessions.items()
                if kind is None or kind_of(session) == kind
            )

    def __contains__(self, channel: str) -> bool:
        with self._lock:
            return channel in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
