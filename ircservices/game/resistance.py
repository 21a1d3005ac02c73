"""
Resistance Game Session

This module implements one channel's game of The Resistance: a lobby,
secret role assignment, leader-proposed mission teams, a public approval
ballot on each proposal and a private success/sabotage ballot on each
mission that goes ahead.

Every operation returns the list of directives to send; a rejected
operation leaves the session untouched.
"""

import random
from enum import Enum
from typing import Dict, List, Optional, Sequence, Union

from .directives import Directive, privmsg
from ..utils.logging_config import get_logger, log_game_event

# Setup logger
logger = get_logger(__name__)

MIN_PLAYERS = 5
MAX_PLAYERS = 10
MAX_MISSIONS = 5
MISSIONS_TO_WIN = 3
MAX_REJECTED_PROPOSALS = 5
SPY_RATIO = 0.4

# Mission team sizes, keyed by the smallest player count of each row.
MISSION_SIZES = {
    5: (2, 3, 2, 3, 3),
    6: (2, 3, 4, 3, 4),
    7: (2, 3, 3, 4, 4),
    8: (3, 4, 4, 5, 5),
}


class PhaseType(Enum):
    """Enumeration of all game phases."""
    LOBBY = "lobby"
    MISSION_PROPOSAL = "mission_proposal"
    PROPOSAL_VOTE = "proposal_vote"
    MISSION_VOTE = "mission_vote"
    COMPLETE = "complete"


class Faction(Enum):
    REBELS = "Rebels"
    SPIES = "Spies"


class Vote(Enum):
    YEA = "yea"
    NAY = "nay"
    NOT_YET_VOTED = "not_yet_voted"

    @classmethod
    def from_token(cls, token: str) -> Optional["Vote"]:
        """Accept anything starting with y/n in either case."""
        token = token.strip()
        if token[:1] in ("y", "Y"):
            return cls.YEA
        if token[:1] in ("n", "N"):
            return cls.NAY
        return None


def mission_size(player_count: int, mission_index: int) -> int:
    """
    Required team size for a mission.

    Args:
        player_count: Number of players in the game
        mission_index: Zero-based mission number

    Returns:
        int: Team size, or 0 when the index is past the last mission
    """
    if player_count <= 5:
        row = MISSION_SIZES[5]
    elif player_count == 6:
        row = MISSION_SIZES[6]
    elif player_count == 7:
        row = MISSION_SIZES[7]
    else:
        row = MISSION_SIZES[8]
    if 0 <= mission_index < len(row):
        return row[mission_index]
    return 0


def spy_count(player_count: int) -> int:
    return int(round(SPY_RATIO * player_count))


class GameSession:
    """
    A game of Resistance bound to one channel.

    The random source is injected so that role assignment and leader
    rotation can be replayed in tests.
    """

    def __init__(self, initiator: str, channel: str, rng: Optional[random.Random] = None):
        self.channel = channel
        self.rng = rng or random.Random()
        self.started = False
        self.players: List[str] = [initiator]
        self.rebels: List[str] = []
        self.spies: List[str] = []
        self.missions_won = 0
        self.missions_run = 0
        self.rejected_proposals = 0
        # Mission-specific state
        self.leader = initiator
        self.proposed_members: List[str] = []
        self.votes_for_mission: Dict[str, Vote] = {}
        self.mission_votes: Dict[str, Vote] = {}

        log_game_event(channel, "resistance_created", initiator=initiator)

    @classmethod
    def new_game(cls, initiator: str, channel: str, rng: Optional[random.Random] = None) -> "GameSession":
        return cls(initiator, channel, rng)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> PhaseType:
        if self.is_complete():
            return PhaseType.COMPLETE
        if not self.started:
            return PhaseType.LOBBY
        if self.mission_votes:
            return PhaseType.MISSION_VOTE
        if self.proposed_members:
            return PhaseType.PROPOSAL_VOTE
        return PhaseType.MISSION_PROPOSAL

    def total_players(self) -> int:
        return len(self.players)

    def is_leader(self, nickname: str) -> bool:
        return self.leader == nickname

    def is_player(self, nickname: str) -> bool:
        return nickname in self.players

    def is_complete(self) -> bool:
        return (
            self.missions_run >= MAX_MISSIONS
            or self.missions_won >= MISSIONS_TO_WIN
            or self.rejected_proposals >= MAX_REJECTED_PROPOSALS
            or self.missions_run - self.missions_won >= MISSIONS_TO_WIN
        )

    @property
    def winner(self) -> Optional[Faction]:
        if not self.is_complete():
            return None
        return Faction.REBELS if self.missions_won >= MISSIONS_TO_WIN else Faction.SPIES

    def next_mission_size(self) -> int:
        return mission_size(self.total_players(), self.missions_run)

    def list_players(self) -> List[Directive]:
        return [privmsg(self.channel, f"Players: {', '.join(self.players)}")]

    # ------------------------------------------------------------------
    # Lobby
    # ------------------------------------------------------------------

    def add_player(self, nickname: str) -> List[Directive]:
        if self.started:
            return [privmsg(self.channel, "Sorry, the game is already in progress!")]
        if nickname in self.players:
            return [privmsg(self.channel, "You've already joined this game!")]
        if self.total_players() >= MAX_PLAYERS:
            return [privmsg(self.channel, "Sorry, the game is full!")]

        self.players.append(nickname)
        log_game_event(self.channel, "player_joined", nickname=nickname, players=self.total_players())
        return [privmsg(nickname, "You've joined the game. You'll get your position when it starts.")]

    def start(self) -> List[Directive]:
        """
        Shuffle the players and deal out the secret roles.

        The first round(0.4 * N) shuffled players become spies and learn
        who the other spies are; everyone else is a rebel.
        """
        if self.started:
            return [privmsg(self.channel, "The game has already begun!")]
        if self.total_players() < MIN_PLAYERS:
            return [privmsg(self.channel, "You need at least five players to play.")]

        self.started = True
        self.rng.shuffle(self.players)
        spies = spy_count(self.total_players())
        self.spies = self.players[:spies]
        self.rebels = self.players[spies:]

        directives = []
        for nickname in self.players:
            if nickname in self.spies:
                directives.append(privmsg(nickname, f"You're a spy in {self.channel}."))
            else:
                directives.append(privmsg(nickname, f"You're a rebel in {self.channel}."))
        roster = ", ".join(self.spies)
        for nickname in self.spies:
            directives.append(privmsg(nickname, f"Spies: {roster}"))
        directives.append(privmsg(self.channel, "The game has begun!"))
        directives.append(privmsg(
            self.channel,
            f"The first mission requires {self.next_mission_size()} participants."
        ))

        log_game_event(self.channel, "resistance_started", players=self.total_players(), spies=spies)
        return directives

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def propose_mission(self, nickname: str, members: Union[str, Sequence[str]]) -> List[Directive]:
        if isinstance(members, str):
            members = members.split()
        members = [m for m in members if m]

        if not self.started:
            return [privmsg(nickname, "The game hasn't started yet.")]
        if not self.is_leader(nickname):
            return [privmsg(nickname, f"Only the leader ({self.leader}) can propose a mission.")]
        if self.proposed_members:
            return [privmsg(self.channel, "There is already a proposal awaiting votes.")]
        if self.mission_votes:
            return [privmsg(self.channel, "A mission is already in progress.")]

        required = self.next_mission_size()
        if len(members) != required:
            return [privmsg(
                self.channel,
                f"Mission {self.missions_run + 1} should have {required} members."
            )]
        if any(m not in self.players for m in members):
            return [privmsg(self.channel, "Proposals must only include registered players.")]
        if len(set(members)) != len(members):
            return [privmsg(self.channel, "Proposals must not name a player twice.")]

        self.proposed_members = list(members)
        self.votes_for_mission = {p: Vote.NOT_YET_VOTED for p in self.rebels + self.spies}

        log_game_event(self.channel, "mission_proposed", leader=nickname, members=members)
        return [privmsg(self.channel, f"Proposed mission: {', '.join(self.proposed_members)}")]

    def cast_proposal_vote(self, nickname: str, token: str) -> List[Directive]:
        if not self.is_player(nickname):
            return [privmsg(nickname, "You're not involved in this game.")]
        if not self.proposed_members:
            return [privmsg(nickname, "There is no current mission proposal.")]
        vote = Vote.from_token(token)
        if vote is None:
            return [privmsg(self.channel, "You must vote yea or nay.")]

        self.votes_for_mission[nickname] = vote
        directives = [privmsg(self.channel, "A vote has been cast.")]

        result = self._proposal_result()
        if result == Vote.YEA:
            directives.extend(self._run_mission())
        elif result == Vote.NAY:
            self._rotate_leader()
            self.rejected_proposals += 1
            self.proposed_members = []
            self.votes_for_mission = {}
            log_game_event(self.channel, "proposal_rejected", rejected=self.rejected_proposals)
            directives.append(privmsg(
                self.channel,
                f"The proposal was rejected ({self.rejected_proposals} / {MAX_REJECTED_PROPOSALS}). "
                f"The new leader is {self.leader}."
            ))
            if self.is_complete():
                directives.extend(self._announce_winner())
        return directives

    def _proposal_result(self) -> Vote:
        """Strict majority once everybody has voted; ties reject."""
        yea = nay = 0
        for vote in self.votes_for_mission.values():
            if vote == Vote.NOT_YET_VOTED:
                return Vote.NOT_YET_VOTED
            if vote == Vote.YEA:
                yea += 1
            else:
                nay += 1
        return Vote.YEA if yea > nay else Vote.NAY

    def _run_mission(self) -> List[Directive]:
        members = self.proposed_members
        self.mission_votes = {m: Vote.NOT_YET_VOTED for m in members}
        self.proposed_members = []
        self.votes_for_mission = {}
        self.rejected_proposals = 0

        log_game_event(self.channel, "mission_live", members=members)
        directives = [privmsg(self.channel, "The mission is now live!")]
        for member in members:
            directives.append(privmsg(
                member,
                f"Vote on the mission privately with: !vote {self.channel} <yea/nay>"
            ))
        return directives

    # ------------------------------------------------------------------
    # Missions
    # ------------------------------------------------------------------

    def cast_mission_vote(self, nickname: str, token: str) -> List[Directive]:
        if not self.is_player(nickname):
            return [privmsg(nickname, "You're not involved in this game.")]
        if not self.mission_votes:
            return [privmsg(nickname, "There is no mission in progress.")]
        if nickname not in self.mission_votes:
            return [privmsg(nickname, "You're not involved in this mission.")]
        vote = Vote.from_token(token)
        if vote is None:
            return [privmsg(nickname, "You must vote yea or nay.")]

        self.mission_votes[nickname] = vote
        directives = [privmsg(nickname, "Your vote has been cast.")]

        if any(v == Vote.NOT_YET_VOTED for v in self.mission_votes.values()):
            return directives

        fails = sum(1 for v in self.mission_votes.values() if v == Vote.NAY)
        # The fifth mission of a 7+ player game tolerates a single saboteur.
        special = self.missions_run == 4 and self.total_players() > 6
        success = fails == 0 or (special and fails == 1)

        self._rotate_leader()
        self.missions_run += 1
        if success:
            self.missions_won += 1
        self.mission_votes = {}

        score = f"(S: {self.missions_won} / {self.missions_run})"
        if success:
            text = f"The mission was a success {score}. The new leader is {self.leader}."
        else:
            text = (f"The mission was a failure with {fails} saboteurs {score}. "
                    f"The new leader is {self.leader}.")
        if not self.is_complete():
            text += f" The next mission requires {self.next_mission_size()} participants."
        directives.append(privmsg(self.channel, text))

        log_game_event(self.channel, "mission_resolved", success=success, fails=fails,
                       won=self.missions_won, run=self.missions_run)
        if self.is_complete():
            directives.extend(self._announce_winner())
        return directives

    def _rotate_leader(self) -> None:
        """Reshuffle the table and hand leadership to the first other player."""
        self.rng.shuffle(self.players)
        if self.players[0] == self.leader and len(self.players) > 1:
            self.leader = self.players[1]
        else:
            self.leader = self.players[0]

    def _announce_winner(self) -> List[Directive]:
        winner = self.winner
        log_game_event(self.channel, "resistance_completed", winner=winner.value)
        return [privmsg(self.channel, f"Game over: {winner.value} win!")]
