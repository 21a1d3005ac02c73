"""
Democracy Voting Booth

Each registered channel owns one booth for its whole lifetime. Voiced
members open proposals to change the channel (owner, operators, kicks,
topic, mode) and vote on them; a proposal is resolved as soon as the
yea or nay share of the electorate crosses its quorum.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..utils.logging_config import get_logger

# Setup logger
logger = get_logger(__name__)

MAX_PROPOSAL_ID = 255


class ProposalKind(Enum):
    """Proposal vocabulary, keyed by the token used in `.propose`."""
    CHANGE_OWNER = "chown"
    OPER = "oper"
    DEOP = "deop"
    KICK = "kick"
    TOPIC = "topic"
    MODE = "mode"

    @classmethod
    def from_token(cls, token: str) -> Optional["ProposalKind"]:
        for kind in cls:
            if kind.value == token:
                return kind
        return None

    @property
    def is_full_vote(self) -> bool:
        """Full votes are decided against the whole voice roster."""
        return self in (ProposalKind.CHANGE_OWNER, ProposalKind.OPER, ProposalKind.DEOP)


# (pass percentage on yea, fail percentage on nay)
FULL_VOTE_QUORUM = (60, 40)
PARTIAL_VOTE_QUORUM = (30, 70)


@dataclass(frozen=True)
class Proposal:
    kind: ProposalKind
    parameter: str

    @property
    def is_full_vote(self) -> bool:
        return self.kind.is_full_vote

    def display(self) -> str:
        if self.kind == ProposalKind.CHANGE_OWNER:
            return f"change the owner to {self.parameter}"
        if self.kind == ProposalKind.TOPIC:
            return f"change the topic to {self.parameter}"
        if self.kind == ProposalKind.MODE:
            return f"change the channel mode to {self.parameter}"
        return f"{self.kind.value} {self.parameter}"


class Ballot(Enum):
    YEA = "yea"
    NAY = "nay"

    @classmethod
    def from_token(cls, token: str) -> Optional["Ballot"]:
        if token == "yea":
            return cls.YEA
        if token == "nay":
            return cls.NAY
        return None


class VotingResult(Enum):
    """Outcome of casting a single vote."""
    VOTE_ISSUED = "vote_issued"
    INVALID_VOTE = "invalid_vote"
    NO_SUCH_PROPOSAL = "no_such_proposal"


class VoteStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"
    NO_SUCH_VOTE = "no_such_vote"


@dataclass(frozen=True)
class VoteResult:
    """Outcome of evaluating a proposal; carries the proposal when it passed."""
    status: VoteStatus
    proposal: Optional[Proposal] = None


class VotingBooth:
    """
    Open proposals and the votes cast on them for one channel.

    Duplicate voting is prevented by callers through has_voted(); the
    booth records whatever it is given.
    """

    def __init__(self, channel: str = ""):
        self.channel = channel
        self.proposals: Dict[int, Proposal] = {}
        self.votes: Dict[str, List[Tuple[int, Ballot]]] = {}
        self.last_proposal_id = 0
        self._issued_any = False

    def propose(self, kind_token: str, parameter: str) -> Optional[int]:
        """
        Open a proposal.

        Args:
            kind_token: One of chown, oper, deop, kick, topic, mode
            parameter: Nickname, topic text or mode string

        Returns:
            Optional[int]: The new proposal id, or None if the kind is
            unknown or every id is taken
        """
        kind = ProposalKind.from_token(kind_token)
        if kind is None:
            return None
        proposal_id = self._allocate_id()
        if proposal_id is None:
            return None
        self.proposals[proposal_id] = Proposal(kind, parameter)
        logger.info(f"Proposal opened - channel: {self.channel}, id: {proposal_id}, kind: {kind.value}")
        return proposal_id

    def _allocate_id(self) -> Optional[int]:
        # Ids keep advancing after the booth empties so a resolved id is not
        # handed out again straight away.
        candidate = (self.last_proposal_id + 1) % (MAX_PROPOSAL_ID + 1) if self._issued_any else 0
        for _ in range(MAX_PROPOSAL_ID + 1):
            if candidate not in self.proposals:
                self.last_proposal_id = candidate
                self._issued_any = True
                return candidate
            candidate = (candidate + 1) % (MAX_PROPOSAL_ID + 1)
        return None

    def has_voted(self, proposal_id: int, nickname: str) -> bool:
        return any(pid == proposal_id for pid, _ in self.votes.get(nickname, []))

    def vote(self, proposal_id: int, token: str, nickname: str) -> VotingResult:
        ballot = Ballot.from_token(token)
        if ballot is None:
            return VotingResult.INVALID_VOTE
        if proposal_id not in self.proposals:
            return VotingResult.NO_SUCH_PROPOSAL
        self.votes.setdefault(nickname, []).append((proposal_id, ballot))
        return VotingResult.VOTE_ISSUED

    def is_full_vote(self, proposal_id: int) -> bool:
        proposal = self.proposals.get(proposal_id)
        return proposal is not None and proposal.is_full_vote

    def vote_counts(self, proposal_id: int) -> Optional[Tuple[int, int]]:
        """(yea, nay) for an open proposal, counting each voter's first ballot."""
        if proposal_id not in self.proposals:
            return None
        yea = nay = 0
        for ballots in self.votes.values():
            for pid, ballot in ballots:
                if pid == proposal_id:
                    if ballot == Ballot.YEA:
                        yea += 1
                    else:
                        nay += 1
                    break
        return yea, nay

    def get_result_of_vote(self, proposal_id: int, population: int) -> VoteResult:
        """
        Resolve a proposal against the size of its electorate.

        Full votes pass at 60% yea and fail at 40% nay; partial votes pass
        at 30% yea and fail at 70% nay. A resolved proposal is removed
        together with every vote cast on it.
        """
        counts = self.vote_counts(proposal_id)
        if counts is None:
            return VoteResult(VoteStatus.NO_SUCH_VOTE)
        if population <= 0:
            return VoteResult(VoteStatus.IN_PROGRESS)

        yea, nay = counts
        pass_at, fail_at = FULL_VOTE_QUORUM if self.is_full_vote(proposal_id) else PARTIAL_VOTE_QUORUM
        if yea * 100 // population >= pass_at:
            proposal = self._resolve(proposal_id)
            logger.info(f"Proposal passed - channel: {self.channel}, id: {proposal_id}")
            return VoteResult(VoteStatus.PASSED, proposal)
        if nay * 100 // population >= fail_at:
            self._resolve(proposal_id)
            logger.info(f"Proposal failed - channel: {self.channel}, id: {proposal_id}")
            return VoteResult(VoteStatus.FAILED)
        return VoteResult(VoteStatus.IN_PROGRESS)

    def _resolve(self, proposal_id: int) -> Proposal:
        for nickname in list(self.votes):
            self.votes[nickname] = [(pid, b) for pid, b in self.votes[nickname] if pid != proposal_id]
            if not self.votes[nickname]:
                del self.votes[nickname]
        return self.proposals.pop(proposal_id)

    def get_active_proposals(self) -> List[str]:
        lines = []
        for proposal_id in sorted(self.proposals):
            yea, nay = self.vote_counts(proposal_id)
            lines.append(
                f"Proposal ({proposal_id}) to {self.proposals[proposal_id].display()} (Y: {yea}, N: {nay})."
            )
        return lines
