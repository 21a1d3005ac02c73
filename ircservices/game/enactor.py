"""
Proposal Enactor

Turns a passed Democracy proposal into changes on the persisted channel
record and the matching SAMODE/KICK/TOPIC directives.
"""

from typing import List

from .democracy import Proposal, ProposalKind
from .directives import Directive, kick, privmsg, samode, topic
from ..database.channel_store import ChannelStore, StoreError
from ..utils.logging_config import get_logger, log_game_event

# Logger setup
logger = get_logger(__name__)

KICK_REASON = "It was decided so."


class ProposalEnactor:
    """
    Applies passed proposals for the bot identified by `nickname`.

    Proposals targeting the bot itself are refused with a notice.
    """

    def __init__(self, store: ChannelStore, nickname: str):
        self.store = store
        self.nickname = nickname

    async def enact(self, proposal: Proposal, channel_name: str) -> List[Directive]:
        """
        Enact a proposal on a channel.

        Args:
            proposal: The proposal that passed
            channel_name: Channel it was voted in

        Returns:
            List[Directive]: Mode/kick/topic changes followed by a status message
        """
        failed = [privmsg(channel_name, f"Failed to enact proposal to {proposal.display()}.")]
        try:
            channel = await self.store.load(channel_name)
        except StoreError as e:
            logger.error(f"Failed to enact proposal - channel: {channel_name}, error: {str(e)}")
            return failed

        target = proposal.parameter
        if proposal.kind in (ProposalKind.OPER, ProposalKind.DEOP, ProposalKind.KICK) and target == self.nickname:
            return [privmsg(channel_name, "Votes about me cannot be enacted.")]

        directives: List[Directive] = []
        try:
            if proposal.kind == ProposalKind.CHANGE_OWNER:
                previous = channel.owner
                channel.owner = target
                await self.store.save(channel)
                directives.append(samode(channel_name, "-q", previous))
                directives.append(samode(channel_name, "+q", target))
            elif proposal.kind == ProposalKind.OPER:
                channel.add_to("opers", target)
                await self.store.save(channel)
                directives.append(samode(channel_name, "+o", target))
            elif proposal.kind == ProposalKind.DEOP:
                channel.remove_from("opers", target)
                await self.store.save(channel)
                directives.append(samode(channel_name, "-o", target))
            elif proposal.kind == ProposalKind.KICK:
                directives.append(kick(channel_name, target, KICK_REASON))
            elif proposal.kind == ProposalKind.TOPIC:
                directives.append(topic(channel_name, target))
            elif proposal.kind == ProposalKind.MODE:
                channel.mode = target
                await self.store.save(channel)
                directives.append(samode(channel_name, target))
        except StoreError as e:
            logger.error(f"Failed to persist proposal - channel: {channel_name}, error: {str(e)}")
            return failed

        log_game_event(channel_name, "proposal_enacted", kind=proposal.kind.value, parameter=target)
        directives.append(privmsg(channel_name, f"Enacted proposal to {proposal.display()}."))
        return directives
