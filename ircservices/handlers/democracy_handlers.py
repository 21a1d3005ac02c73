"""
Democracy Handlers

Routes `.`-prefixed channel commands to the channel's VotingBooth:
- .propose <chown|oper|deop|kick|mode> <parameter>
- .propose topic <free text>
- .vote <id> <yea|nay>
- .active
"""

from typing import List

from ..database.channel_store import StoreError
from ..game.democracy import ProposalKind, VoteStatus, VotingResult
from ..game.directives import Directive, privmsg
from ..utils.logging_config import get_logger, log_game_event, log_user_action

# Logger setup
logger = get_logger(__name__)

TOPIC_PREFIX = ".propose topic "


async def handle_democracy(ctx, source: str, channel: str, message: str) -> List[Directive]:
    """
    Handle a Democracy command said in a channel.

    Args:
        ctx: Bot context
        source: Nickname that sent the line
        channel: Channel the line was said in
        message: Full message text

    Returns:
        List[Directive]: Directives to send (empty for ordinary chat)
    """
    tokens = message.split()
    if not tokens or tokens[0] not in (".propose", ".vote", ".active"):
        return []

    if tokens[0] in (".propose", ".vote"):
        if not ctx.identity.is_identified(source):
            return [privmsg(channel, "You must be identified to do that.")]
        try:
            voiced = await ctx.channels.is_voiced(channel, source)
        except StoreError:
            return [privmsg(channel, "Failed to check your voice status due to an I/O issue.")]
        if not voiced:
            return [privmsg(channel, "You must be voiced to do that.")]

    if ctx.registry.get_booth(channel) is None:
        return []

    log_user_action(source, "democracy_command", channel=channel, command=tokens[0])
    if message.startswith(TOPIC_PREFIX):
        return _propose(ctx, channel, "topic", message[len(TOPIC_PREFIX):])
    if tokens[0] == ".propose":
        if len(tokens) != 3:
            return [privmsg(channel, "Syntax: .propose <chown|oper|deop|kick|topic|mode> <parameter>")]
        return _propose(ctx, channel, tokens[1], tokens[2])
    if tokens[0] == ".vote":
        if len(tokens) != 3:
            return [privmsg(channel, "Syntax: .vote <id> <yea|nay>")]
        return await _vote(ctx, source, channel, tokens[1], tokens[2])
    return _active(ctx, channel)


def _propose(ctx, channel: str, kind: str, parameter: str) -> List[Directive]:
    if ProposalKind.from_token(kind) is None:
        return [privmsg(channel, f"{kind} is not a valid option for a proposal.")]
    with ctx.registry.critical_section() as registry:
        booth = registry.get_booth(channel)
        if booth is None:
            return []
        proposal_id = booth.propose(kind, parameter)
    if proposal_id is None:
        return [privmsg(channel, "There are too many open proposals.")]
    log_game_event(channel, "proposal_created", id=proposal_id, kind=kind)
    return [privmsg(channel, f"Proposal {proposal_id} is live.")]


async def _vote(ctx, source: str, channel: str, raw_id: str, raw_vote: str) -> List[Directive]:
    try:
        proposal_id = int(raw_id)
    except ValueError:
        return [privmsg(channel, f"{raw_id} is not a valid proposal.")]
    vote = raw_vote.lower()

    with ctx.registry.critical_section() as registry:
        booth = registry.get_booth(channel)
        if booth is None:
            return []
        if booth.has_voted(proposal_id, source):
            return [privmsg(channel, "You've already voted in that proposal.")]
        result = booth.vote(proposal_id, vote, source)
        full_vote = booth.is_full_vote(proposal_id)

    if result == VotingResult.INVALID_VOTE:
        return [privmsg(channel, f"{raw_vote} is not a valid vote.")]
    if result == VotingResult.NO_SUCH_PROPOSAL:
        return [privmsg(channel, f"{proposal_id} is not a valid proposal.")]
    directives = [privmsg(channel, "Vote issued.")]

    # The electorate is read from the store outside the registry lock.
    try:
        if full_vote:
            population = await ctx.channels.voting_population(channel)
        else:
            population = await ctx.channels.online_voting_population(channel, ctx.identity)
    except StoreError as e:
        logger.error(f"Failed to count votes - channel: {channel}, id: {proposal_id}, error: {str(e)}")
        directives.append(privmsg(
            channel, f"Failed to count the votes on proposal {proposal_id} due to an I/O issue."
        ))
        return directives

    with ctx.registry.critical_section() as registry:
        booth = registry.get_booth(channel)
        if booth is None:
            return directives
        outcome = booth.get_result_of_vote(proposal_id, population)

    if outcome.status == VoteStatus.PASSED:
        log_game_event(channel, "proposal_passed", id=proposal_id, population=population)
        directives.extend(await ctx.enactor.enact(outcome.proposal, channel))
    elif outcome.status == VoteStatus.FAILED:
        log_game_event(channel, "proposal_failed", id=proposal_id, population=population)
        directives.append(privmsg(channel, f"Failed to pass proposal {proposal_id}."))
    return directives


def _active(ctx, channel: str) -> List[Directive]:
    with ctx.registry.critical_section() as registry:
        booth = registry.get_booth(channel)
        lines = booth.get_active_proposals() if booth is not None else []
    if not lines:
        return [privmsg(channel, "None")]
    return [privmsg(channel, line) for line in lines]
