"""
Resistance Handlers

Routes `!`-prefixed chat commands to the channel's GameSession.

Channel commands: !resistance, !join, !start, !propose, !vote, !players, !drop
Private commands: !vote #channel <yea/nay> (mission ballot)
"""

from typing import List, Optional, Tuple

from ..database.channel_store import StoreError
from ..game.democracy import VotingBooth
from ..game.directives import Directive, privmsg
from ..game.resistance import GameSession
from ..utils.logging_config import get_logger, log_user_action

# Logger setup
logger = get_logger(__name__)

GAME_COMMANDS = ("!join", "!start", "!propose", "!vote", "!players", "!drop")


async def handle_resistance(ctx, source: str, target: str, message: str) -> Optional[List[Directive]]:
    """
    Handle a Resistance command.

    Args:
        ctx: Bot context
        source: Nickname that sent the line
        target: Channel or the bot's own nickname for private lines
        message: Full message text

    Returns:
        Optional[List[Directive]]: Directives to send, or None when the
        line is not a Resistance command
    """
    command, _, rest = message.strip().partition(" ")
    rest = rest.strip()

    if target.startswith("#"):
        handled = _channel_command(ctx, source, target, command, rest)
        if handled is None:
            return None
        directives, game_ended = handled
        if game_ended and target not in ctx.registry:
            await _restore_voting_booth(ctx, target)
        return directives

    if command == "!resistance":
        return [privmsg(source, "You cannot start a game in a private message.")]
    if command == "!vote":
        return await _mission_vote(ctx, source, rest)
    return None


def _channel_command(ctx, source: str, channel: str, command: str,
                     rest: str) -> Optional[Tuple[List[Directive], bool]]:
    """
    Run a channel command against the channel's game.

    Returns:
        Optional[Tuple]: (directives, whether this command ended the game),
        or None when the command is not a Resistance command
    """
    if command != "!resistance" and command not in GAME_COMMANDS:
        return None

    log_user_action(source, "resistance_command", channel=channel, command=command)
    with ctx.registry.critical_section() as registry:
        game = registry.get_game(channel)

        if command == "!resistance":
            if game is not None:
                return [privmsg(channel, "A game of Resistance is already running on this channel.")], False
            registry.start_game(channel, GameSession.new_game(source, channel, rng=ctx.rng_factory()))
            return [privmsg(channel, "Players may now join the game. Use `!start` to start.")], False

        if game is None:
            return [privmsg(channel, "There's no Resistance game on this channel.")], False

        if command == "!join":
            return game.add_player(source), False
        if command == "!start":
            return game.start(), False
        if command == "!propose":
            return game.propose_mission(source, rest), False
        if command == "!players":
            return game.list_players(), False
        if command == "!drop":
            if not (game.is_leader(source) or ctx.is_owner(source)):
                return [privmsg(channel, "Only the leader or a bot owner can drop the game.")], False
            registry.end_game(channel)
            logger.info(f"Resistance game dropped - channel: {channel}, by: {source}")
            return [privmsg(channel, "The game of Resistance has been dropped.")], True

        # !vote in the channel is the proposal ballot
        directives = game.cast_proposal_vote(source, rest)
        if game.is_complete():
            registry.end_game(channel)
            return directives, True
        return directives, False


async def _mission_vote(ctx, source: str, rest: str) -> List[Directive]:
    tokens = rest.split()
    if len(tokens) != 2:
        return [privmsg(source, "You must vote like so: `!vote #chan <yea/nay>`.")]
    channel, vote = tokens

    with ctx.registry.critical_section() as registry:
        game = registry.get_game(channel)
        if game is None:
            return [privmsg(source, "There's no game on that channel.")]
        directives = game.cast_mission_vote(source, vote)
        game_ended = game.is_complete()
        if game_ended:
            registry.end_game(channel)

    if game_ended and channel not in ctx.registry:
        await _restore_voting_booth(ctx, channel)
    return directives


async def _restore_voting_booth(ctx, channel: str) -> None:
    """Give a channel registered while its game ran a voting booth once the game ends."""
    if not ctx.settings.enable_democracy:
        return
    try:
        registered = await ctx.channels.exists(channel)
    except StoreError as e:
        logger.warning(f"Could not restore voting booth - channel: {channel}, error: {str(e)}")
        return
    if registered:
        ctx.registry.insert(channel, VotingBooth(channel))
