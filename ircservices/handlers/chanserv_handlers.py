"""
Channel Service (CS) Handlers

Channel registration and password-protected privilege management. All
answers are NOTICEs to the requester; mode changes are applied with
SAMODE.
"""

from typing import List

from ..database.channel_store import StoreError
from ..game.democracy import VotingBooth
from ..game.directives import Directive, join, notice, samode
from ..utils.logging_config import get_logger, log_user_action

# Logger setup
logger = get_logger(__name__)

CS_COMMANDS = "Commands: REGISTER, ADMIN, OPER, VOICE, MODE, DEADMIN, DEOPER, DEVOICE, CHOWN"

# command -> (roster, add?, mode, success message, verb for failures)
ROSTER_COMMANDS = {
    "ADMIN": ("admins", True, "+a", "{target} is now an admin.", "admin"),
    "OPER": ("opers", True, "+o", "{target} is now an oper.", "oper"),
    "VOICE": ("voice", True, "+v", "{target} is now voiced.", "voice"),
    "DEADMIN": ("admins", False, "-a", "{target} is no longer an admin.", "de-admin"),
    "DEOPER": ("opers", False, "-o", "{target} is no longer an oper.", "de-oper"),
    "DEVOICE": ("voice", False, "-v", "{target} is no longer voiced.", "de-voice"),
}


async def handle_chanserv(ctx, source: str, tokens: List[str]) -> List[Directive]:
    """
    Handle a `CS <COMMAND> ...` private message.

    Args:
        ctx: Bot context
        source: Nickname that sent the line
        tokens: Whitespace-split message, starting with "CS"
    """
    if len(tokens) == 1:
        return [notice(source, CS_COMMANDS)]

    command = tokens[1].upper()
    log_user_action(source, "chanserv", command=command)
    if command == "REGISTER":
        return await register(ctx, source, tokens)
    if command in ROSTER_COMMANDS:
        return await update_roster(ctx, source, command, tokens)
    if command == "CHOWN":
        return await change_owner(ctx, source, tokens)
    if command == "MODE":
        return await set_mode(ctx, source, tokens)
    return [notice(source, f"{tokens[1]} is not a valid command.")]


async def register(ctx, source: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) != 4:
        return [notice(source, "Syntax: CS REGISTER channel password")]
    channel_name, password = tokens[2], tokens[3]
    if not channel_name.startswith("#"):
        return [notice(source, "Channels must be prefixed with a #.")]
    if not ctx.identity.is_identified(source):
        return [notice(source, f"You must be identified as {source} to do that.")]

    try:
        if await ctx.channels.exists(channel_name):
            return [notice(source, f"Channel {channel_name} is already registered!")]
        await ctx.channels.create(channel_name, password, source)
    except StoreError:
        return [notice(source, f"Failed to register {channel_name} due to an I/O issue.")]

    if ctx.settings.enable_democracy:
        ctx.registry.insert(channel_name, VotingBooth(channel_name))
    return [
        samode(channel_name, "+r"),
        samode(channel_name, "+qa", source),
        join(channel_name),
        samode(channel_name, "+a", ctx.nickname),
        notice(source, f"Channel {channel_name} has been registered. Don't forget the password!"),
    ]


async def _load_authorized(ctx, source: str, channel_name: str, password: str, target: str = None):
    """
    Run the shared checks of every password-protected CS command.

    Returns:
        Tuple: (channel record or None, refusal message or None)
    """
    if not ctx.identity.is_identified(source):
        return None, f"You must be identified as {source} to do that."
    if target is not None and not ctx.identity.is_identified(target):
        return None, f"{target} must be identified to do that."
    if not await ctx.channels.exists(channel_name):
        return None, f"Channel {channel_name} is not registered!"
    channel = await ctx.channels.load(channel_name)
    if not channel.is_password(password):
        return None, "Password incorrect."
    return channel, None


async def update_roster(ctx, source: str, command: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) != 5:
        return [notice(source, f"Syntax: CS {command} user channel password")]
    target, channel_name, password = tokens[2], tokens[3], tokens[4]
    roster, adding, mode, success, verb = ROSTER_COMMANDS[command]

    try:
        channel, refusal = await _load_authorized(ctx, source, channel_name, password, target)
        if refusal:
            return [notice(source, refusal)]
        if adding:
            channel.add_to(roster, target)
        else:
            channel.remove_from(roster, target)
        await ctx.channels.save(channel)
    except StoreError:
        return [notice(source, f"Failed to {verb} {target} due to an I/O issue.")]

    return [samode(channel_name, mode, target), notice(source, success.format(target=target))]


async def change_owner(ctx, source: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) != 5:
        return [notice(source, "Syntax: CS CHOWN user channel password")]
    target, channel_name, password = tokens[2], tokens[3], tokens[4]

    try:
        channel, refusal = await _load_authorized(ctx, source, channel_name, password, target)
        if refusal:
            return [notice(source, refusal)]
        channel.owner = target
        await ctx.channels.save(channel)
    except StoreError:
        return [notice(source, f"Failed to change owner to {target} due to an I/O issue.")]

    return [samode(channel_name, "+q", target), notice(source, f"{target} is now the channel owner.")]


async def set_mode(ctx, source: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) != 5:
        return [notice(source, "Syntax: CS MODE mode channel password")]
    mode, channel_name, password = tokens[2], tokens[3], tokens[4]

    try:
        channel, refusal = await _load_authorized(ctx, source, channel_name, password)
        if refusal:
            return [notice(source, refusal)]
        channel.mode = mode
        await ctx.channels.save(channel)
    except StoreError:
        return [notice(source, f"Failed to set channel mode {mode} due to an I/O issue.")]

    return [samode(channel_name, mode), notice(source, f"Channel mode is now {mode}.")]
