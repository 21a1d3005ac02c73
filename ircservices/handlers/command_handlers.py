"""
Command Handlers

Entry point for every inbound IRC line. `process` routes the line to the
game, voting, account or channel services and returns the directives to
send back. Connection events (welcome, JOIN, TOPIC, QUIT, NICK, MODE) are
handled here as well.
"""

from typing import List

from ..database.channel_store import ChannelNotFound, StoreError
from ..game.democracy import VotingBooth
from ..game.directives import Directive, join, notice, oper, samode, topic
from ..utils.logging_config import get_logger
from .chanserv_handlers import handle_chanserv
from .democracy_handlers import handle_democracy
from .derp_handlers import handle_derp
from .error_handlers import error_handler
from .nickserv_handlers import handle_nickserv
from .resistance_handlers import handle_resistance

# Logger setup
logger = get_logger(__name__)

JOIN_LINE_LIMIT = 40


async def process(ctx, source: str, command: str, args: List[str]) -> List[Directive]:
    """
    Process one inbound line.

    Args:
        ctx: Bot context
        source: Nickname from the line prefix (empty for server lines)
        command: IRC command or numeric
        args: Parameters, with the trailing parameter last

    Returns:
        List[Directive]: Directives to send, in order
    """
    try:
        return await _dispatch(ctx, source, command, args)
    except Exception as e:
        return error_handler(source, command, e)


async def _dispatch(ctx, source: str, command: str, args: List[str]) -> List[Directive]:
    if command == "PRIVMSG" and len(args) == 2:
        return await handle_privmsg(ctx, source, args[0], args[1])
    if command == "001":
        return await start_up(ctx)
    if command == "TOPIC" and len(args) == 2:
        return await handle_topic(ctx, args[0], args[1])
    if command == "JOIN" and len(args) >= 1:
        return await handle_join(ctx, source, args[0])
    if command == "QUIT":
        ctx.identity.remove(source)
        return []
    if command == "NICK":
        # Identification belongs to the nickname, not the connection.
        ctx.identity.remove(source)
        return []
    if command == "MODE" and len(args) == 3 and args[1] in ("+v", "-v"):
        return await handle_voice_change(ctx, args[0], args[1], args[2])
    return []


async def handle_privmsg(ctx, source: str, target: str, message: str) -> List[Directive]:
    if message.startswith("!") and ctx.settings.enable_resistance:
        directives = await handle_resistance(ctx, source, target, message)
        if directives is not None:
            return directives
    if message.startswith("!derp") and ctx.settings.enable_derp:
        directives = await handle_derp(ctx, source, target, message)
        if directives is not None:
            return directives

    if target.startswith("#"):
        if ctx.settings.enable_democracy:
            return await handle_democracy(ctx, source, target, message)
        return []

    tokens = message.split()
    service = tokens[0].upper() if tokens else ""
    if service == "NS":
        return await handle_nickserv(ctx, source, tokens)
    if service == "CS":
        return await handle_chanserv(ctx, source, tokens)
    return [notice(source, "Commands must be prefixed by CS or NS.")]


async def start_up(ctx) -> List[Directive]:
    """
    Bring every registered channel back after connecting.

    Opers up, joins the channels in batches, installs a voting booth per
    channel and restores the persisted topic and mode.
    """
    directives: List[Directive] = []
    if ctx.settings.oper_password:
        directives.append(oper(ctx.settings.oper_name, ctx.settings.oper_password))

    try:
        names = await ctx.channels.list_names()
    except StoreError as e:
        logger.error(f"Failed to list registered channels on start-up - error: {str(e)}")
        return directives

    batch = ""
    for name in names:
        if not batch:
            batch = name
        elif len(batch) < JOIN_LINE_LIMIT:
            batch = f"{batch},{name}"
        else:
            directives.append(join(batch))
            batch = name
    if batch:
        directives.append(join(batch))

    for name in names:
        if ctx.settings.enable_democracy:
            ctx.registry.insert(name, VotingBooth(name))
        directives.append(samode(name, "+a", ctx.nickname))
        try:
            channel = await ctx.channels.load(name)
        except StoreError as e:
            logger.error(f"Failed to restore channel - channel: {name}, error: {str(e)}")
            continue
        if channel.topic:
            directives.append(topic(name, channel.topic))
        if channel.mode:
            directives.append(samode(name, channel.mode))

    logger.info(f"Start-up complete - channels: {len(names)}")
    return directives


async def handle_topic(ctx, channel_name: str, text: str) -> List[Directive]:
    try:
        channel = await ctx.channels.load(channel_name)
        channel.topic = text
        await ctx.channels.save(channel)
    except ChannelNotFound:
        return []
    except StoreError as e:
        logger.warning(f"Failed to persist topic - channel: {channel_name}, error: {str(e)}")
    return []


async def handle_join(ctx, source: str, channel_name: str) -> List[Directive]:
    if source == ctx.nickname or not ctx.identity.is_identified(source):
        return []
    try:
        channel = await ctx.channels.load(channel_name)
    except ChannelNotFound:
        return []
    mode = channel.privilege_mode_for(source)
    if not mode:
        return []
    return [samode(channel_name, mode, source)]


async def handle_voice_change(ctx, channel_name: str, change: str, nickname: str) -> List[Directive]:
    """
    Keep the voice roster (the Democracy electorate) in sync with +v/-v.

    Unidentified users cannot hold voice on a registered channel.
    """
    if not ctx.settings.enable_democracy:
        return []
    try:
        channel = await ctx.channels.load(channel_name)
    except ChannelNotFound:
        return []

    if change == "+v" and ctx.identity.is_identified(nickname):
        if nickname not in (channel.voice or []):
            channel.add_to("voice", nickname)
            await ctx.channels.save(channel)
        return []
    if change == "+v":
        return [samode(channel_name, "-v", nickname)]

    channel.remove_from("voice", nickname)
    await ctx.channels.save(channel)
    return []
