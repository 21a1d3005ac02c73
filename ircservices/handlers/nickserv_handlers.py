"""
Account Service (NS) Handlers

Nickname registration and identification. All answers are NOTICEs to
the requester.
"""

from typing import List

from ..database.channel_store import AccountNotFound, StoreError
from ..database.models import password_hash
from ..game.directives import Directive, notice
from ..utils.logging_config import get_logger, log_user_action

# Logger setup
logger = get_logger(__name__)

NS_COMMANDS = "Commands: REGISTER, IDENTIFY, CHPASS"


async def handle_nickserv(ctx, source: str, tokens: List[str]) -> List[Directive]:
    """
    Handle an `NS <COMMAND> ...` private message.

    Args:
        ctx: Bot context
        source: Nickname that sent the line
        tokens: Whitespace-split message, starting with "NS"
    """
    if len(tokens) == 1:
        return [notice(source, NS_COMMANDS)]

    command = tokens[1].upper()
    log_user_action(source, "nickserv", command=command)
    if command == "REGISTER":
        return await register(ctx, source, tokens)
    if command == "IDENTIFY":
        return await identify(ctx, source, tokens)
    if command == "CHPASS":
        return await change_password(ctx, source, tokens)
    return [notice(source, f"{tokens[1]} is not a valid command.")]


async def register(ctx, source: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) not in (3, 4):
        return [notice(source, "Syntax: NS REGISTER password [email]")]
    email = tokens[3] if len(tokens) == 4 else None
    try:
        if await ctx.accounts.exists(source):
            return [notice(source, f"{source} is already registered!")]
        await ctx.accounts.create(source, tokens[2], email)
    except StoreError:
        return [notice(source, f"Failed to register {source} due to an I/O issue.")]
    return [notice(source, f"{source} has been registered. Don't forget your password!")]


async def identify(ctx, source: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) != 3:
        return [notice(source, "Syntax: NS IDENTIFY password")]
    try:
        account = await ctx.accounts.load(source)
    except AccountNotFound:
        return [notice(source, "Your nick isn't registered.")]
    except StoreError:
        return [notice(source, f"Failed to identify {source} due to an I/O issue.")]
    if not account.is_password(tokens[2]):
        logger.info(f"Failed identification attempt - nickname: {source}")
        return [notice(source, "Password incorrect.")]
    ctx.identity.identify(source)
    return [notice(source, "Password accepted - you are now recognized.")]


async def change_password(ctx, source: str, tokens: List[str]) -> List[Directive]:
    if len(tokens) != 4:
        return [notice(source, "Syntax: NS CHPASS password newpassword")]
    if not ctx.identity.is_identified(source):
        return [notice(source, f"You must be identified as {source} to do that.")]
    try:
        account = await ctx.accounts.load(source)
        if not account.is_password(tokens[2]):
            return [notice(source, "Password incorrect.")]
        account.password = password_hash(tokens[3])
        await ctx.accounts.save(account)
    except StoreError:
        return [notice(source, f"Failed to change the password for {source} due to an I/O issue.")]
    return [notice(source, "Password changed.")]
