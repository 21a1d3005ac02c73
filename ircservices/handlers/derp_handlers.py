"""
Derp Handlers

`!derp` reports the persisted derp count; `!derp++` records one more
first. The answer goes to the channel, or back to the sender when asked
in private.
"""

from typing import List, Optional

from ..database.channel_store import StoreError
from ..game.directives import Directive, privmsg
from ..utils.logging_config import get_logger, log_user_action

# Logger setup
logger = get_logger(__name__)


async def handle_derp(ctx, source: str, target: str, message: str) -> Optional[List[Directive]]:
    """
    Handle a derp counter command.

    Returns:
        Optional[List[Directive]]: The answer, or None when the line is not
        a derp command
    """
    if not message.startswith("!derp"):
        return None

    reply_to = target if target.startswith("#") else source
    increment = message.startswith("!derp++")
    log_user_action(source, "derp", increment=increment)
    try:
        derps = await ctx.derps.count(increment=increment)
    except StoreError:
        return [privmsg(reply_to, "Something went wrong with the Derp Counter.")]

    if derps == 1:
        return [privmsg(reply_to, "There has been 1 derp.")]
    return [privmsg(reply_to, f"There have been {derps} derps.")]
