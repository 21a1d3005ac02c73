"""
Error Handlers

This module handles exceptions raised while processing an inbound line.
The read loop must keep running, so errors become a logged traceback and
a NOTICE to whoever sent the line.
"""

import traceback
from typing import List, Optional

from ..game.directives import Directive, notice
from ..utils.config import is_development
from ..utils.logging_config import get_logger

# Logger setup
logger = get_logger(__name__)


def error_handler(source: Optional[str], command: str, error: BaseException) -> List[Directive]:
    """
    Handle an error raised by a handler.

    In development the notice carries the error text; otherwise a
    generic apology is sent.

    Args:
        source: Nickname that sent the offending line (may be empty)
        command: IRC command of the offending line
        error: The exception that was raised

    Returns:
        List[Directive]: The notice to send, if there is someone to send it to
    """
    error_message = str(error) or type(error).__name__
    tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    logger.error(
        f"Handler error occurred - error_message={error_message}, source={source}, "
        f"command={command}, traceback={tb}"
    )

    if not source:
        return []
    if is_development():
        return [notice(source, f"Development error: {error_message}")]
    return [notice(source, "Something went wrong while processing your request. Please try again later.")]
