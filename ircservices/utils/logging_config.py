"""
Logging Configuration

This module sets up logging for the services bot.
"""

import logging
import sys

from .config import get_settings


def setup_logging() -> None:
    """
    Set up basic logging configuration.

    This function configures standard logging for the application.
    """
    settings = get_settings()

    # Configure standard logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set specific logger levels
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging configuration initialized")


def get_logger(name: str):
    """
    Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    return logging.getLogger(name)


def log_user_action(nickname: str, action: str, **kwargs) -> None:
    """
    Log user actions for auditing.

    Args:
        nickname: IRC nickname of the acting user
        action: Action description
        **kwargs: Additional context data
    """
    logger = get_logger("user_actions")
    extra_info = " ".join([f"{k}={v}" for k, v in kwargs.items()])
    logger.debug(f"User action: nickname={nickname} action={action} {extra_info}")


def log_game_event(channel: str, event_type: str, **kwargs) -> None:
    """
    Log session events (games and votes) for debugging.

    Args:
        channel: Channel the session belongs to
        event_type: Type of session event
        **kwargs: Additional event data
    """
    logger = get_logger("game_events")
    extra_info = " ".join([f"{k}={v}" for k, v in kwargs.items()])
    logger.debug(f"Game event: channel={channel} event_type={event_type} {extra_info}")
