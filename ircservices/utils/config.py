"""
Configuration Management

This module handles all application configuration using environment variables.
Values are read once from the process environment (and a local .env file).
"""

import os
from functools import lru_cache
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).split('#')[0].strip().lower() in ("true", "1", "yes", "on")


class Settings:
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    """

    def __init__(self):
        # IRC Connection Configuration
        self.irc_server: str = os.getenv('IRC_SERVER', 'localhost')
        try:
            port_str = os.getenv('IRC_PORT', '6667').split('#')[0].strip()
            self.irc_port: int = int(port_str)
        except ValueError as e:
            raise ValueError(f"Invalid IRC_PORT value: '{os.getenv('IRC_PORT')}'. Must be a number.") from e
        self.irc_use_ssl: bool = _env_flag('IRC_USE_SSL', 'false')
        self.irc_password: Optional[str] = os.getenv('IRC_PASSWORD') or None

        # Bot Identity
        self.nickname: str = os.getenv('IRC_NICKNAME', 'Pidgey')
        self.username: str = os.getenv('IRC_USERNAME', self.nickname)
        self.realname: str = os.getenv('IRC_REALNAME', 'IRC Services')
        self.oper_name: str = os.getenv('IRC_OPER_NAME', self.nickname)
        self.oper_password: str = os.getenv('IRC_OPER_PASSWORD', '')

        # Database Configuration
        self.database_url: str = os.getenv('DATABASE_URL', 'sqlite:///services.db')

        # Application Settings
        self.debug: bool = _env_flag('DEBUG', 'false')
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO')
        self.environment: str = os.getenv('ENVIRONMENT', 'development')

        # Feature toggles
        self.enable_resistance: bool = _env_flag('ENABLE_RESISTANCE', 'true')
        self.enable_democracy: bool = _env_flag('ENABLE_DEMOCRACY', 'true')
        self.enable_derp: bool = _env_flag('ENABLE_DERP', 'true')

        # Bot owners may drop any game
        owners_str = os.getenv('BOT_OWNERS', '')
        self.owners: List[str] = [x.strip() for x in owners_str.split(',') if x.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching.

    Uses LRU cache to avoid reloading settings on every call.
    Call get_settings.cache_clear() after changing the environment.

    Returns:
        Settings: Application configuration settings
    """
    return Settings()


def is_owner(nickname: str) -> bool:
    """
    Check if a nickname is one of the configured bot owners.

    Args:
        nickname: IRC nickname to check

    Returns:
        bool: True if the nickname is an owner, False otherwise
    """
    settings = get_settings()
    return nickname in settings.owners


def is_development() -> bool:
    """
    Check if running in development environment.

    Returns:
        bool: True if in development, False otherwise
    """
    settings = get_settings()
    return settings.environment.lower() in ["development", "dev", "local"]


def is_production() -> bool:
    """
    Check if running in production environment.

    Returns:
        bool: True if in production, False otherwise
    """
    settings = get_settings()
    return settings.environment.lower() in ["production", "prod"]
