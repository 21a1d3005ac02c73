"""
IRC Services Package

This package contains the services bot application including:
- Account (NS) and channel (CS) registries
- The Resistance social-deduction game, played over chat commands
- Democracy, voice-member voting on channel administration
- The IRC transport and the single-threaded dispatch loop
"""

__version__ = "1.0.0"

# Package imports for easier access
from .main import main
from .utils.config import get_settings

__all__ = ["main", "get_settings"]
