#!/usr/bin/env python3
"""
Bot Runner Script

Simple script to run the IRC services bot.
This provides an easy way to start the bot during development.

Usage:
    python run_bot.py
"""

import asyncio
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Import the main function
from ircservices.main import main

if __name__ == "__main__":
    print("Starting IRC services bot...")
    print("Configure IRC_SERVER, IRC_NICKNAME and IRC_OPER_PASSWORD in your .env file")
    print("")

    if not os.path.exists(".env"):
        print("No .env file found!")
        print("Please copy env.example to .env and configure your settings:")
        print("   cp env.example .env")
        sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped by user")
    except Exception as e:
        print(f"\nBot failed to start: {e}")
        print("Check your configuration and try again")
        sys.exit(1)
