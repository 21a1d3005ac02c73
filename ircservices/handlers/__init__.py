"""
Bot Handlers Package

This package contains all inbound line handlers:
- Command dispatch for PRIVMSG and connection events
- Resistance and Democracy command handlers
- Account (NS) and channel (CS) service handlers
- The derp counter
- Error handlers for exception management
"""
