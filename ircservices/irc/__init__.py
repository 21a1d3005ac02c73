"""
IRC Transport Package

This package contains the line-level IRC plumbing:
- Parsing inbound protocol lines into messages
- The asyncio connection that registers with the server and exchanges lines
"""
