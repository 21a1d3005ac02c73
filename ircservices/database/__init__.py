"""
Database Package

SQLAlchemy models and async stores for registered accounts and channels.
"""
