"""
Utilities Package

Configuration loading and logging setup shared by every other package.
"""
