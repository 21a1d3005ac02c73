"""
Tests Package

This package contains all test files for the IRC services bot:
- Resistance and Democracy session logic
- Session registry and identity tracking
- Channel/account persistence and proposal enactment
- Line parsing and end-to-end command handling

Run tests with: pytest tests/
"""
