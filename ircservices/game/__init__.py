"""
Game Framework Package

This package contains the per-channel session engines:
- Resistance game sessions (lobby, roles, proposals, missions)
- Democracy voting booths and the enactment of passed proposals
- The session registry and identity tracker shared by the handlers
- Outbound directives returned by every session operation
"""
