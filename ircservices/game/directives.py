"""
Outbound Directives

Sessions and handlers never write to the network themselves. They return
Directive values which the connection renders and sends once the command
has been fully processed.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Directive:
    """A single outbound IRC command."""

    command: str
    params: Tuple[str, ...] = ()
    trailing: Optional[str] = None

    @property
    def target(self) -> Optional[str]:
        return self.params[0] if self.params else None

    def to_line(self) -> str:
        """Render the wire form of this directive, without the CRLF."""
        parts = [self.command]
        parts.extend(p for p in self.params if p)
        if self.trailing is not None:
            parts.append(":" + self.trailing)
        return " ".join(parts)


def privmsg(target: str, text: str) -> Directive:
    return Directive("PRIVMSG", (target,), text)


def notice(target: str, text: str) -> Directive:
    return Directive("NOTICE", (target,), text)


def samode(channel: str, mode: str, user: str = "") -> Directive:
    return Directive("SAMODE", (channel, mode, user))


def kick(channel: str, user: str, reason: str) -> Directive:
    return Directive("KICK", (channel, user), reason)


def topic(channel: str, text: str) -> Directive:
    return Directive("TOPIC", (channel,), text)


def join(channels: str) -> Directive:
    return Directive("JOIN", (channels,))


def oper(name: str, password: str) -> Directive:
    return Directive("OPER", (name, password))
