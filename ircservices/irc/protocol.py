"""
IRC Protocol Parsing

Splits a raw protocol line into prefix, command and arguments. The
trailing parameter, when present, is appended as the last argument.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class IrcMessage:
    command: str
    args: List[str] = field(default_factory=list)
    prefix: Optional[str] = None

    @property
    def source_nickname(self) -> str:
        """Nickname part of the prefix, or an empty string for server messages."""
        if not self.prefix:
            return ""
        return self.prefix.split("!", 1)[0]

    @classmethod
    def parse(cls, line: str) -> "IrcMessage":
        """
        Parse one protocol line.

        Args:
            line: Raw line with or without the trailing CRLF

        Returns:
            IrcMessage: The parsed message

        Raises:
            ValueError: If the line carries no command
        """
        line = line.rstrip("\r\n")
        if line.startswith("@"):
            # Message tags are not used by the services.
            _, _, line = line.partition(" ")
        prefix = None
        if line.startswith(":"):
            prefix, _, line = line[1:].partition(" ")
        trailing = None
        if " :" in line:
            line, trailing = line.split(" :", 1)
        elif line.startswith(":"):
            line, trailing = "", line[1:]
        parts = line.split()
        if not parts:
            raise ValueError(f"Malformed IRC line: {line!r}")
        args = parts[1:]
        if trailing is not None:
            args.append(trailing)
        return cls(command=parts[0].upper(), args=args, prefix=prefix)
