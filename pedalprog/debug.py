"""Error types and a hex dump helper used by the pedal tools."""

from __future__ import annotations

from collections.abc import Iterable


class FootswitchError(Exception):
    """A fatal error that ends the current command."""


class UsageError(FootswitchError):
    """The command line asks for something that cannot be done."""


def hexdump(data: bytes | Iterable[int]) -> str:
    """Format bytes as two-digit hex, 16 per line, each followed by a space."""
    raw = bytes(data)
    lines = [
        "".join(f"{b:02x} " for b in raw[start:start + 16])
        for start in range(0, len(raw), 16)
    ]
    return "\n".join(lines) + "\n"