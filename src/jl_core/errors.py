"""Error hierarchy for jl-core.

Every error is terminal for the ``jl`` command: the CLI prints the
message and exits.  Library callers can catch :class:`JLError` instead.
"""

from __future__ import annotations


class JLError(Exception):
    """Base class for all jl-core errors."""


class PatternError(JLError):
    """The pattern string could not be compiled."""

    def __init__(self, reason: str, pos: int | None = None) -> None:
        self.reason = reason
        self.pos = pos
        if pos is None:
            super().__init__(f"invalid pattern: {reason}")
        else:
            super().__init__(f"invalid pattern: {reason} at offset {pos}")


class LexError(JLError):
    """Illegal character sequence in the JSON input."""


class ParseError(JLError):
    """Well-formed tokens in an order JSON does not allow."""
