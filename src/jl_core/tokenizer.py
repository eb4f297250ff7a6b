"""Streaming JSON tokenizer.

Turns a character stream into JSON tokens one at a time.  Scalar tokens
keep their literal source text: strings lose only their surrounding
quotes, escape sequences are kept exactly as written.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum, auto
from typing import IO, Iterator

from .errors import LexError


class TokenType(Enum):
    BEGIN_OBJECT = auto()
    END_OBJECT = auto()
    PAIR_SEP = auto()
    MEMBER_SEP = auto()
    BEGIN_ARRAY = auto()
    END_ARRAY = auto()
    STRING = auto()
    NUMBER = auto()
    BOOL = auto()
    NULL = auto()
    EOF = auto()


SCALAR_TYPES = frozenset(
    {TokenType.STRING, TokenType.NUMBER, TokenType.BOOL, TokenType.NULL}
)


@dataclass(slots=True, frozen=True)
class Token:
    type: TokenType
    text: str = ""

    @property
    def is_scalar(self) -> bool:
        return self.type in SCALAR_TYPES


_WHITESPACE = " \t\n\r"
_DIGITS = "0123456789"
_HEXDIGITS = "0123456789abcdefABCDEF"
_SIMPLE_ESCAPES = '"\\/bfnrt'

_STRUCTURAL = {
    "{": TokenType.BEGIN_OBJECT,
    "}": TokenType.END_OBJECT,
    ":": TokenType.PAIR_SEP,
    ",": TokenType.MEMBER_SEP,
    "[": TokenType.BEGIN_ARRAY,
    "]": TokenType.END_ARRAY,
}

_LITERALS = {
    "t": (TokenType.BOOL, "true"),
    "f": (TokenType.BOOL, "false"),
    "n": (TokenType.NULL, "null"),
}

_EOF_TOKEN = Token(TokenType.EOF)


class Tokenizer:
    """Lazy JSON token source over a text stream.

    ``next()`` consumes a token, ``peek()`` looks one token ahead.  Input
    is pulled from *stream* in chunks of *chunk_size* characters; one
    character of pushback ends number scanning on a non-digit.
    """

    def __init__(self, stream: IO[str], chunk_size: int = io.DEFAULT_BUFFER_SIZE) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._chunk = ""
        self._index = 0
        self._eof = False
        self._unread: str | None = None
        self._text: list[str] = []
        self._peeked: Token | None = None

    @classmethod
    def from_string(cls, text: str) -> Tokenizer:
        return cls(io.StringIO(text))

    # -- Token interface ------------------------------------------------

    def next(self) -> Token:
        if self._peeked is not None:
            token, self._peeked = self._peeked, None
            return token
        return self._read_token()

    def peek(self) -> Token:
        if self._peeked is None:
            self._peeked = self._read_token()
        return self._peeked

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens up to, not including, EOF."""
        while True:
            token = self.next()
            if token.type is TokenType.EOF:
                return
            yield token

    # -- Character input ------------------------------------------------

    def _read_char(self) -> str:
        """Return the next character, or ``""`` at end of input."""
        if self._unread is not None:
            c, self._unread = self._unread, None
            return c
        if self._index >= len(self._chunk):
            if self._eof:
                return ""
            try:
                self._chunk = self._stream.read(self._chunk_size)
            except UnicodeDecodeError as exc:
                raise LexError(f"invalid {exc.encoding} input: {exc.reason}") from exc
            self._index = 0
            if not self._chunk:
                self._eof = True
                return ""
        c = self._chunk[self._index]
        self._index += 1
        return c

    def _unread_char(self, c: str) -> None:
        if c:
            self._unread = c

    # -- Token scanning -------------------------------------------------

    def _read_token(self) -> Token:
        self._text.clear()

        c = self._read_char()
        while c and c in _WHITESPACE:
            c = self._read_char()

        if not c:
            return _EOF_TOKEN
        if c in _STRUCTURAL:
            return Token(_STRUCTURAL[c], c)
        if c in _LITERALS:
            kind, literal = _LITERALS[c]
            self._read_literal(literal)
            return Token(kind, literal)
        if c == '"':
            self._after_quote()
            return Token(TokenType.STRING, "".join(self._text))
        if c == "-":
            self._text.append(c)
            self._after_minus()
            return Token(TokenType.NUMBER, "".join(self._text))
        if c == "0":
            self._text.append(c)
            self._after_zero()
            return Token(TokenType.NUMBER, "".join(self._text))
        if c in _DIGITS:
            self._text.append(c)
            self._after_nonzero_digit()
            return Token(TokenType.NUMBER, "".join(self._text))

        raise LexError(f"unexpected character: {c!r}")

    def _read_literal(self, literal: str) -> None:
        for expected in literal[1:]:
            if self._read_char() != expected:
                raise LexError(f"error matching literal: {literal}")

    # Strings

    def _after_quote(self) -> None:
        text = self._text
        while True:
            c = self._read_char()
            if not c:
                raise LexError(f"non-terminated string: {''.join(text)}")
            if c == '"':
                return
            if c == "\\":
                text.append(c)
                self._after_backslash()
            elif c < "\x20":
                # 0x7f is allowed
                raise LexError("control character in string")
            else:
                text.append(c)

    def _after_backslash(self) -> None:
        c = self._read_char()
        if c and c in _SIMPLE_ESCAPES:
            self._text.append(c)
        elif c == "u":
            self._text.append(c)
            for _ in range(4):
                c = self._read_char()
                if not c or c not in _HEXDIGITS:
                    raise LexError(f"not a hex character: {c!r}")
                self._text.append(c)
        else:
            raise LexError(f"invalid escape character: {c!r}")

    # Numbers

    def _after_minus(self) -> None:
        c = self._read_char()
        if c == "0":
            self._text.append(c)
            self._after_zero()
        elif c and c in _DIGITS:
            self._text.append(c)
            self._after_nonzero_digit()
        else:
            raise LexError("no digit following minus sign")

    def _after_zero(self) -> None:
        c = self._read_char()
        if c == ".":
            self._text.append(c)
            self._after_point()
        elif c in ("e", "E"):
            self._text.append(c)
            self._after_exponent_marker()
        else:
            self._unread_char(c)

    def _after_nonzero_digit(self) -> None:
        self._append_digits()
        c = self._read_char()
        if c == ".":
            self._text.append(c)
            self._after_point()
        elif c in ("e", "E"):
            self._text.append(c)
            self._after_exponent_marker()
        else:
            self._unread_char(c)

    def _after_point(self) -> None:
        if self._append_digits() == 0:
            raise LexError("no digits after fraction")
        c = self._read_char()
        if c in ("e", "E"):
            self._text.append(c)
            self._after_exponent_marker()
        else:
            self._unread_char(c)

    def _after_exponent_marker(self) -> None:
        c = self._read_char()
        if c in ("+", "-"):
            self._text.append(c)
        else:
            self._unread_char(c)
        if self._append_digits() == 0:
            raise LexError("no exponent digits")

    def _append_digits(self) -> int:
        n = 0
        while True:
            c = self._read_char()
            if not c or c not in _DIGITS:
                self._unread_char(c)
                return n
            self._text.append(c)
            n += 1
