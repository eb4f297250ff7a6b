"""Interpreter: walks a compiled pattern over the live token stream."""

from __future__ import annotations

import logging
from typing import Callable

from .compiler import Pattern, compile_pattern
from .errors import ParseError
from .operations import ArrayOp, CollectOp, ObjectOp, Operation
from .tokenizer import Token, Tokenizer, TokenType

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]


# ---------------------------------------------------------------------------
# Structural skip
# ---------------------------------------------------------------------------

def accept(tokens: Tokenizer, kind: TokenType) -> Token:
    token = tokens.next()
    if token.type is not kind:
        raise ParseError(f"unexpected token type: expected {_describe(kind)}, got {_describe(token.type)}")
    return token


def skip_value(tokens: Tokenizer) -> None:
    """Discard one complete JSON value without collecting anything.

    Nesting is tracked on an explicit stack of expected closers, so the
    depth of a skipped subtree is not bounded by the call stack.
    """
    closers: list[TokenType] = []
    while True:
        # Containers push their closer and loop back for the first member.
        token = tokens.next()
        if token.type is TokenType.BEGIN_ARRAY:
            if tokens.peek().type is not TokenType.END_ARRAY:
                closers.append(TokenType.END_ARRAY)
                continue
            tokens.next()
        elif token.type is TokenType.BEGIN_OBJECT:
            if tokens.peek().type is not TokenType.END_OBJECT:
                closers.append(TokenType.END_OBJECT)
                _skip_key(tokens)
                continue
            tokens.next()
        elif not token.is_scalar:
            raise ParseError(f"unexpected token type: expected a value, got {_describe(token.type)}")

        # A value is complete: close containers until one has another member.
        while closers:
            token = tokens.next()
            closer = closers[-1]
            if token.type is TokenType.MEMBER_SEP:
                if closer is TokenType.END_OBJECT:
                    _skip_key(tokens)
                break
            if token.type is not closer:
                if closer is TokenType.END_ARRAY:
                    raise ParseError("expected array end")
                raise ParseError("expected object end")
            closers.pop()
        else:
            return


def _skip_key(tokens: Tokenizer) -> None:
    accept(tokens, TokenType.STRING)
    accept(tokens, TokenType.PAIR_SEP)


_NAMES = {
    TokenType.BEGIN_OBJECT: "'{'",
    TokenType.END_OBJECT: "'}'",
    TokenType.PAIR_SEP: "':'",
    TokenType.MEMBER_SEP: "','",
    TokenType.BEGIN_ARRAY: "'['",
    TokenType.END_ARRAY: "']'",
    TokenType.EOF: "end of input",
}


def _describe(kind: TokenType) -> str:
    return _NAMES.get(kind, kind.name.lower())


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------

class Interpreter:
    """Run *pattern* against the values read from *tokens*.

    Each completed line is passed to *emit* without a trailing newline.
    The pattern's tables are shared state: running several interpreters
    for one pattern (e.g. one per input file) keeps a single flush
    history.
    """

    def __init__(
        self,
        pattern: Pattern,
        tokens: Tokenizer,
        emit: Emit,
        fieldsep: str = "\t",
    ) -> None:
        self.pattern = pattern
        self.tokens = tokens
        self.emit = emit
        self.fieldsep = fieldsep

    def run(self) -> bool:
        """Process one top-level value.  Returns False at end of input."""
        if self.tokens.peek().type is TokenType.EOF:
            return False
        self._run(self.pattern.op)
        return True

    def run_all(self) -> int:
        """Process values until end of input; return how many were read."""
        count = 0
        while self.run():
            count += 1
        logger.debug("processed %d top-level value(s)", count)
        return count

    # -- Dispatch -------------------------------------------------------

    def _run(self, op: Operation) -> None:
        if isinstance(op, ArrayOp):
            self._run_array(op)
        elif isinstance(op, ObjectOp):
            self._run_object(op)
        elif isinstance(op, CollectOp):
            self._run_collect(op)
        else:
            raise TypeError(f"not an operation: {op!r}")

    def _run_array(self, op: ArrayOp) -> None:
        tokens = self.tokens
        if tokens.peek().type is not TokenType.BEGIN_ARRAY:
            skip_value(tokens)
            return

        tokens.next()
        if tokens.peek().type is TokenType.END_ARRAY:
            tokens.next()
        else:
            while True:
                self._run(op.next)
                if op.table is not None:
                    op.table.complete_row()
                token = tokens.next()
                if token.type is not TokenType.MEMBER_SEP:
                    break
            if token.type is not TokenType.END_ARRAY:
                raise ParseError("expected array end")

        if op.is_root:
            self._flush()

    def _run_object(self, op: ObjectOp) -> None:
        tokens = self.tokens
        if tokens.peek().type is not TokenType.BEGIN_OBJECT:
            skip_value(tokens)
            return

        tokens.next()
        token = tokens.next()
        if token.type is not TokenType.END_OBJECT:
            while True:
                if token.type is not TokenType.STRING:
                    raise ParseError(f"expected object key, got {_describe(token.type)}")
                accept(tokens, TokenType.PAIR_SEP)

                prop = op.find(token.text)
                if prop is not None:
                    self._run(prop.op)
                else:
                    skip_value(tokens)

                token = tokens.next()
                if token.type is not TokenType.MEMBER_SEP:
                    break
                token = tokens.next()
            if token.type is not TokenType.END_OBJECT:
                raise ParseError("expected object end")

        if op.table is not None:
            op.table.complete_row()
        if op.is_root:
            self._flush()

    def _run_collect(self, op: CollectOp) -> None:
        token = self.tokens.peek()
        if token.is_scalar:
            op.table.set_value(op.column, token.text)
            self.tokens.next()
        elif token.type in (TokenType.BEGIN_ARRAY, TokenType.BEGIN_OBJECT):
            skip_value(self.tokens)
        else:
            raise ParseError(f"unexpected token type: expected a value, got {_describe(token.type)}")

    def _flush(self) -> None:
        for line in self.pattern.registry.flush(self.fieldsep):
            self.emit(line)


# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------

def extract(pattern: Pattern | str, text: str, fieldsep: str = "\t") -> list[str]:
    """Run *pattern* over every JSON value in *text* and return the lines."""
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)
    lines: list[str] = []
    Interpreter(pattern, Tokenizer.from_string(text), lines.append, fieldsep).run_all()
    return lines
