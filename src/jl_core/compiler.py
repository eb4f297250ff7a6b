"""Pattern compiler: pattern string → operation tree + table registry.

Grammar::

    pattern   := array | object
    array     := '[' ( '*' | array | object ) ']'?
    object    := '{' property (',' property)* '}'?
    property  := name ( array | object )?
    name      := quoted-string | bare-run

Closing brackets may be left off at the end of the pattern, so
``[{foo,bar`` is the same as ``[{foo,bar}]``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import PatternError
from .operations import ArrayOp, CollectOp, ObjectOp, Operation, Property
from .table import Table, TableRegistry

logger = logging.getLogger(__name__)

_NAME_STOP = frozenset(",[]{}")


@dataclass(slots=True)
class Pattern:
    """A compiled pattern.  Read-only once built."""

    source: str
    op: Operation
    registry: TableRegistry
    root: ArrayOp | ObjectOp


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def compile_pattern(text: str) -> Pattern:
    """Compile *text* into a :class:`Pattern` or raise :class:`PatternError`."""
    registry = TableRegistry()
    parser = _PatternParser(text, registry)
    op = parser.parse()
    root = find_root(op)
    logger.debug(
        "compiled pattern %r: %d table(s), %d column(s), root %s",
        text, len(registry), registry.width, type(root).__name__,
    )
    return Pattern(source=text, op=op, registry=registry, root=root)


# ---------------------------------------------------------------------------
# Root determination
# ---------------------------------------------------------------------------

def find_root(head: Operation) -> ArrayOp | ObjectOp:
    """Mark and return the node whose completion flushes the tables.

    Walking from the outside in, the root is the first array whose
    element is collected directly (``[*]``) or the first object that has
    several properties or a single leaf property.
    """
    op: Operation | None = head
    while op is not None:
        if isinstance(op, ArrayOp):
            if isinstance(op.next, CollectOp):
                op.is_root = True
                return op
            op = op.next
        elif isinstance(op, ObjectOp):
            prop = op.props[0]
            if len(op.props) > 1 or isinstance(prop.op, CollectOp):
                op.is_root = True
                return op
            op = prop.op
        else:
            break
    raise RuntimeError("operation tree has no root")


# ---------------------------------------------------------------------------
# Recursive descent
# ---------------------------------------------------------------------------

class _PatternParser:
    """Cursor over an immutable pattern string."""

    def __init__(self, text: str, registry: TableRegistry) -> None:
        self.text = text
        self.pos = 0
        self.registry = registry

    def peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def error(self, reason: str) -> PatternError:
        return PatternError(reason, self.pos)

    def parse(self) -> Operation:
        c = self.peek()
        if c == "[":
            op: Operation = self.parse_array()
        elif c == "{":
            op = self.parse_object()
        elif not c:
            raise PatternError("empty pattern")
        else:
            raise self.error(f"pattern must start with '[' or '{{', not {c!r}")

        if self.pos < len(self.text):
            raise self.error(f"unexpected {self.peek()!r} after pattern")
        return op

    def parse_array(self) -> ArrayOp:
        self.pos += 1  # [
        arr = ArrayOp()

        c = self.peek()
        if c == "*":
            arr.table = self.registry.new_table()
            arr.next = _collect(arr.table)
            self.pos += 1
        elif c == "[":
            arr.next = self.parse_array()
        elif c == "{":
            arr.next = self.parse_object()
        else:
            raise self.error("expected '*', '[' or '{' inside array")

        c = self.peek()
        if c == "]":
            self.pos += 1
        elif c:
            raise self.error(f"expected ']' but found {c!r}")
        return arr

    def parse_object(self) -> ObjectOp:
        obj = ObjectOp()

        while True:
            self.pos += 1  # { or ,
            prop = self.parse_property(obj)

            c = self.peek()
            if c in (",", "}", ""):
                if obj.table is None:
                    obj.table = self.registry.new_table()
                prop.op = _collect(obj.table)
            elif c == "{":
                prop.op = self.parse_object()
            elif c == "[":
                prop.op = self.parse_array()
            else:
                raise self.error(f"unexpected {c!r} after property {prop.name!r}")

            if self.peek() != ",":
                break

        c = self.peek()
        if c == "}":
            self.pos += 1
        elif c:
            raise self.error(f"expected ',' or '}}' but found {c!r}")
        return obj

    def parse_property(self, obj: ObjectOp) -> Property:
        if self.peek() == '"':
            return obj.add_property(self._quoted_name())

        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in _NAME_STOP:
            self.pos += 1
        if self.pos == start:
            raise self.error("empty property name")
        return obj.add_property(self.text[start:self.pos])

    def _quoted_name(self) -> str:
        """Scan a quoted name.  Escapes are kept as written, like JSON keys."""
        start = self.pos
        self.pos += 1
        escaped = False
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == '"' and not escaped:
                name = self.text[start + 1:self.pos]
                self.pos += 1
                return name
            escaped = c == "\\" and not escaped
            self.pos += 1
        self.pos = start
        raise self.error("non-terminated property name")


def _collect(table: Table) -> CollectOp:
    return CollectOp(table, table.add_column())
