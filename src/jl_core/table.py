"""Column tables and the join that turns them into output lines."""

from __future__ import annotations

import logging
import math
from typing import Iterator, Sequence

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

class Table:
    """A group of columns filled by one collecting subtree.

    Values are written into a pending row; ``complete_row()`` moves the
    pending row into the next row slot.  Slots are kept across flushes
    and overwritten in place, only ``row_count`` is reset.
    """

    def __init__(self, index: int) -> None:
        self.index = index
        self.ncols = 0
        self.row_count = 0
        self._slots: list[list[str]] = []
        self._pending: list[str] = []

    def __repr__(self) -> str:
        return f"Table(index={self.index}, ncols={self.ncols}, rows={self.row_count})"

    def add_column(self) -> int:
        """Allocate a new column and return its index."""
        self._pending.append("")
        self.ncols += 1
        return self.ncols - 1

    @property
    def pending(self) -> Sequence[str]:
        return tuple(self._pending)

    def set_value(self, column: int, text: str) -> None:
        self._pending[column] = text

    def complete_row(self) -> bool:
        """Append the pending row unless every column is empty."""
        if not any(self._pending):
            return False
        if self.row_count < len(self._slots):
            self._slots[self.row_count][:] = self._pending
        else:
            self._slots.append(list(self._pending))
        self.row_count += 1
        self._pending[:] = [""] * self.ncols
        return True

    def row(self, i: int) -> Sequence[str]:
        if not 0 <= i < self.row_count:
            raise IndexError(i)
        return self._slots[i]

    @property
    def rows(self) -> list[tuple[str, ...]]:
        return [tuple(self._slots[i]) for i in range(self.row_count)]

    def reset(self) -> None:
        self.row_count = 0


# ---------------------------------------------------------------------------
# TableRegistry
# ---------------------------------------------------------------------------

class TableRegistry:
    """Every table of one compiled pattern, in output column order."""

    def __init__(self) -> None:
        self._tables: list[Table] = []

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables)

    def __getitem__(self, i: int) -> Table:
        return self._tables[i]

    def new_table(self) -> Table:
        table = Table(len(self._tables))
        self._tables.append(table)
        return table

    @property
    def width(self) -> int:
        """Number of fields in every output line."""
        return sum(t.ncols for t in self._tables)

    def flush(self, fieldsep: str = "\t") -> list[str]:
        """Join the buffered rows of all tables into output lines.

        The line count is the product of the non-zero row counts.  Line
        ``i`` takes row ``i % row_count`` from each table, so a table
        with fewer rows repeats alongside a longer one.  Tables without
        rows contribute blank columns.  Every table is reset afterwards.
        """
        counts = [t.row_count for t in self._tables if t.row_count > 0]
        if not counts:
            return []

        n = math.prod(counts)
        lines: list[str] = []
        for i in range(n):
            fields: list[str] = []
            for t in self._tables:
                if t.row_count > 0:
                    fields.extend(t.row(i % t.row_count))
                else:
                    fields.extend([""] * t.ncols)
            lines.append(fieldsep.join(fields))

        for t in self._tables:
            t.reset()

        logger.debug("flushed %d line(s) from row counts %s", n, counts)
        return lines
