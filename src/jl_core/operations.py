"""Operation tree produced by the pattern compiler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from .table import Table


# ---------------------------------------------------------------------------
# Leaf
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=False)
class CollectOp:
    """Write one scalar into ``table`` at ``column``."""

    table: Table
    column: int


# ---------------------------------------------------------------------------
# Structural nodes
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=False)
class ArrayOp:
    next: Operation | None = None
    table: Table | None = None  # set only for ``[*]``
    is_root: bool = False


@dataclass(slots=True, eq=False)
class Property:
    name: str
    op: Operation | None = None


@dataclass(slots=True, eq=False)
class ObjectOp:
    # Lookup order: most recently compiled property first.
    props: list[Property] = field(default_factory=list)
    table: Table | None = None  # shared by every leaf property
    is_root: bool = False

    def add_property(self, name: str) -> Property:
        prop = Property(name)
        self.props.insert(0, prop)
        return prop

    def find(self, name: str) -> Property | None:
        for prop in self.props:
            if prop.name == name:
                return prop
        return None


Operation = Union[ArrayOp, ObjectOp, CollectOp]
