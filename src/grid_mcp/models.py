"""
Data models for Grid-MCP — the grid layout vocabulary.

A grid layout is a set of rectangular items placed on an integer grid:

    LayoutDocument
    ├── items      — id → intrinsic size (width × height in cells)
    ├── canonical  — id → cell, at the maximum column count
    └── overrides  — column count → (id → cell), user-saved narrower layouts

All coordinates are **1-indexed** (column 1, row 1 is the top-left cell),
matching CSS Grid line numbers so an arrangement can be emitted as
``grid-column: C / span W`` without translation.

An **arrangement** is a plain ``list[GridItem]``: a full snapshot of every
item's position and size at one column count.  The placement algorithms
always return fresh copies, so a caller owns the list it receives.
"""

from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cells and sizes
# ---------------------------------------------------------------------------

class GridCell(BaseModel):
    """A single grid cell, addressed by 1-indexed column and row."""
    column: int = Field(default=1, ge=1)
    row: int = Field(default=1, ge=1)

    def before(self, other: GridCell) -> bool:
        """True if this cell comes strictly before ``other`` in reading order."""
        return self.row < other.row or (self.row == other.row and self.column < other.column)


class ItemSize(BaseModel):
    """Width and height of an item, in grid cells."""
    width: int = Field(default=1, ge=1)
    height: int = Field(default=1, ge=1)


class ItemDefinition(BaseModel):
    """Intrinsic properties of an item, independent of column count.

    Widths wider than the active column count are clamped at placement
    time; the definition itself keeps the declared width so the item
    regains it when the grid widens again.
    """
    id: str
    width: int = Field(default=1, ge=1)
    height: int = Field(default=1, ge=1)

    def size(self) -> ItemSize:
        return ItemSize(width=self.width, height=self.height)


# ---------------------------------------------------------------------------
# Placed item
# ---------------------------------------------------------------------------

class GridItem(BaseModel):
    """An item placed in an arrangement.

    Position
    --------
    ``column`` and ``row`` are the top-left cell.  The item occupies
    columns ``column .. column + width - 1`` and rows
    ``row .. row + height - 1``.

    Mutability
    ----------
    Algorithms mutate ``column``/``row`` on their own working copies
    (see ``copy_items``).  Size changes only through an explicit resize.
    """
    id: str
    column: int = 1
    row: int = 1
    width: int = Field(default=1, ge=1)
    height: int = Field(default=1, ge=1)

    @property
    def cell(self) -> GridCell:
        return GridCell(column=self.column, row=self.row)

    @property
    def bottom(self) -> int:
        """First row below the item."""
        return self.row + self.height

    @property
    def right(self) -> int:
        """First column right of the item."""
        return self.column + self.width


def copy_items(items: list[GridItem]) -> list[GridItem]:
    """Return a deep working copy of an arrangement."""
    return [item.model_copy() for item in items]


def find_item(items: list[GridItem], item_id: str) -> Optional[GridItem]:
    """Look up an item by id, or None if absent."""
    for item in items:
        if item.id == item_id:
            return item
    return None


# ---------------------------------------------------------------------------
# Persisted layout state
# ---------------------------------------------------------------------------

class LayoutDocument(BaseModel):
    """Serializable snapshot of a layout model.

    Three tables make up the persisted state: the item size table, the
    canonical position table, and a column-count-keyed table of override
    position tables.  Anything that preserves these round-trips.
    """
    max_columns: int = Field(ge=1)
    min_columns: int = Field(default=1, ge=1)
    items: list[ItemDefinition] = Field(default_factory=list)
    canonical: dict[str, GridCell] = Field(default_factory=dict)
    overrides: dict[int, dict[str, GridCell]] = Field(default_factory=dict)
