"""Rectangle overlap tests over integer grid coordinates."""

from __future__ import annotations

from .models import GridItem


def items_overlap(a: GridItem, b: GridItem) -> bool:
    """True iff the two item rectangles intersect on both axes.

    Touching edges do not count: an item ending at column 3 (exclusive)
    and one starting at column 3 sit side by side.
    """
    return not (
        a.column + a.width <= b.column
        or b.column + b.width <= a.column
        or a.row + a.height <= b.row
        or b.row + b.height <= a.row
    )


def find_overlaps(items: list[GridItem]) -> list[tuple[GridItem, GridItem]]:
    """Return every overlapping pair in an arrangement (empty if valid)."""
    overlaps = []
    for i in range(len(items)):
        for j in range(i + 1, len(items)):
            if items_overlap(items[i], items[j]):
                overlaps.append((items[i], items[j]))
    return overlaps
