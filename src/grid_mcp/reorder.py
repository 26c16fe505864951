"""
Reorder layout algorithm for Grid-MCP.

Unlike push-down, reorder treats the items as a logical *sequence* in
reading order (row-major).  Dragging changes an item's place in that
sequence; every item then reflows into the grid the way CSS Grid
auto-placement does: scan left-to-right, top-to-bottom, and put each
item at the first position where it fits.
"""

from __future__ import annotations

import logging

from .models import GridCell, GridItem, copy_items, find_item

logger = logging.getLogger(__name__)


# Rows scanned per item before forcing placement in column 1.
MAX_REFLOW_ROWS = 100


def get_item_order(items: list[GridItem]) -> list[GridItem]:
    """Sort items into reading order (row first, then column)."""
    return sorted(items, key=lambda it: (it.row, it.column))


def _range_available(
    occupied: set[tuple[int, int]],
    column: int,
    row: int,
    width: int,
    height: int,
    columns: int,
) -> bool:
    if column + width - 1 > columns:
        return False
    for r in range(row, row + height):
        for c in range(column, column + width):
            if (c, r) in occupied:
                return False
    return True


def _mark_occupied(
    occupied: set[tuple[int, int]],
    column: int,
    row: int,
    width: int,
    height: int,
) -> None:
    for r in range(row, row + height):
        for c in range(column, column + width):
            occupied.add((c, r))


def reflow_items(items: list[GridItem], columns: int) -> list[GridItem]:
    """Reflow items, in the given sequence, into first-fit grid positions.

    Widths are clamped to ``columns``.  Returns new items; the input is
    not modified.
    """
    occupied: set[tuple[int, int]] = set()
    result: list[GridItem] = []

    for item in items:
        width = min(item.width, columns)
        placed = False
        row = 1

        while not placed:
            for col in range(1, columns - width + 2):
                if _range_available(occupied, col, row, width, item.height, columns):
                    _mark_occupied(occupied, col, row, width, item.height)
                    result.append(item.model_copy(update={"column": col, "row": row, "width": width}))
                    placed = True
                    break

            # Pathological input: stop scanning and force column 1
            if not placed and row > MAX_REFLOW_ROWS:
                logger.debug(f"reflow_items: row ceiling reached, forcing '{item.id}' to row {row}")
                _mark_occupied(occupied, 1, row, width, item.height)
                result.append(item.model_copy(update={"column": 1, "row": row, "width": width}))
                placed = True
            row += 1

    return result


def compute_reflow_layout(
    items: list[GridItem],
    moved_id: str,
    target_cell: GridCell,
    columns: int,
) -> list[GridItem]:
    """Compute a new arrangement after moving an item within the sequence.

    1. Order all items by current position (the logical sequence).
    2. Take the moved item out and reflow the rest to get candidate cells.
    3. Insert the moved item before the first candidate that is not
       strictly before ``target_cell`` in reading order.
    4. Reflow the full sequence.

    Unknown ``moved_id`` returns an unchanged copy.
    """
    ordered = get_item_order(copy_items(items))

    moved = find_item(ordered, moved_id)
    if moved is None:
        logger.debug(f"compute_reflow_layout: unknown item '{moved_id}'")
        return copy_items(items)

    remaining = [it for it in ordered if it.id != moved_id]
    candidates = reflow_items(remaining, columns)

    insert_index = len(candidates)
    for index, candidate in enumerate(candidates):
        if not candidate.cell.before(target_cell):
            insert_index = index
            break

    sequence = remaining[:insert_index] + [moved] + remaining[insert_index:]
    return reflow_items(sequence, columns)
