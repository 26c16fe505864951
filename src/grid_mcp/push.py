"""
Push-down layout algorithm for Grid-MCP.

When one item moves (or grows), every item it now collides with is pushed
straight down to sit just below it, and the push cascades through whatever
those items land on.  An optional compaction pass then floats every other
item back up until it is blocked, removing the vertical slack the cascade
left behind.

Ordering rules:
  - Colliders are pushed bottom-first (descending row, then ascending
    column) so stacked items settle top-to-bottom, left-to-right.
  - Compaction visits items top-first (ascending row, then column).

Both passes are bounded.  Hitting a bound is not an error: the layout is
returned as far as it got, because an interactive tool always needs
*some* renderable arrangement.
"""

from __future__ import annotations

import logging
from typing import Optional

from .geometry import items_overlap
from .models import GridCell, GridItem, ItemSize, copy_items, find_item

logger = logging.getLogger(__name__)


# Maximum recursion depth for cascading displacement.
MAX_PUSH_DEPTH = 50

# Maximum single-row steps a single item may take during compaction.
MAX_COMPACT_ITERATIONS = 100


# ---------------------------------------------------------------------------
# Push-down and compaction passes
# ---------------------------------------------------------------------------

def push_down(
    items: list[GridItem],
    moved: GridItem,
    moved_id: str,
    depth: int = 0,
    max_depth: int = MAX_PUSH_DEPTH,
) -> None:
    """Push colliders of ``moved`` below it, recursively.  Mutates ``items``.

    ``moved_id`` is the item the user is manipulating; it is never
    displaced, even when a cascade wraps back around to it.
    """
    if depth > max_depth:
        logger.debug(f"push_down: depth ceiling {max_depth} reached at '{moved.id}'")
        return

    colliders = sorted(
        (
            it for it in items
            if it.id != moved_id and it.id != moved.id and items_overlap(moved, it)
        ),
        key=lambda it: (-it.row, it.column),
    )

    for collider in colliders:
        new_row = moved.row + moved.height
        if collider.row < new_row:
            collider.row = new_row
            push_down(items, collider, moved_id, depth + 1, max_depth)


def compact_up(
    items: list[GridItem],
    exclude_id: str,
    max_iterations: int = MAX_COMPACT_ITERATIONS,
) -> None:
    """Float every item except ``exclude_id`` upward until blocked.  Mutates ``items``."""
    ordered = sorted(
        (it for it in items if it.id != exclude_id),
        key=lambda it: (it.row, it.column),
    )

    for item in ordered:
        iterations = 0
        while item.row > 1 and iterations < max_iterations:
            iterations += 1
            item.row -= 1
            if any(other.id != item.id and items_overlap(item, other) for other in items):
                item.row += 1
                break


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compute_push_layout(
    items: list[GridItem],
    moved_id: str,
    target_cell: GridCell,
    compact: bool = True,
    size: Optional[ItemSize] = None,
    max_depth: int = MAX_PUSH_DEPTH,
) -> list[GridItem]:
    """Compute a new arrangement after moving (and optionally resizing) one item.

    Args:
        items: The current arrangement.  Not modified.
        moved_id: Id of the item being dragged or resized.
        target_cell: Requested top-left cell for the moved item.
        compact: Whether to float the other items upward afterwards.
        size: New size for the moved item (resize); applied before
              displacement runs.
        max_depth: Cascade depth ceiling.

    Returns:
        A new arrangement with the moved item at exactly ``target_cell``.
        If ``moved_id`` is unknown, an unchanged copy is returned.
    """
    result = copy_items(items)

    moved = find_item(result, moved_id)
    if moved is None:
        logger.debug(f"compute_push_layout: unknown item '{moved_id}'")
        return result

    moved.column = target_cell.column
    moved.row = target_cell.row
    if size is not None:
        moved.width = size.width
        moved.height = size.height

    push_down(result, moved, moved_id, max_depth=max_depth)
    if compact:
        compact_up(result, moved_id)

    return result


def layout_to_css(
    items: list[GridItem],
    selector_prefix: str = "#",
    selector_suffix: str = "",
    exclude_selector: str = "",
    max_columns: Optional[int] = None,
) -> str:
    """Convert an arrangement to CSS grid placement rules, one per line.

    With ``max_columns`` set, widths are clamped to it and columns are
    pulled left so no item spills into an implicit extra column.

    Example::

        >>> layout_to_css([GridItem(id="a", column=2, row=1, width=2)])
        '#a { grid-column: 2 / span 2; grid-row: 1 / span 1; }'
    """
    rules = []
    for item in items:
        width = min(item.width, max_columns) if max_columns else item.width
        column = (
            max(1, min(item.column, max_columns - width + 1))
            if max_columns else item.column
        )
        selector = f"{selector_prefix}{item.id}{selector_suffix}{exclude_selector}"
        rules.append(
            f"{selector} {{ grid-column: {column} / span {width}; "
            f"grid-row: {item.row} / span {item.height}; }}"
        )
    return "\n".join(rules)
