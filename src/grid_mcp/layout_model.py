"""
Responsive layout model for Grid-MCP.

Manages layouts across column counts with a three-tier system:

  1. Canonical layout — the source of truth, stored at ``max_columns``
  2. Per-column-count overrides — arrangements a user saved explicitly
  3. Derived layouts — computed on demand by first-fit packing of the
     canonical layout into fewer columns

The model is pure data and logic.  It never reads positions from a
rendering surface: callers hand it arrangements and read arrangements
back.  Every mutation updates the internal maps in one step and then
notifies subscribers synchronously.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from .models import GridCell, GridItem, ItemDefinition, ItemSize, LayoutDocument

logger = logging.getLogger(__name__)


# Rows scanned when deriving a layout before forcing placement.
MAX_DERIVE_ROWS = 100

Positions = dict[str, GridCell]


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _copy_positions(positions: Positions) -> Positions:
    return {item_id: cell.model_copy() for item_id, cell in positions.items()}


# ---------------------------------------------------------------------------
# Derivation
# ---------------------------------------------------------------------------

def derive_positions(
    definitions: Iterable[ItemDefinition],
    source_positions: Positions,
    columns: int,
    max_rows: int = MAX_DERIVE_ROWS,
) -> Positions:
    """Pack items into ``columns`` columns using first-fit.

    Items are placed in source reading order (top-to-bottom,
    left-to-right) at the first free rectangle, with widths clamped to
    ``columns``.  An item that finds no room within ``max_rows`` rows is
    forced into column 1 of the next free row.
    """
    def order_key(definition: ItemDefinition) -> tuple[int, int]:
        pos = source_positions.get(definition.id)
        return (pos.row, pos.column) if pos else (0, 0)

    ordered = sorted(definitions, key=order_key)
    occupied: set[tuple[int, int]] = set()
    result: Positions = {}

    def fits(col: int, row: int, width: int, height: int) -> bool:
        return all(
            (c, r) not in occupied
            for r in range(row, row + height)
            for c in range(col, col + width)
        )

    def mark(col: int, row: int, width: int, height: int) -> None:
        for r in range(row, row + height):
            for c in range(col, col + width):
                occupied.add((c, r))

    for definition in ordered:
        width = min(definition.width, columns)
        height = definition.height
        placement: Optional[tuple[int, int]] = None

        for row in range(1, max_rows + 1):
            for col in range(1, columns - width + 2):
                if fits(col, row, width, height):
                    placement = (col, row)
                    break
            if placement:
                break

        if placement is None:
            next_free_row = max((r for _, r in occupied), default=0) + 1
            logger.debug(
                f"derive_positions: no room for '{definition.id}' within {max_rows} rows, "
                f"forcing row {next_free_row}"
            )
            placement = (1, next_free_row)

        col, row = placement
        mark(col, row, width, height)
        result[definition.id] = GridCell(column=col, row=row)

    return result


# ---------------------------------------------------------------------------
# Layout model
# ---------------------------------------------------------------------------

class LayoutModel:
    """Long-lived holder of item sizes, canonical and override layouts.

    Column Counts
    -------------
    Any column count passed in is clamped to ``[min_columns,
    max_columns]``.  Saving at ``max_columns`` replaces the canonical
    layout; saving anywhere else stores an override for that count.

    Subscribers
    -----------
    ``subscribe(callback)`` registers a zero-argument callable and
    returns an unsubscribe function.  Callbacks run synchronously after
    each mutation.
    """

    def __init__(
        self,
        max_columns: int,
        items: Iterable[ItemDefinition],
        canonical_positions: Optional[Positions] = None,
        overrides: Optional[dict[int, Positions]] = None,
        min_columns: int = 1,
    ):
        if max_columns < 1:
            raise ValueError(f"max_columns must be >= 1, got {max_columns}")
        if not 1 <= min_columns <= max_columns:
            raise ValueError(
                f"min_columns must be between 1 and max_columns ({max_columns}), got {min_columns}"
            )
        self._max_columns = max_columns
        self._min_columns = min_columns
        self._items: dict[str, ItemDefinition] = {
            item.id: ItemDefinition(id=item.id, width=item.width, height=item.height)
            for item in items
        }
        self._canonical: Positions = _copy_positions(canonical_positions or {})
        self._overrides: dict[int, Positions] = {
            cols: _copy_positions(positions) for cols, positions in (overrides or {}).items()
        }
        self._current_column_count = max_columns
        self._subscribers: list[Callable[[], None]] = []

    @classmethod
    def from_arrangement(
        cls,
        items: list[GridItem],
        max_columns: int,
        min_columns: int = 1,
    ) -> LayoutModel:
        """Create a model from the arrangement first observed at ``max_columns``."""
        return cls(
            max_columns=max_columns,
            min_columns=min_columns,
            items=[ItemDefinition(id=it.id, width=it.width, height=it.height) for it in items],
            canonical_positions={it.id: it.cell for it in items},
        )

    @classmethod
    def from_document(cls, document: LayoutDocument) -> LayoutModel:
        return cls(
            max_columns=document.max_columns,
            min_columns=document.min_columns,
            items=document.items,
            canonical_positions=document.canonical,
            overrides=document.overrides,
        )

    def to_document(self) -> LayoutDocument:
        return LayoutDocument(
            max_columns=self._max_columns,
            min_columns=self._min_columns,
            items=[item.model_copy() for item in self._items.values()],
            canonical=_copy_positions(self._canonical),
            overrides={
                cols: _copy_positions(self._overrides[cols])
                for cols in sorted(self._overrides, reverse=True)
            },
        )

    # --- Read-only properties ---

    @property
    def max_columns(self) -> int:
        return self._max_columns

    @property
    def min_columns(self) -> int:
        return self._min_columns

    @property
    def items(self) -> dict[str, ItemDefinition]:
        """Item definitions by id (a copy; edit through ``update_item_size``)."""
        return {item_id: item.model_copy() for item_id, item in self._items.items()}

    @property
    def current_column_count(self) -> int:
        return self._current_column_count

    # --- Queries ---

    def clamp_columns(self, column_count: int) -> int:
        return _clamp(column_count, self._min_columns, self._max_columns)

    def get_layout_for_columns(self, column_count: int) -> Positions:
        """Positions for a column count: canonical, override, or derived."""
        cols = self.clamp_columns(column_count)

        if cols == self._max_columns:
            return _copy_positions(self._canonical)

        override = self._overrides.get(cols)
        if override is not None:
            return _copy_positions(override)

        return derive_positions(self._items.values(), self._canonical, cols)

    def get_current_layout(self) -> Positions:
        return self.get_layout_for_columns(self._current_column_count)

    def get_arrangement(self, column_count: Optional[int] = None) -> list[GridItem]:
        """Full arrangement (positions + clamped sizes) for a column count."""
        cols = self.clamp_columns(
            self._current_column_count if column_count is None else column_count
        )
        return build_layout_items(self._items, self.get_layout_for_columns(cols), cols)

    def layout_source(self, column_count: int) -> str:
        """'canonical', 'override' or 'derived' for a column count."""
        cols = self.clamp_columns(column_count)
        if cols == self._max_columns:
            return "canonical"
        return "override" if cols in self._overrides else "derived"

    def has_override(self, column_count: int) -> bool:
        return column_count in self._overrides

    def get_override_column_counts(self) -> list[int]:
        """Column counts with a saved override, widest first."""
        return sorted(self._overrides, reverse=True)

    # --- Mutations ---

    def save_layout(self, column_count: int, positions: Positions) -> None:
        """Store positions as canonical (at max columns) or as an override."""
        cols = self.clamp_columns(column_count)
        if cols == self._max_columns:
            self._canonical = _copy_positions(positions)
        else:
            self._overrides[cols] = _copy_positions(positions)
        self._notify()

    def clear_override(self, column_count: int) -> None:
        """Drop the override for a column count.  The canonical layout cannot be cleared."""
        if column_count == self._max_columns:
            return
        if self._overrides.pop(column_count, None) is not None:
            self._notify()

    def update_item_size(self, item_id: str, size: ItemSize) -> None:
        """Change an item's declared size.  Unknown ids are logged and ignored."""
        if item_id not in self._items:
            logger.warning(
                f"update_item_size: item '{item_id}' not found. "
                f"Available ids: {sorted(self._items)}"
            )
            return
        self._items[item_id] = ItemDefinition(id=item_id, width=size.width, height=size.height)
        self._notify()

    def set_current_column_count(self, column_count: int) -> None:
        new_count = self.clamp_columns(column_count)
        if new_count != self._current_column_count:
            self._current_column_count = new_count
            self._notify()

    # --- Subscriptions ---

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        # Iterate over a snapshot so callbacks may unsubscribe themselves
        for callback in list(self._subscribers):
            callback()


# ---------------------------------------------------------------------------
# Functional API and conversion helpers
# ---------------------------------------------------------------------------

def derive_layout(model: LayoutModel, column_count: int) -> Positions:
    """Positions for ``column_count``; see ``LayoutModel.get_layout_for_columns``."""
    return model.get_layout_for_columns(column_count)


def build_layout_items(
    definitions: dict[str, ItemDefinition],
    positions: Positions,
    column_count: int,
) -> list[GridItem]:
    """Combine definitions and positions into an arrangement.

    Widths are clamped to ``column_count``.  Items without a position are
    skipped.
    """
    result = []
    for item_id, definition in definitions.items():
        pos = positions.get(item_id)
        if pos is None:
            continue
        result.append(GridItem(
            id=item_id,
            column=pos.column,
            row=pos.row,
            width=min(definition.width, column_count),
            height=definition.height,
        ))
    return result


def layout_items_to_positions(items: list[GridItem]) -> Positions:
    """Strip sizes from an arrangement, keeping id → cell."""
    return {item.id: GridCell(column=item.column, row=item.row) for item in items}
