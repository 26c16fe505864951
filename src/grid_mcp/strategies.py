"""Placement strategies: the pluggable part of a ``GridEngine``.

A strategy turns (current arrangement, moved item, target) into a new
arrangement.  The engine is built with exactly one strategy; there is no
global registry.
"""

from __future__ import annotations

from typing import Protocol

from .models import GridCell, GridItem, ItemSize, copy_items, find_item
from .push import compute_push_layout
from .reorder import compute_reflow_layout


class PlacementStrategy(Protocol):
    def compute_drag_layout(
        self,
        items: list[GridItem],
        moved_id: str,
        target_cell: GridCell,
        columns: int,
    ) -> list[GridItem]:
        ...

    def compute_resize_layout(
        self,
        items: list[GridItem],
        resized_id: str,
        target_cell: GridCell,
        width: int,
        height: int,
        columns: int,
    ) -> list[GridItem]:
        ...


class PushStrategy:
    """Free-form placement: colliders are pushed down, the rest compacted up."""

    def __init__(self, compact: bool = True):
        self.compact = compact

    def compute_drag_layout(self, items, moved_id, target_cell, columns):
        return compute_push_layout(items, moved_id, target_cell, compact=self.compact)

    def compute_resize_layout(self, items, resized_id, target_cell, width, height, columns):
        return compute_push_layout(
            items,
            resized_id,
            target_cell,
            compact=self.compact,
            size=ItemSize(width=min(width, columns), height=height),
        )


class ReorderStrategy:
    """Sequence placement: items reflow in reading order around the moved one."""

    def compute_drag_layout(self, items, moved_id, target_cell, columns):
        return compute_reflow_layout(items, moved_id, target_cell, columns)

    def compute_resize_layout(self, items, resized_id, target_cell, width, height, columns):
        resized = copy_items(items)
        item = find_item(resized, resized_id)
        if item is not None:
            item.width = min(width, columns)
            item.height = height
        return compute_reflow_layout(resized, resized_id, target_cell, columns)
