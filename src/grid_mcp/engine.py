"""
Grid engine — one grid's layout model, state machine and placement
strategy, composed explicitly at construction time.

The engine is what an input-handling collaborator drives:

    engine = GridEngine(model, strategy=PushStrategy())
    engine.select("chart")
    engine.start_drag("chart")
    preview = engine.update(GridCell(column=3, row=1))   # each pointer move
    final = engine.commit()                              # pointer released

Previews are always computed from the arrangement captured when the
interaction started, at the column count captured then, so a preview
never compounds on a previous preview.  The layout model is only
written during ``commit``; ``cancel`` simply hands back the original
arrangement.
"""

from __future__ import annotations

import logging
from typing import Optional

from .layout_model import LayoutModel, layout_items_to_positions
from .models import GridCell, GridItem, ItemSize
from .state_machine import (
    CancelInteraction,
    CommitInteraction,
    Deselect,
    FinishCommit,
    GridState,
    InteractionContext,
    InteractionMode,
    InteractionType,
    Select,
    StartInteraction,
    StateMachine,
    UpdateInteraction,
)
from .strategies import PlacementStrategy, PushStrategy

logger = logging.getLogger(__name__)


class GridEngine:
    """Drives select / drag / resize / commit / cancel for one grid.

    Args:
        layout_model: The grid's long-lived layout model.
        strategy: Placement strategy; defaults to ``PushStrategy()``.
        state_machine: Optional pre-built state machine (e.g. shared with
                       a UI layer that listens to it).
    """

    def __init__(
        self,
        layout_model: LayoutModel,
        strategy: Optional[PlacementStrategy] = None,
        state_machine: Optional[StateMachine] = None,
    ):
        self.layout_model = layout_model
        self.strategy = strategy or PushStrategy()
        self.state_machine = state_machine or StateMachine()

    @property
    def state(self) -> GridState:
        return self.state_machine.get_state()

    def current_arrangement(self) -> list[GridItem]:
        """The committed arrangement at the model's current column count."""
        return self.layout_model.get_arrangement()

    # --- Selection ---

    def select(self, item_id: str) -> bool:
        if item_id not in self.layout_model.items:
            logger.warning(f"select: unknown item '{item_id}'")
            return False
        state = self.state_machine.transition(Select(item_id=item_id))
        return state.phase == "selected" and state.selected_item_id == item_id

    def deselect(self) -> None:
        self.state_machine.transition(Deselect())

    # --- Interaction lifecycle ---

    def start_drag(self, item_id: Optional[str] = None, mode: InteractionMode = "pointer") -> bool:
        return self._start("drag", item_id, mode)

    def start_resize(self, item_id: Optional[str] = None, mode: InteractionMode = "pointer") -> bool:
        return self._start("resize", item_id, mode)

    def _start(self, kind: InteractionType, item_id: Optional[str], mode: InteractionMode) -> bool:
        if self.state.phase not in ("idle", "selected"):
            return False
        item_id = item_id or self.state.selected_item_id
        if item_id is None:
            return False
        if self.state.selected_item_id != item_id and not self.select(item_id):
            return False

        column_count = self.layout_model.current_column_count
        arrangement = self.layout_model.get_arrangement(column_count)
        moved = next((it for it in arrangement if it.id == item_id), None)
        if moved is None:
            logger.warning(f"start_{kind}: item '{item_id}' has no position at {column_count} columns")
            return False

        context = InteractionContext(
            type=kind,
            mode=mode,
            item_id=item_id,
            column_count=column_count,
            original_positions={it.id: it.cell for it in arrangement},
            original_sizes={it.id: ItemSize(width=it.width, height=it.height) for it in arrangement},
            target_cell=moved.cell,
            current_size=ItemSize(width=moved.width, height=moved.height),
        )
        state = self.state_machine.transition(StartInteraction(context=context))
        return state.phase == "interacting"

    def update(self, target_cell: GridCell, size: Optional[ItemSize] = None) -> Optional[list[GridItem]]:
        """Record a new target (and size, for resizes) and return the preview.

        Returns None when no interaction is active.
        """
        state = self.state_machine.transition(
            UpdateInteraction(target_cell=target_cell, current_size=size)
        )
        if state.phase != "interacting" or state.interaction is None:
            return None
        return self._compute(state.interaction)

    def commit(
        self,
        target_cell: Optional[GridCell] = None,
        size: Optional[ItemSize] = None,
    ) -> Optional[list[GridItem]]:
        """Finish the interaction, save the result to the layout model and return it."""
        if target_cell is not None:
            self.update(target_cell, size)

        state = self.state
        if state.phase != "interacting" or state.interaction is None:
            return None
        context = state.interaction
        final = self._compute(context)

        self.state_machine.transition(CommitInteraction())
        self.layout_model.save_layout(context.column_count, layout_items_to_positions(final))
        if context.type == "resize":
            if context.column_count != self.layout_model.max_columns:
                self._resize_canonical(context)
            self.layout_model.update_item_size(context.item_id, context.current_size)
        self.state_machine.transition(FinishCommit())

        logger.debug(
            f"commit: {context.type} of '{context.item_id}' saved at {context.column_count} columns"
        )
        return final

    def cancel(self) -> Optional[list[GridItem]]:
        """Abandon the interaction and return the arrangement captured at its start."""
        state = self.state
        if state.phase != "interacting" or state.interaction is None:
            return None
        original = self._baseline(state.interaction)
        self.state_machine.transition(CancelInteraction())
        return original

    def destroy(self) -> None:
        """Tear down: drop any selection or interaction."""
        self.state_machine.reset()

    # --- Helpers ---

    def _resize_canonical(self, context: InteractionContext) -> None:
        """Apply a narrow-width resize to the canonical layout as well.

        The new size applies at every column count, so the canonical
        arrangement is re-placed around the item's canonical cell.
        """
        max_columns = self.layout_model.max_columns
        canonical = self.layout_model.get_arrangement(max_columns)
        resized = next((it for it in canonical if it.id == context.item_id), None)
        if resized is None:
            return
        layout = self.strategy.compute_resize_layout(
            canonical,
            context.item_id,
            resized.cell,
            context.current_size.width,
            context.current_size.height,
            max_columns,
        )
        self.layout_model.save_layout(max_columns, layout_items_to_positions(layout))

    def _baseline(self, context: InteractionContext) -> list[GridItem]:
        items = []
        for item_id, cell in context.original_positions.items():
            size = context.original_sizes.get(item_id, ItemSize())
            items.append(GridItem(
                id=item_id,
                column=cell.column,
                row=cell.row,
                width=size.width,
                height=size.height,
            ))
        return items

    def _compute(self, context: InteractionContext) -> list[GridItem]:
        items = self._baseline(context)
        if context.type == "resize":
            return self.strategy.compute_resize_layout(
                items,
                context.item_id,
                context.target_cell,
                context.current_size.width,
                context.current_size.height,
                context.column_count,
            )
        return self.strategy.compute_drag_layout(
            items,
            context.item_id,
            context.target_cell,
            context.column_count,
        )
