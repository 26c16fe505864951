"""
Interaction state machine for Grid-MCP.

A single source of truth for interaction state.  The phases are:

    idle → selected → interacting → committing → selected → idle

Key invariants:
  1. Only ONE interaction can be active at a time (drag OR resize).
  2. The column count is captured when an interaction starts and does not
     change while it runs.
  3. A transition fired from the wrong phase is a no-op: the reducer
     returns the very same state object.  Callers may therefore fire
     transitions speculatively.

The reducer is pure; ``StateMachine`` wraps it with the current state and
a listener list.
"""

from __future__ import annotations

from typing import Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from .models import GridCell, ItemSize


InteractionMode = Literal["pointer", "keyboard"]
InteractionType = Literal["drag", "resize"]
Phase = Literal["idle", "selected", "interacting", "committing"]


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class InteractionContext(BaseModel):
    """The in-flight drag or resize.

    ``original_positions`` and ``original_sizes`` capture every item at
    interaction start so previews are always computed from the same
    baseline, and so a cancel can restore it exactly.
    """
    type: InteractionType
    mode: InteractionMode
    item_id: str
    column_count: int
    original_positions: dict[str, GridCell] = Field(default_factory=dict)
    original_sizes: dict[str, ItemSize] = Field(default_factory=dict)
    target_cell: GridCell
    current_size: ItemSize


class GridState(BaseModel):
    phase: Phase = "idle"
    selected_item_id: Optional[str] = None
    interaction: Optional[InteractionContext] = None
    keyboard_mode_active: bool = False


def create_initial_state() -> GridState:
    return GridState()


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class Select(BaseModel):
    type: Literal["SELECT"] = "SELECT"
    item_id: str


class Deselect(BaseModel):
    type: Literal["DESELECT"] = "DESELECT"


class StartInteraction(BaseModel):
    type: Literal["START_INTERACTION"] = "START_INTERACTION"
    context: InteractionContext


class UpdateInteraction(BaseModel):
    type: Literal["UPDATE_INTERACTION"] = "UPDATE_INTERACTION"
    target_cell: GridCell
    current_size: Optional[ItemSize] = None


class CommitInteraction(BaseModel):
    type: Literal["COMMIT_INTERACTION"] = "COMMIT_INTERACTION"


class CancelInteraction(BaseModel):
    type: Literal["CANCEL_INTERACTION"] = "CANCEL_INTERACTION"


class FinishCommit(BaseModel):
    type: Literal["FINISH_COMMIT"] = "FINISH_COMMIT"


class ToggleKeyboardMode(BaseModel):
    type: Literal["TOGGLE_KEYBOARD_MODE"] = "TOGGLE_KEYBOARD_MODE"


class Reset(BaseModel):
    type: Literal["RESET"] = "RESET"


StateTransition = Union[
    Select,
    Deselect,
    StartInteraction,
    UpdateInteraction,
    CommitInteraction,
    CancelInteraction,
    FinishCommit,
    ToggleKeyboardMode,
    Reset,
]

StateListener = Callable[[GridState, StateTransition], None]


def can_transition(state: GridState, action: StateTransition) -> bool:
    """Check whether ``action`` is legal from the current phase."""
    phase = state.phase
    if action.type == "SELECT":
        return phase in ("idle", "selected")
    if action.type == "DESELECT":
        return phase == "selected"
    if action.type == "START_INTERACTION":
        return phase == "selected"
    if action.type == "UPDATE_INTERACTION":
        return phase == "interacting" and state.interaction is not None
    if action.type in ("COMMIT_INTERACTION", "CANCEL_INTERACTION"):
        return phase == "interacting"
    if action.type == "FINISH_COMMIT":
        return phase == "committing"
    if action.type == "TOGGLE_KEYBOARD_MODE":
        return True
    if action.type == "RESET":
        return True
    return False


def reducer(state: GridState, action: StateTransition) -> GridState:
    """Pure reducer: next state from current state and action.

    Returns ``state`` itself (same object) when the action is not legal.
    """
    if not can_transition(state, action):
        return state

    if action.type == "SELECT":
        return state.model_copy(update={"phase": "selected", "selected_item_id": action.item_id})

    if action.type == "DESELECT":
        return state.model_copy(update={"phase": "idle", "selected_item_id": None})

    if action.type == "START_INTERACTION":
        return state.model_copy(update={
            "phase": "interacting",
            "interaction": action.context.model_copy(deep=True),
        })

    if action.type == "UPDATE_INTERACTION":
        interaction = state.interaction.model_copy(update={
            "target_cell": action.target_cell,
            "current_size": action.current_size or state.interaction.current_size,
        })
        return state.model_copy(update={"interaction": interaction})

    if action.type == "COMMIT_INTERACTION":
        return state.model_copy(update={"phase": "committing"})

    if action.type in ("CANCEL_INTERACTION", "FINISH_COMMIT"):
        return state.model_copy(update={"phase": "selected", "interaction": None})

    if action.type == "TOGGLE_KEYBOARD_MODE":
        return state.model_copy(update={"keyboard_mode_active": not state.keyboard_mode_active})

    if action.type == "RESET":
        initial = create_initial_state()
        return state if state == initial else initial

    return state


class StateMachine:
    """Holds the current ``GridState`` and notifies listeners on change."""

    def __init__(self, initial_state: Optional[GridState] = None):
        self._state = initial_state or create_initial_state()
        self._listeners: list[StateListener] = []

    def get_state(self) -> GridState:
        return self._state

    def transition(self, action: StateTransition) -> GridState:
        next_state = reducer(self._state, action)
        if next_state is not self._state:
            self._state = next_state
            for listener in list(self._listeners):
                listener(self._state, action)
        return self._state

    def can_transition(self, action: StateTransition) -> bool:
        return can_transition(self._state, action)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> GridState:
        """Return to idle, dropping any selection and interaction (teardown).

        Listeners see a ``RESET`` transition unless the state was already initial.
        """
        return self.transition(Reset())


# ---------------------------------------------------------------------------
# Derived state helpers
# ---------------------------------------------------------------------------

def is_interacting(state: GridState) -> bool:
    return state.phase in ("interacting", "committing")


def is_dragging(state: GridState) -> bool:
    return is_interacting(state) and state.interaction is not None and state.interaction.type == "drag"


def is_resizing(state: GridState) -> bool:
    return is_interacting(state) and state.interaction is not None and state.interaction.type == "resize"


def get_interaction_mode(state: GridState) -> Optional[InteractionMode]:
    return state.interaction.mode if state.interaction else None


def get_interaction_column_count(state: GridState) -> Optional[int]:
    return state.interaction.column_count if state.interaction else None
