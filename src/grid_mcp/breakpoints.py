"""
Breakpoint descriptions and container-query CSS for Grid-MCP.

Every supported column count ``n`` becomes active once the container is
at least ``n * cell_size + (n - 1) * gap`` pixels wide.  For each count
the layout model supplies an arrangement (canonical, override or
derived); this module pairs each arrangement with its width range and
renders the lot as CSS ``@container`` rules:

    /* Fallback: canonical layout (before container queries evaluate) */
    #a { grid-column: 1 / span 2; grid-row: 1 / span 1; }

    /* 4 columns (canonical) */
    @container (min-width: 784px) {
      .grid-container { grid-template-columns: repeat(4, 1fr); }
      #a { grid-column: 1 / span 2; grid-row: 1 / span 1; }
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from .layout_model import LayoutModel


DEFAULT_CELL_SIZE = 184
DEFAULT_GAP = 16


@dataclass
class BreakpointCSSOptions:
    """Options for ``generate_breakpoint_css``."""
    cell_size: float = DEFAULT_CELL_SIZE
    gap: float = DEFAULT_GAP
    selector_prefix: str = "#"
    selector_suffix: str = ""
    grid_selector: str = ".grid-container"


class ItemPlacement(BaseModel):
    """One item's cell and span within a breakpoint description."""
    id: str
    column: int
    row: int
    width: int
    height: int


class BreakpointDescription(BaseModel):
    """The arrangement that applies within one container-width range.

    ``min_width`` is None for the narrowest column count (it applies all
    the way down) and ``max_width`` is None for the canonical count (it
    applies all the way up).
    """
    column_count: int
    min_width: Optional[float] = None
    max_width: Optional[float] = None
    source: str = "derived"  # 'canonical', 'override' or 'derived'
    placements: list[ItemPlacement] = Field(default_factory=list)


class LayoutDescriptions(BaseModel):
    """Unconditional fallback plus width-keyed breakpoints, widest first."""
    fallback: list[ItemPlacement] = Field(default_factory=list)
    breakpoints: list[BreakpointDescription] = Field(default_factory=list)


def breakpoint_width(column_count: int, cell_size: float, gap: float) -> float:
    """Minimum container width for ``column_count`` columns."""
    return column_count * cell_size + (column_count - 1) * gap


def _placements(model: LayoutModel, column_count: int) -> list[ItemPlacement]:
    definitions = model.items
    positions = model.get_layout_for_columns(column_count)
    placements = []
    for item_id, pos in positions.items():
        definition = definitions.get(item_id)
        if definition is None:
            continue
        placements.append(ItemPlacement(
            id=item_id,
            column=pos.column,
            row=pos.row,
            width=min(definition.width, column_count),
            height=definition.height,
        ))
    return placements


def emit_layout_descriptions(
    model: LayoutModel,
    cell_size: float = DEFAULT_CELL_SIZE,
    gap: float = DEFAULT_GAP,
) -> LayoutDescriptions:
    """Describe the layout at every column count, from widest to narrowest."""
    max_cols = model.max_columns
    min_cols = model.min_columns

    breakpoints = []
    for cols in range(max_cols, min_cols - 1, -1):
        min_width = None if cols == min_cols else breakpoint_width(cols, cell_size, gap)
        max_width = None if cols == max_cols else breakpoint_width(cols + 1, cell_size, gap) - 1
        breakpoints.append(BreakpointDescription(
            column_count=cols,
            min_width=min_width,
            max_width=max_width,
            source=model.layout_source(cols),
            placements=_placements(model, cols),
        ))

    return LayoutDescriptions(
        fallback=_placements(model, max_cols),
        breakpoints=breakpoints,
    )


def _format_px(value: float) -> str:
    return f"{value:g}px"


def _container_query(description: BreakpointDescription) -> str:
    conditions = []
    if description.min_width is not None:
        conditions.append(f"(min-width: {_format_px(description.min_width)})")
    if description.max_width is not None:
        conditions.append(f"(max-width: {_format_px(description.max_width)})")
    return "@container " + " and ".join(conditions)


def _placement_rule(placement: ItemPlacement, options: BreakpointCSSOptions) -> str:
    selector = f"{options.selector_prefix}{placement.id}{options.selector_suffix}"
    return (
        f"{selector} {{ grid-column: {placement.column} / span {placement.width}; "
        f"grid-row: {placement.row} / span {placement.height}; }}"
    )


def generate_breakpoint_css(
    model: LayoutModel,
    options: Optional[BreakpointCSSOptions] = None,
) -> str:
    """Render every breakpoint of ``model`` as container-query CSS."""
    opts = options or BreakpointCSSOptions()
    descriptions = emit_layout_descriptions(model, opts.cell_size, opts.gap)

    lines = ["/* Fallback: canonical layout (before container queries evaluate) */"]
    lines.extend(_placement_rule(p, opts) for p in descriptions.fallback)
    lines.append("")

    for description in descriptions.breakpoints:
        cols = description.column_count
        lines.append(f"/* {cols} columns ({description.source}) */")
        if description.min_width is None and description.max_width is None:
            # Single supported column count: the rules apply unconditionally
            lines.append(f"{opts.grid_selector} {{ grid-template-columns: repeat({cols}, 1fr); }}")
            lines.extend(_placement_rule(p, opts) for p in description.placements)
        else:
            lines.append(f"{_container_query(description)} {{")
            lines.append(f"  {opts.grid_selector} {{ grid-template-columns: repeat({cols}, 1fr); }}")
            lines.extend(f"  {_placement_rule(p, opts)}" for p in description.placements)
            lines.append("}")
        lines.append("")

    return "\n".join(lines)
