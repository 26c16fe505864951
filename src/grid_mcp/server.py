"""Grid-MCP server — MCP tools for computing, deriving and previewing grid layouts."""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .breakpoints import BreakpointCSSOptions, emit_layout_descriptions, generate_breakpoint_css
from .geometry import find_overlaps
from .layout_model import LayoutModel, derive_layout
from .models import GridCell, GridItem, ItemSize
from .parser import layout_to_yaml, parse_yaml
from .preview import LayoutPreviewRenderer
from .push import compute_push_layout
from .reorder import compute_reflow_layout

logger = logging.getLogger(__name__)


# --- Constants ---
OUTPUT_DIR = Path(os.environ.get("GRID_MCP_OUTPUT_DIR", Path.home() / ".grid-mcp" / "previews"))

server = Server("grid-mcp")


def _ensure_output_dir():
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)


# --- Shared schema fragments ---

_ITEMS_SCHEMA = {
    "type": "array",
    "description": "Current arrangement: every item with its cell and size (1-indexed).",
    "items": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "column": {"type": "integer", "minimum": 1},
            "row": {"type": "integer", "minimum": 1},
            "width": {"type": "integer", "minimum": 1, "default": 1},
            "height": {"type": "integer", "minimum": 1, "default": 1},
        },
        "required": ["id", "column", "row"],
    },
}

_LAYOUT_YAML_SCHEMA = {
    "type": "string",
    "description": (
        "YAML layout document. Simplified format example:\n"
        "columns: 4\n"
        "items:\n"
        "  - {id: chart, width: 2, column: 1, row: 1}\n"
        "  - {id: notes, column: 3, row: 1}\n"
        "\n"
        "The full format (root key 'layout') also carries per-column-count overrides."
    ),
}

_POSITIONS_SCHEMA = {
    "type": "object",
    "description": "Mapping of item id to {column, row}.",
    "additionalProperties": {
        "type": "object",
        "properties": {
            "column": {"type": "integer", "minimum": 1},
            "row": {"type": "integer", "minimum": 1},
        },
        "required": ["column", "row"],
    },
}


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="push_layout",
            description=(
                "Move (and optionally resize) one item using the push-down strategy: "
                "colliding items are pushed below it and, with compaction on, every "
                "other item floats back up to fill gaps. Returns the new arrangement."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "items": _ITEMS_SCHEMA,
                    "moved_id": {"type": "string", "description": "Id of the item being moved."},
                    "column": {"type": "integer", "minimum": 1, "description": "Target column."},
                    "row": {"type": "integer", "minimum": 1, "description": "Target row."},
                    "width": {"type": "integer", "minimum": 1, "description": "New width (resize)."},
                    "height": {"type": "integer", "minimum": 1, "description": "New height (resize)."},
                    "compact": {
                        "type": "boolean",
                        "description": "Float items upward after pushing. Default: true.",
                        "default": True,
                    },
                },
                "required": ["items", "moved_id", "column", "row"],
            },
        ),
        Tool(
            name="reflow_layout",
            description=(
                "Move one item within the reading-order sequence and reflow every item "
                "first-fit into the given column count. Returns the new arrangement."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "items": _ITEMS_SCHEMA,
                    "moved_id": {"type": "string"},
                    "column": {"type": "integer", "minimum": 1},
                    "row": {"type": "integer", "minimum": 1},
                    "columns": {"type": "integer", "minimum": 1, "description": "Grid column count."},
                },
                "required": ["items", "moved_id", "column", "row", "columns"],
            },
        ),
        Tool(
            name="derive_layout",
            description=(
                "Get the arrangement of a layout at a column count: the canonical layout "
                "at the maximum, a saved override if one exists, otherwise derived by "
                "first-fit packing of the canonical layout."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "layout_yaml": _LAYOUT_YAML_SCHEMA,
                    "columns": {"type": "integer", "minimum": 1},
                },
                "required": ["layout_yaml", "columns"],
            },
        ),
        Tool(
            name="breakpoint_css",
            description=(
                "Emit width-keyed layout descriptions for every supported column count "
                "(widest first) plus the container-query CSS that applies them."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "layout_yaml": _LAYOUT_YAML_SCHEMA,
                    "cell_size": {"type": "number", "description": "Cell size in px (default 184)."},
                    "gap": {"type": "number", "description": "Gap in px (default 16)."},
                    "selector_prefix": {"type": "string", "default": "#"},
                    "selector_suffix": {"type": "string", "default": ""},
                    "grid_selector": {"type": "string", "default": ".grid-container"},
                },
                "required": ["layout_yaml"],
            },
        ),
        Tool(
            name="save_layout",
            description=(
                "Save positions for a column count (canonical at the maximum, an override "
                "otherwise) and return the updated layout YAML."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "layout_yaml": _LAYOUT_YAML_SCHEMA,
                    "columns": {"type": "integer", "minimum": 1},
                    "positions": _POSITIONS_SCHEMA,
                },
                "required": ["layout_yaml", "columns", "positions"],
            },
        ),
        Tool(
            name="clear_override",
            description="Remove the saved override for a column count and return the updated layout YAML.",
            inputSchema={
                "type": "object",
                "properties": {
                    "layout_yaml": _LAYOUT_YAML_SCHEMA,
                    "columns": {"type": "integer", "minimum": 1},
                },
                "required": ["layout_yaml", "columns"],
            },
        ),
        Tool(
            name="resize_item",
            description="Change an item's declared size and return the updated layout YAML.",
            inputSchema={
                "type": "object",
                "properties": {
                    "layout_yaml": _LAYOUT_YAML_SCHEMA,
                    "item_id": {"type": "string"},
                    "width": {"type": "integer", "minimum": 1},
                    "height": {"type": "integer", "minimum": 1},
                },
                "required": ["layout_yaml", "item_id", "width", "height"],
            },
        ),
        Tool(
            name="render_preview",
            description=(
                "Render the layout at a column count to a PNG preview. "
                "Returns the path to the rendered file."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "layout_yaml": _LAYOUT_YAML_SCHEMA,
                    "columns": {"type": "integer", "minimum": 1},
                    "scale": {"type": "number", "default": 1.0},
                    "theme": {"type": "string", "enum": ["dark", "light"], "default": "dark"},
                    "filename": {
                        "type": "string",
                        "description": "Output filename (without extension). Default: auto-generated UUID.",
                    },
                },
                "required": ["layout_yaml"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    handlers = {
        "push_layout": _push_layout,
        "reflow_layout": _reflow_layout,
        "derive_layout": _derive_layout,
        "breakpoint_css": _breakpoint_css,
        "save_layout": _save_layout,
        "clear_override": _clear_override,
        "resize_item": _resize_item,
        "render_preview": _render_preview,
    }
    handler = handlers.get(name)
    if handler is None:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]
    return await handler(arguments)


# --- Helpers ---

def _json_result(payload: dict) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload))]


def _parse_items(raw_items: list[dict]) -> list[GridItem]:
    return [
        GridItem(
            id=str(raw["id"]),
            column=int(raw["column"]),
            row=int(raw["row"]),
            width=int(raw.get("width", 1)),
            height=int(raw.get("height", 1)),
        )
        for raw in raw_items
    ]


def _arrangement_payload(items: list[GridItem]) -> dict:
    return {
        "status": "success",
        "items": [item.model_dump() for item in items],
        "overlaps": len(find_overlaps(items)),
    }


# --- Tool implementations ---

async def _push_layout(args: dict) -> list[TextContent]:
    """Push-down placement for one moved item."""
    try:
        items = _parse_items(args["items"])
        target = GridCell(column=args["column"], row=args["row"])
        moved_id = args["moved_id"]

        size = None
        if "width" in args or "height" in args:
            moved = next((it for it in items if it.id == moved_id), None)
            size = ItemSize(
                width=args.get("width", moved.width if moved else 1),
                height=args.get("height", moved.height if moved else 1),
            )
    except (KeyError, TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    result = compute_push_layout(
        items,
        moved_id,
        target,
        compact=args.get("compact", True),
        size=size,
    )
    return _json_result(_arrangement_payload(result))


async def _reflow_layout(args: dict) -> list[TextContent]:
    """Reorder placement for one moved item."""
    try:
        items = _parse_items(args["items"])
        target = GridCell(column=args["column"], row=args["row"])
        moved_id = args["moved_id"]
        columns = int(args["columns"])
    except (KeyError, TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    result = compute_reflow_layout(items, moved_id, target, columns)
    return _json_result(_arrangement_payload(result))


def _load_model(args: dict) -> tuple[Optional[LayoutModel], Optional[list[TextContent]]]:
    """Parse ``layout_yaml`` into a model, or build the error reply."""
    try:
        return parse_yaml(args["layout_yaml"]), None
    except KeyError as e:
        return None, [TextContent(type="text", text=f"Invalid input: missing {e}")]
    except ValueError as e:
        return None, [TextContent(type="text", text=f"Failed to parse layout YAML: {e}")]


async def _derive_layout(args: dict) -> list[TextContent]:
    model, error = _load_model(args)
    if error:
        return error
    try:
        columns = model.clamp_columns(int(args["columns"]))
    except (KeyError, TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    positions = derive_layout(model, columns)
    return _json_result({
        "status": "success",
        "columns": columns,
        "source": model.layout_source(columns),
        "positions": {item_id: cell.model_dump() for item_id, cell in positions.items()},
    })


async def _breakpoint_css(args: dict) -> list[TextContent]:
    model, error = _load_model(args)
    if error:
        return error

    options = BreakpointCSSOptions(
        cell_size=args.get("cell_size", BreakpointCSSOptions.cell_size),
        gap=args.get("gap", BreakpointCSSOptions.gap),
        selector_prefix=args.get("selector_prefix", "#"),
        selector_suffix=args.get("selector_suffix", ""),
        grid_selector=args.get("grid_selector", ".grid-container"),
    )
    descriptions = emit_layout_descriptions(model, options.cell_size, options.gap)
    return _json_result({
        "status": "success",
        "descriptions": descriptions.model_dump(),
        "css": generate_breakpoint_css(model, options),
    })


async def _save_layout(args: dict) -> list[TextContent]:
    model, error = _load_model(args)
    if error:
        return error
    try:
        columns = int(args["columns"])
        positions = {
            str(item_id): GridCell(column=cell["column"], row=cell["row"])
            for item_id, cell in args["positions"].items()
        }
    except (KeyError, TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    model.save_layout(columns, positions)
    return [TextContent(type="text", text=layout_to_yaml(model))]


async def _clear_override(args: dict) -> list[TextContent]:
    model, error = _load_model(args)
    if error:
        return error
    try:
        columns = int(args["columns"])
    except (KeyError, TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    model.clear_override(columns)
    return [TextContent(type="text", text=layout_to_yaml(model))]


async def _resize_item(args: dict) -> list[TextContent]:
    model, error = _load_model(args)
    if error:
        return error
    try:
        item_id = str(args["item_id"])
        size = ItemSize(width=args["width"], height=args["height"])
    except (KeyError, TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    if item_id not in model.items:
        return [TextContent(type="text", text=f"Item not found: {item_id}")]

    model.update_item_size(item_id, size)
    return [TextContent(type="text", text=layout_to_yaml(model))]


async def _render_preview(args: dict) -> list[TextContent]:
    """Render a layout at one column count to PNG."""
    _ensure_output_dir()

    model, error = _load_model(args)
    if error:
        return error
    try:
        columns = model.clamp_columns(int(args.get("columns", model.max_columns)))
    except (TypeError, ValueError) as e:
        return [TextContent(type="text", text=f"Invalid input: {e}")]

    filename = args.get("filename", str(uuid.uuid4())[:8])
    output_path = str(OUTPUT_DIR / f"{filename}.png")

    items = model.get_arrangement(columns)
    try:
        renderer = LayoutPreviewRenderer(scale=args.get("scale", 1.0), theme=args.get("theme", "dark"))
        renderer.render(
            items,
            columns,
            output_path=output_path,
            title=f"{columns} columns ({model.layout_source(columns)})",
        )
    except (OSError, ValueError) as e:
        logger.error(f"Preview rendering failed: {e}")
        return [TextContent(type="text", text=f"Rendering failed: {e}")]

    return _json_result({
        "status": "success",
        "path": output_path,
        "columns": columns,
        "items": len(items),
    })


def main():
    """Entry point for the MCP server."""
    import asyncio
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"Grid-MCP server starting, previews in {OUTPUT_DIR}")
    asyncio.run(_run())


async def _run():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
